"""Awinja SMS - FastAPI entrypoint."""
import logging
from contextlib import asynccontextmanager

from beanie.exceptions import RevisionIdWasChanged
from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import ServerSelectionTimeoutError

from awinja.config import settings
from awinja.db import db_shutdown, db_startup
from awinja.exceptions import InvalidPeriod, LedgerError, MissingFeeStructure
from awinja.seed import seed_admin
from awinja.api import auth, students, teachers, non_teaching_staff, fees
from awinja.api.deps import get_current_user

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

LEDGER_STATUS = {
    MissingFeeStructure: status.HTTP_404_NOT_FOUND,
    InvalidPeriod: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await db_startup()
        await seed_admin()
    except ServerSelectionTimeoutError as e:
        logger.error(
            "MongoDB is not running. Start it with: docker compose up -d (from project root)"
        )
        raise RuntimeError(
            "MongoDB connection failed. Start MongoDB (e.g. docker compose up -d)."
        ) from e
    yield
    await db_shutdown()


app = FastAPI(
    title=settings.app_name,
    description="Students, staff, fee payments and payroll for Awinja Education Centre",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": errors},
    )


@app.exception_handler(LedgerError)
async def ledger_exception_handler(request: Request, exc: LedgerError):
    status_code = LEDGER_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "code": exc.code},
    )


@app.exception_handler(RevisionIdWasChanged)
async def revision_conflict_handler(request: Request, exc: RevisionIdWasChanged):
    logger.warning("Concurrent update rejected on %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": "Record was changed by another request; reload and retry", "code": "conflict"},
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(students.router, prefix="/api/students", tags=["Students"], dependencies=[Depends(get_current_user)])
app.include_router(teachers.router, prefix="/api/teachers", tags=["Teachers"], dependencies=[Depends(get_current_user)])
app.include_router(non_teaching_staff.router, prefix="/api/non-teaching-staff", tags=["Non-Teaching Staff"], dependencies=[Depends(get_current_user)])
app.include_router(fees.router, prefix="/api/fees", tags=["Fees"], dependencies=[Depends(get_current_user)])


@app.get("/health")
def health():
    return {"status": "ok", "app": settings.app_name}
