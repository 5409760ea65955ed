import logging
import logging.config
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import init_db
from api.applications import router as applications_router
from api.calculator import router as calculator_router
from api.documents import router as documents_router
from api.rates import router as rates_router
from services.errors import (
    IncompletePrerequisites,
    InvalidTransition,
    LoanDeskError,
    NotFound,
    UnknownPurpose,
    ValidationError,
)

logging.config.dictConfig({
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"}
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {"level": settings.log_level.upper(), "handlers": ["console"]},
})

logger = logging.getLogger("loan_desk")

_STATUS_CODES = {
    ValidationError: 400,
    UnknownPurpose: 400,
    NotFound: 404,
    InvalidTransition: 409,
    IncompletePrerequisites: 409,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("%s started", settings.app_name)
    yield


app = FastAPI(
    title=settings.app_name,
    description="Loan application lifecycle, rate table and EMI calculator API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(LoanDeskError)
async def loan_desk_error_handler(request: Request, exc: LoanDeskError):
    status_code = _STATUS_CODES.get(type(exc), 400)
    return JSONResponse(
        status_code=status_code,
        content={"error": type(exc).__name__, "detail": exc.detail, **exc.extra},
    )


app.include_router(applications_router)
app.include_router(documents_router)
app.include_router(rates_router)
app.include_router(calculator_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
