from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from pydantic import ValidationError
from casebridge.utils import (
    CaseBridgeError,
    Conflict,
    Forbidden,
    InvalidSignature,
    InvalidState,
    NotFound,
    PaymentProcessorError,
    PaymentProviderUnavailable,
)
from casebridge_api.api import auth, cases, files, payments, quotes
from casebridge_api.database import init_db
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = (
    (NotFound, 404),
    (Forbidden, 403),
    (InvalidState, 400),
    (Conflict, 409),
    (InvalidSignature, 400),
    (PaymentProcessorError, 502),
    (PaymentProviderUnavailable, 503),
)


def status_code_for(exc: CaseBridgeError) -> int:
    for error_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_type):
            return status_code
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("[backend] CaseBridge backend starting...")
    await init_db()
    logger.info("[backend] Database initialized")
    yield
    # Shutdown
    logger.info("[backend] CaseBridge backend shutting down...")


app = FastAPI(
    title="CaseBridge API",
    description="Marketplace connecting clients with lawyers",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CaseBridgeError)
async def casebridge_error_handler(request: Request, exc: CaseBridgeError):
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"[backend] {request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors(include_url=False, include_context=False))},
    )


@app.get("/")
async def root():
    return {"message": "CaseBridge API v0.1.0"}


@app.get("/health")
async def health():
    return {"status": "ok"}


# Include routers
app.include_router(auth.router)
app.include_router(cases.router)
app.include_router(quotes.router)
app.include_router(payments.router)
app.include_router(files.router)
