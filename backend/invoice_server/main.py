"""
Invoice Server: CRUD backend for invoicing.

ARCHITECTURE:
- FastAPI: routing, auth gate (JWT bearer), request validation (pydantic)
- SQLAlchemy: one session per request, explicit unit of work per write
- Relational DB (SQLite for development): source of truth, UNIQUE on
  invoices.invoice_number is the final guard for invoice numbering

Resources: users, clients, bill-from addresses, invoices (+ items),
payment details. Every error leaves as {"error", "message"?, "details"?}.
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from invoice_server.api.routes import bill_from_addresses, clients, invoices, payment_details, users
from invoice_server.core.config import settings
from invoice_server.core.exceptions import install_exception_handlers
from invoice_server.db.init_db import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup: create tables (and the dev user when API_SECURE is off).
    Shutdown: nothing to stop; the engine's pool is released with the process.
    """
    if not settings.API_SECURE:
        logger.warning("=" * 70)
        logger.warning("API_SECURE is disabled!")
        logger.warning("Authentication is bypassed; every request acts as user 1.")
        logger.warning("This should only be used for development purposes.")
        logger.warning("=" * 70)

    logger.info("Initializing database...")
    init_db()
    logger.info(f"Database initialized ({settings.ENVIRONMENT})")

    yield

    logger.info("Invoice Server shutting down")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Users, clients, bill-from addresses, invoices and payment details.",
    version=settings.VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials="*" not in settings.CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,  # Cache preflight for 10 minutes
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response


# SECURITY: Add security headers middleware
@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"  # Prevent MIME sniffing
    response.headers["X-Frame-Options"] = "DENY"  # Prevent clickjacking
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


install_exception_handlers(app)

app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(clients.router, prefix="/api/clients", tags=["clients"])
app.include_router(invoices.router, prefix="/api/invoices", tags=["invoices"])
app.include_router(bill_from_addresses.router, prefix="/api/bill-from-addresses", tags=["bill-from-addresses"])
app.include_router(payment_details.router, prefix="/api/payment-details", tags=["payment-details"])


@app.get("/health")
def health():
    body = {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": settings.ENVIRONMENT,
        "version": settings.VERSION,
        "apiSecure": settings.API_SECURE,
    }
    if not settings.API_SECURE:
        body["warning"] = "Authentication is disabled"
    return body


@app.get("/")
def root():
    return {
        "message": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "documentation": "/docs",
        "endpoints": {
            "health": "/health",
            "documentation": "/docs",
            "users": "/api/users",
            "clients": "/api/clients",
            "invoices": "/api/invoices",
            "billFromAddresses": "/api/bill-from-addresses",
            "paymentDetails": "/api/payment-details",
        },
    }
