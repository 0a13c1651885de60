# finance_tracker/main.py

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from . import api, auth, views
from .config import Config
from .database import Base, SessionLocal, engine
from .default_categories import seed_default_categories
from .errors import FinanceTrackerError, InternalError
from .middleware import SecurityHeadersMiddleware, limiter

logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("finance_tracker")


def init_db():
    # Create tables if not already created
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_default_categories(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Database ready at %s", engine.url.render_as_string(hide_password=True))
    yield


app = FastAPI(title="Finance Tracker", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[Config.FRONTEND_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Session Middleware backs the HTML views; the JSON API uses bearer tokens
app.add_middleware(SessionMiddleware, secret_key=Config.SECRET_KEY, max_age=24 * 60 * 60)

# application-wide request budget per client address
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

if Config.SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware)

app.mount(
    "/static",
    StaticFiles(directory=os.path.join(os.path.dirname(__file__), "static")),
    name="static",
)

app.include_router(api.router)
app.include_router(auth.router)
app.include_router(views.router)


@app.exception_handler(FinanceTrackerError)
def handle_app_error(request: Request, exc: FinanceTrackerError):
    headers = None
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code, headers=headers)


@app.exception_handler(RequestValidationError)
def handle_request_validation(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        # drop the "body"/"query"/"path" prefix FastAPI puts in front of the field
        loc = [str(part) for part in err["loc"][1:]] or [str(err["loc"][0])]
        errors.append({"field": ".".join(loc), "message": err["msg"], "location": err["loc"][0]})
    return JSONResponse({"errors": errors}, status_code=status.HTTP_400_BAD_REQUEST)


@app.exception_handler(SQLAlchemyError)
def handle_database_error(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(InternalError().to_dict(), status_code=500)


@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(InternalError().to_dict(), status_code=500)


# called synchronously from SlowAPIMiddleware, keep it a plain def
@app.exception_handler(RateLimitExceeded)
def handle_rate_limit(request: Request, exc: RateLimitExceeded):
    client = request.client.host if request.client else "-"
    logger.warning("Rate limit hit by %s on %s", client, request.url.path)
    return JSONResponse(
        {"error": "Too many requests, please try again later."},
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
    )
