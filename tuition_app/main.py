from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime

from tuition_app.config import get_settings
from tuition_app.logger import logger
from tuition_app.database.database import SessionLocal, TuitionPost, TutorProfile, init_db
from tuition_app.identity import init_identity_provider
from tuition_app.sample_data import sample_tuitions, sample_tutors

### ROUTERS
from tuition_app.routers.admin import router as admin_router
from tuition_app.routers.application import router as application_router
from tuition_app.routers.authentication import router as auth_router, limiter
from tuition_app.routers.payment import router as payment_router
from tuition_app.routers.tuition import router as tuition_router
from tuition_app.routers.tutor import router as tutor_router
from tuition_app.routers.users import router as user_router


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its response status and how long it took."""
    async def dispatch(self, request: Request, call_next):
        started = datetime.now()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"{request.method} {request.url.path} failed")
            raise

        elapsed = (datetime.now() - started).total_seconds()
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {elapsed:.3f}s")
        return response

app = FastAPI(
    title=get_settings().app_name,
    version=get_settings().app_version,
    openapi_url="/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add logging middleware
app.add_middleware(LoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'], # The frontend is served from a different origin
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
    max_age=3600
)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or incomplete request bodies are client errors (400), like the hand-written checks."""
    logger.info(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

# Include routers
app.include_router(auth_router)
app.include_router(user_router)
app.include_router(tuition_router)
app.include_router(tutor_router)
app.include_router(application_router)
app.include_router(payment_router)
app.include_router(admin_router)

@app.get("/")
def read_root():
    """
    Root endpoint returning API welcome message.

    Returns:
    - dict: Welcome message
    """
    return {"message": "Tution is coming.."}

def seed_sample_data(db):
    """Fill empty tuition and tutor tables with sample records when SEED_SAMPLE_DATA is set."""
    seed = get_settings().seed_sample_data

    if db.query(TuitionPost).count() == 0:
        if seed:
            db.add_all([TuitionPost(**tuition) for tuition in sample_tuitions])
            logger.info(f"Inserted {len(sample_tuitions)} sample tuition posts.")
        else:
            logger.info("Skipped inserting sample tuition posts.")

    if db.query(TutorProfile).count() == 0:
        if seed:
            db.add_all([TutorProfile(**tutor) for tutor in sample_tutors])
            logger.info(f"Inserted {len(sample_tutors)} sample tutor profiles.")
        else:
            logger.info("Skipped inserting sample tutor profiles.")

    db.commit()

@app.on_event("startup")
async def startup_event():
    """
    Application startup handler.
    Creates tables, initializes the identity provider and seeds sample data.
    """
    logger.info("Server starting up...")
    init_identity_provider()

    db = SessionLocal()
    try:
        init_db()
        seed_sample_data(db)
        logger.info("Connected to the database.")
    except SQLAlchemyError:
        logger.exception("Database initialization failed. Check DB_URL and database credentials.")
    finally:
        db.close()

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Server shutting down...")

if __name__ == '__main__':
    import uvicorn
    uvicorn.run(app, host=get_settings().app_host, port=get_settings().app_port)
