"""
FastAPI application entry point
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resume_analyzer.app.api.v1 import auth, kv, resume, trial
from resume_analyzer.app.api.v1.payment.routes import router as payment_router
from resume_analyzer.app.core.config import get_cors_origins, settings
from resume_analyzer.app.core.logging_config import setup_logging
from resume_analyzer.app.db.base import Base
from resume_analyzer.app.db.session import engine

# Import models so they register with Base.metadata
import resume_analyzer.app.models  # noqa: F401

logger = setup_logging()


def init_db() -> None:
    """Create missing tables for local/dev runs. Production uses the migration scripts."""
    if not settings.auto_create_tables:
        return
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error("Database error during table creation: %s", e)


init_db()

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Resume upload, preview and ATS analysis API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["authentication"])
app.include_router(resume.router, prefix="/api/resume", tags=["resume"])
app.include_router(trial.router, prefix="/api/trial", tags=["trial"])
app.include_router(kv.router, prefix="/api/kv", tags=["kv"])
app.include_router(payment_router, prefix="/api/payment", tags=["payment"])


@app.get("/")
def read_root():
    """Root endpoint"""
    return {"message": settings.app_name, "version": settings.app_version}


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
