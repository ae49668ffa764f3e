from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from menta.core.config import settings
from menta.core.exceptions import MentaError
from menta.core.logging import get_logger, setup_logging
from menta.db.database import close_db, init_db
from menta.auth.auth_routes import router as auth_router
from menta.auth.otp import router as otp_router
from menta.practice.patients import router as patients_router
from menta.practice.appointments import router as appointments_router
from menta.practice.dashboard import router as dashboard_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging()
    await init_db()
    logger.info("MENTA API started")
    yield
    # Shutdown
    await close_db()


app = FastAPI(
    title="MENTA API",
    description="Mental healthcare practice management: doctors, patients, appointments and assessments",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(MentaError)
async def menta_error_handler(request: Request, exc: MentaError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "reason": exc.reason}
    )


# Include routers
app.include_router(auth_router, prefix="/api/auth", tags=["Authentication"])
app.include_router(otp_router, prefix="/api/auth", tags=["Email Verification"])
app.include_router(patients_router, prefix="/api/patients", tags=["Patients"])
app.include_router(appointments_router, prefix="/api/appointments", tags=["Appointments"])
app.include_router(dashboard_router, prefix="/api/dashboard", tags=["Dashboard"])


@app.get("/")
async def root():
    return {"message": "MENTA API is running!"}


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "MENTA API"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "menta.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
