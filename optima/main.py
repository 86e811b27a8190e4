import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from optima.config import CORS_ORIGINS, LOG_LEVEL, SEED_DEMO_DATA
from optima.database import engine
from optima.exceptions import SchedulingError, ValidationError, NotFound, ConcurrencyConflict, PersistenceFailure
from optima.models import Base
from optima.routes import projects, schedule
from optima.seed import seed_demo_data
from optima.services.scheduling_service import scheduling_service

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)

if SEED_DEMO_DATA:
    seed_demo_data(scheduling_service.store)

# Create FastAPI app
app = FastAPI(
    title="Optima Scheduling API",
    description="Revenue-maximizing project scheduling with interchangeable allocation strategies",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Include routers
app.include_router(projects.router, prefix="/api/projects", tags=["projects"])
app.include_router(schedule.router, prefix="/api/schedule", tags=["schedule"])

ERROR_STATUS_CODES = {
    ValidationError: 400,
    NotFound: 404,
    ConcurrencyConflict: 409,
    PersistenceFailure: 503,
}


@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    status_code = next(
        (code for error_class, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_class)),
        500,
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.get("/")
def read_root():
    """Root endpoint with API information"""
    return {
        "message": "Welcome to Optima Scheduling API",
        "version": "1.0.0",
        "features": [
            "Project intake (CRUD)",
            "Four interchangeable scheduling strategies",
            "What-if predictions across every strategy",
            "Transactional schedule execution",
            "Revenue stats and 30-day analytics"
        ],
        "endpoints": {
            "projects": "CRUD /api/projects/* - Project management",
            "schedule": "GET /api/schedule/current - Schedule for the current strategy",
            "strategy": "GET|POST /api/schedule/strategy - Read or select the current strategy",
            "predictions": "GET /api/schedule/predictions - Compare every strategy",
            "execute": "POST /api/schedule/execute - Commit the current schedule",
            "stats": "GET /api/schedule/stats, /api/schedule/analytics - Revenue summaries"
        },
        "swagger_ui": "/docs - Interactive API documentation",
        "redoc": "/redoc - Alternative API documentation"
    }


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running"}

# This allows running the app directly with: python -m optima.main
if __name__ == "__main__":
    import uvicorn
    print("🚀 Starting Optima Scheduling API...")
    print("📖 API Documentation: http://localhost:8000/docs")
    print("🔍 Health Check: http://localhost:8000/health")
    uvicorn.run("optima.main:app", host="0.0.0.0", port=8000, reload=True)
