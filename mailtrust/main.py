import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from mailtrust.config import settings
from mailtrust.database import init_db
from mailtrust.api import routes

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"🚀 Starting {settings.APP_NAME}...")
    init_db()
    logger.info("✓ Database initialized")
    yield
    # Shutdown
    logger.info(f"👋 Shutting down {settings.APP_NAME}...")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

def format_validation_errors(errors) -> str:
    """Flatten pydantic errors into one readable sentence"""
    parts = []
    for err in errors:
        field = ".".join(str(loc) for loc in err.get("loc", ()) if loc not in ("body", "query"))
        message = err.get("msg", "Invalid value")
        parts.append(f'{message} at "{field}"' if field else message)
    return "Validation error: " + "; ".join(parts)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": format_validation_errors(exc.errors())})

# Include routers
app.include_router(routes.router, prefix=settings.API_PREFIX, tags=["Verification"])

@app.get("/")
def root():
    return {
        "message": f"{settings.APP_NAME} API",
        "version": settings.VERSION,
        "docs": "/docs"
    }

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("mailtrust.main:app", host="0.0.0.0", port=8000, reload=False)
