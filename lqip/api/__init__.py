"""
API module for the LQIP placeholder application.
"""
import logging
import shutil
import time
import os
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from lqip import TEMP_DIR
from lqip.api.placeholder import router as placeholder_router
from lqip.errors import LqipError

# Set up logging
logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# Create FastAPI app
app = FastAPI(
    title="LQIP Placeholder API",
    description="""
    API for generating low quality image placeholders (LQIP):
    - WebP or JPEG output, 16px bounding box, low quality
    - Raw image bytes or base64 data-URI with metadata

    Intended for web frontends that show an instant preview while the full image loads.
    """,
    version=API_VERSION
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(placeholder_router)


@app.exception_handler(LqipError)
async def lqip_exception_handler(request: Request, exc: LqipError):
    """Report service errors with their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc)}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unexpected errors."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "An unexpected error occurred", "error": str(exc)}
    )


# Health check endpoints
@app.get("/health")
async def health_check():
    """Check if the API is running."""
    return {"status": "healthy", "version": API_VERSION}


@app.get("/health/detailed")
async def detailed_health_check():
    """
    Provides detailed health information including system metrics and codec status.
    """
    import platform
    import PIL
    from PIL import features
    from lqip.core.cache import get_default_cache
    from lqip.utils.metrics import get_cpu_mem

    # System info
    cpu_mem = get_cpu_mem()
    system_info = {
        "cpu_usage": cpu_mem["cpu_usage"],
        "memory_usage": cpu_mem["memory_usage"],
        "python_version": platform.python_version(),
        "platform": platform.platform()
    }

    # Check codecs
    codec_status = {
        "pillow_version": PIL.__version__,
        "webp": features.check("webp"),
        "jpeg": features.check("jpg"),
    }

    # Check temp directory
    temp_status = {"exists": os.path.isdir(TEMP_DIR)}
    if temp_status["exists"]:
        temp_status["writable"] = os.access(TEMP_DIR, os.W_OK)
        try:
            temp_status["free_space_mb"] = shutil.disk_usage(TEMP_DIR).free / (1024 * 1024)
        except OSError as e:
            temp_status["space_error"] = str(e)

    cache = get_default_cache()

    return {
        "status": "healthy" if codec_status["webp"] and codec_status["jpeg"] else "degraded",
        "version": API_VERSION,
        "system": system_info,
        "codecs": codec_status,
        "temp_directory": temp_status,
        "cache": {"entries": len(cache), "max_entries": cache.max_entries},
        "timestamp": time.time()
    }


# Cleanup event handler
@app.on_event("shutdown")
async def cleanup():
    """Clean up temporary files when the application shuts down."""
    logger.info(f"Cleaning up temporary directory: {TEMP_DIR}")
    shutil.rmtree(TEMP_DIR, ignore_errors=True)
