"""
LQIP Placeholder API Application

This package implements a FastAPI application that turns an uploaded image
into a low quality image placeholder (LQIP):
- WebP or JPEG output at a fixed low quality
- Raw image bytes or a base64 data-URI with metadata
- An in-process memo cache for repeated placeholders
"""
import tempfile

# Create a temporary directory for file storage
TEMP_DIR = tempfile.mkdtemp(prefix="lqip_")

# Export the app instance
from lqip.api import app

__all__ = ['app', 'TEMP_DIR']
