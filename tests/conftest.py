"""
pytest configuration and shared fixtures
"""
import io
import os

import pytest
from fastapi.testclient import TestClient
from PIL import Image

# Test environment, set before the application is imported
os.environ.setdefault("API_KEY", "test_api_key")

from lqip import app  # noqa: E402
from lqip.config import Settings, get_settings  # noqa: E402

TEST_API_KEY = "test_api_key"


def make_image(size=(100, 100), mode="RGB", color="red", fmt="PNG", orientation=None) -> bytes:
    """Encode a solid color test image, optionally tagged with an EXIF orientation."""
    img = Image.new(mode, size, color=color)
    buf = io.BytesIO()
    if orientation is not None:
        exif = Image.Exif()
        exif[0x0112] = orientation
        img.save(buf, format=fmt, exif=exif.tobytes())
    else:
        img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return make_image((100, 100), fmt="PNG")


@pytest.fixture
def jpeg_bytes():
    return make_image((120, 80), color="blue", fmt="JPEG")


@pytest.fixture
def settings():
    return Settings(_env_file=None, api_key=TEST_API_KEY)


@pytest.fixture
def client(settings):
    """Test client with settings injected through the dependency override."""
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def temp_files():
    """Return a callable listing placeholder temp files currently on disk."""
    from lqip import TEMP_DIR

    def _list():
        if not os.path.isdir(TEMP_DIR):
            return []
        return [name for name in os.listdir(TEMP_DIR) if name.startswith("temp_")]

    return _list
