"""
Placeholder generation endpoint.

Accepts an image either as a form upload or as a raw `image/*` body and
answers with the placeholder bytes or its JSON metadata, depending on the
`accept` header.
"""
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from starlette.datastructures import UploadFile

from lqip.config import Settings, get_settings
from lqip.core.lqip import DEFAULT_OUTPUT_FORMAT, DEFAULT_RESIZE, compute_lqip_image
from lqip.errors import AuthError, BadRequestError, ConfigError
from lqip.models.lqip import LqipMetadata

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["Placeholder"])

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def check_api_key(candidate: Optional[str], api_key: str) -> None:
    """Raise AuthError unless candidate matches the server key."""
    if not isinstance(candidate, str) or not candidate:
        logger.warning("Rejected request without API key")
        raise AuthError("Invalid API Key")
    if not hmac.compare_digest(candidate.encode("utf-8"), api_key.encode("utf-8")):
        logger.warning("Rejected request with mismatched API key")
        raise AuthError("Invalid API Key")


def _form_text(value, default: Optional[str] = None) -> Optional[str]:
    return value if isinstance(value, str) and value else default


@router.post(
    "/",
    response_model=LqipMetadata,
    responses={
        201: {
            "description": "Raw placeholder bytes, returned when `accept` is an image type",
            "content": {"image/webp": {}, "image/jpeg": {}},
        },
        400: {"description": "Missing file, unsupported content type or output format"},
        401: {"description": "Missing or invalid API key"},
        500: {"description": "Server API key not configured or image processing failed"},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {
                "multipart/form-data": {
                    "schema": {
                        "type": "object",
                        "required": ["file", "apiKey"],
                        "properties": {
                            "file": {"type": "string", "format": "binary"},
                            "outputFormat": {"type": "string", "enum": ["webp", "jpeg", "jpg"]},
                            "apiKey": {"type": "string"},
                        },
                    }
                },
                "image/*": {"schema": {"type": "string", "format": "binary"}},
            },
        }
    },
)
async def create_placeholder(request: Request, settings: Settings = Depends(get_settings)):
    """
    Generate a low quality image placeholder.

    - **multipart/form-data** or **application/x-www-form-urlencoded**: fields
      `file`, `outputFormat` (default webp) and `apiKey`
    - **image/\\***: the body is the image; `x-api-key` and `x-output-format` headers

    Returns the raw image (201) when `accept` starts with `image/`, otherwise
    the placeholder metadata as JSON.
    """
    api_key = settings.api_key
    if not api_key:
        logger.error("API_KEY is not configured")
        raise ConfigError("App not set up correctly")

    content_type = request.headers.get("content-type", "")
    media_type = content_type.split(";")[0].strip().lower()

    if media_type in FORM_CONTENT_TYPES:
        # Closing the form releases the spooled upload files
        async with request.form() as form:
            output_format = _form_text(form.get("outputFormat"), DEFAULT_OUTPUT_FORMAT)
            check_api_key(form.get("apiKey"), api_key)

            upload = form.get("file")
            if not isinstance(upload, UploadFile):
                raise BadRequestError("No file found")
            input_data = await upload.read()
    elif media_type.startswith("image/"):
        check_api_key(request.headers.get("x-api-key"), api_key)
        output_format = request.headers.get("x-output-format") or DEFAULT_OUTPUT_FORMAT
        input_data = await request.body()
    else:
        logger.warning(f"Rejected request with content type {content_type!r}")
        raise BadRequestError("Invalid content type")

    logger.info(f"Generating {output_format} placeholder from {media_type} upload ({len(input_data)} bytes)")

    lqip = await compute_lqip_image(
        input_data,
        resize=DEFAULT_RESIZE,
        output_format=output_format,
    )

    accept = request.headers.get("accept", "")
    if accept.startswith("image/"):
        return Response(
            content=lqip.content,
            status_code=201,
            media_type=f"image/{output_format}",
            headers={"content-length": str(len(lqip.content))},
        )

    return lqip.metadata
