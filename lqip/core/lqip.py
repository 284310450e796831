"""
Low quality image placeholder (LQIP) generation.

An uploaded image is decoded with Pillow, rotated upright according to its
EXIF orientation, shrunk to fit a small bounding box and re-encoded as WebP
or JPEG at a very low quality. The encoded bytes are returned together with
a base64 data-URI that can be inlined directly into HTML or CSS.
"""
import base64
import logging
from io import BytesIO
from typing import Any, Dict, Optional, Tuple, Union

from fastapi.concurrency import run_in_threadpool
from PIL import Image, ImageOps

from lqip.errors import ImageProcessingError, InvalidFormatError
from lqip.models.lqip import LqipMetadata, LqipResult, ReductionOptions
from lqip.utils.file_handling import write_and_read_back
from lqip.utils.metrics import PerformanceTimer

# Set up logging
logger = logging.getLogger(__name__)

# Placeholder defaults
DEFAULT_RESIZE = 16
DEFAULT_OUTPUT_FORMAT = "webp"

# Pillow format name for each accepted output format
PILLOW_FORMATS = {
    "webp": "WEBP",
    "jpeg": "JPEG",
    "jpg": "JPEG",
}

# Encoder defaults per Pillow format
ENCODER_DEFAULTS = {
    "WEBP": {"quality": 20, "alpha_quality": 20},
    "JPEG": {"quality": 20},
}

# camelCase option names used by web image tooling -> Pillow keywords.
# None means Pillow has no equivalent and the option is dropped with a warning.
OPTION_ALIASES = {
    "alphaQuality": "alpha_quality",
    "chromaSubsampling": "subsampling",
    "effort": "method",
    "smartSubsample": None,
}

# Requested by default but not available in Pillow. libwebp smart (sharp YUV)
# subsampling has no Pillow save() keyword, so WebP output uses plain 4:2:0.
UNSUPPORTED_DEFAULTS = {
    "WEBP": {"smartSubsample": True},
}

# Unsupported options already reported, so each is logged once per process
_warned_options = set()


def _pillow_format(output_format: str) -> str:
    try:
        return PILLOW_FORMATS[output_format]
    except (KeyError, TypeError):
        raise InvalidFormatError(output_format)


def encoder_options(pillow_format: str, output_options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Build the Pillow save() keywords for a format.

    Args:
        pillow_format: Pillow format name ("WEBP" or "JPEG")
        output_options: Overrides, by Pillow keyword or camelCase alias

    Returns:
        Keyword arguments for Image.save

    Options Pillow cannot express (smartSubsample for WebP) are dropped and
    reported once at WARNING.
    """
    options = dict(ENCODER_DEFAULTS[pillow_format])
    unsupported = dict(UNSUPPORTED_DEFAULTS.get(pillow_format, {}))
    for name, value in (output_options or {}).items():
        if name in OPTION_ALIASES:
            mapped = OPTION_ALIASES[name]
            if mapped is None:
                unsupported[name] = value
                continue
            name = mapped
        options[name] = value

    for name, value in unsupported.items():
        if value and name not in _warned_options:
            _warned_options.add(name)
            logger.warning(f"Encoder option {name!r} is not supported by Pillow and is ignored")
    return options


def fit_inside(size: Tuple[int, int], box: Tuple[int, int]) -> Tuple[int, int]:
    """
    Scale size so that it fits inside box, preserving the aspect ratio.

    Each side is rounded to the nearest pixel and is at least 1.
    """
    width, height = size
    box_width, box_height = box
    scale = min(box_width / width, box_height / height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def _prepare_mode(img: Image.Image, pillow_format: str) -> Image.Image:
    """Convert to a mode the target encoder accepts."""
    if pillow_format == "JPEG":
        return img if img.mode in ("RGB", "L") else img.convert("RGB")

    has_alpha = img.mode in ("RGBA", "LA", "PA") or (
        img.mode == "P" and "transparency" in img.info
    )
    target = "RGBA" if has_alpha else "RGB"
    return img if img.mode == target else img.convert(target)


def _resize(
    img: Image.Image,
    resize: Union[int, Tuple[int, int]],
    original_size: Tuple[int, int]
) -> Image.Image:
    if isinstance(resize, (tuple, list)):
        # Explicit dimensions: cover the box and center crop
        return ImageOps.fit(img, tuple(resize), method=Image.Resampling.LANCZOS)

    box = (min(original_size[0], resize), min(original_size[1], resize))
    target = fit_inside(img.size, box)
    if target == img.size:
        return img
    return img.resize(target, Image.Resampling.LANCZOS)


def reduce_image(input_data: bytes, options: ReductionOptions) -> LqipResult:
    """
    Reduce an image to a placeholder (blocking).

    Args:
        input_data: Raw bytes of the uploaded image
        options: Resize target, output format and encoder overrides

    Returns:
        LqipResult with the encoded bytes and metadata

    Raises:
        InvalidFormatError: If the output format is not webp, jpeg or jpg
        ImageProcessingError: If Pillow cannot decode or encode the image
        OSError: If the temporary file cannot be written or read
    """
    output_format = options.output_format
    pillow_format = _pillow_format(output_format)
    save_options = encoder_options(pillow_format, options.output_options)

    resize = options.resize
    if isinstance(resize, (tuple, list)):
        if min(resize) < 1:
            raise ValueError(f"Resize dimensions must be positive, got {resize}")
    elif resize < 1:
        raise ValueError(f"Resize bound must be positive, got {resize}")

    timer = PerformanceTimer()
    with timer:
        try:
            with Image.open(BytesIO(input_data)) as img:
                img.load()
                # Stored dimensions, before orientation is applied
                original_width, original_height = img.size

                upright = ImageOps.exif_transpose(img)
                upright = _prepare_mode(upright, pillow_format)
                reduced = _resize(upright, resize, (original_width, original_height))

                buffer = BytesIO()
                reduced.save(buffer, format=pillow_format, **save_options)
                width, height = reduced.size
        except (OSError, ValueError, KeyError, EOFError, SyntaxError,
                Image.DecompressionBombError) as e:
            logger.error(f"Failed to process image ({len(input_data)} bytes): {e}")
            raise ImageProcessingError(f"Image processing failed: {e}") from e

    content = write_and_read_back(buffer.getvalue(), suffix=f".{output_format}")
    encoded = base64.b64encode(content).decode("ascii")

    logger.debug(
        f"Reduced {original_width}x{original_height} to {width}x{height} {output_format} "
        f"({len(content)} bytes) in {timer.execution_time:.4f}s"
    )

    return LqipResult(
        content=content,
        metadata=LqipMetadata(
            original_width=original_width,
            original_height=original_height,
            width=width,
            height=height,
            type=output_format,
            data_uri_base64=f"data:image/{output_format};base64,{encoded}",
        ),
    )


async def compute_lqip_image(
    input_data: bytes,
    resize: Union[int, Tuple[int, int]] = DEFAULT_RESIZE,
    output_format: str = DEFAULT_OUTPUT_FORMAT,
    output_options: Optional[Dict[str, Any]] = None
) -> LqipResult:
    """
    Compute a placeholder for an image without blocking the event loop.

    Args:
        input_data: Raw bytes of the uploaded image
        resize: Bound applied to both axes (fit inside), or explicit (width, height)
        output_format: webp, jpeg or jpg
        output_options: Encoder overrides for the chosen format

    Returns:
        LqipResult with the encoded bytes and metadata
    """
    options = ReductionOptions(
        resize=resize,
        output_format=output_format,
        output_options=output_options,
    )
    return await run_in_threadpool(reduce_image, input_data, options)
