"""
Core placeholder generation for the LQIP service.

This package contains:
- lqip: Pillow based image reduction to a tiny WebP/JPEG placeholder
- cache: a bounded, single-flight memo cache of placeholder data-URIs
"""
from lqip.core.lqip import (
    DEFAULT_RESIZE,
    DEFAULT_OUTPUT_FORMAT,
    PILLOW_FORMATS,
    compute_lqip_image,
    encoder_options,
    fit_inside,
    reduce_image
)

from lqip.core.cache import (
    LqipCache,
    get_default_cache,
    lqip_modern
)

__all__ = [
    # Image reduction
    'DEFAULT_RESIZE',
    'DEFAULT_OUTPUT_FORMAT',
    'PILLOW_FORMATS',
    'compute_lqip_image',
    'encoder_options',
    'fit_inside',
    'reduce_image',

    # Memo cache
    'LqipCache',
    'get_default_cache',
    'lqip_modern'
]
