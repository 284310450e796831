"""
Data models for the placeholder API.

This module provides Pydantic models for responses and for the result of an
image reduction.
"""
from lqip.models.lqip import (
    LqipMetadata,
    LqipResult,
    ReductionOptions
)

__all__ = [
    'LqipMetadata',
    'LqipResult',
    'ReductionOptions'
]
