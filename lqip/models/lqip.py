"""
Models for placeholder generation.

Field names are snake_case in Python and camelCase on the wire, matching
what frontend consumers of the JSON response expect.
"""
from typing import Any, Dict, Optional, Tuple, Union
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LqipMetadata(BaseModel):
    """Metadata describing a generated placeholder"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    original_width: int = Field(..., description="Width of the uploaded image in pixels")
    original_height: int = Field(..., description="Height of the uploaded image in pixels")
    width: int = Field(..., description="Width of the placeholder in pixels")
    height: int = Field(..., description="Height of the placeholder in pixels")
    type: str = Field(..., description="Output format of the placeholder (webp, jpeg or jpg)")
    data_uri_base64: str = Field(
        ...,
        alias="dataURIBase64",
        description="Placeholder as a data:image/<type>;base64,... URI"
    )


class LqipResult(BaseModel):
    """Encoded placeholder bytes together with their metadata"""
    content: bytes = Field(..., description="Encoded placeholder image")
    metadata: LqipMetadata


class ReductionOptions(BaseModel):
    """Options controlling how an image is reduced"""
    resize: Union[int, Tuple[int, int]] = Field(
        16,
        description="Bounding box size applied to both axes, or an explicit (width, height)"
    )
    output_format: str = Field("webp", description="Output format: webp, jpeg or jpg")
    output_options: Optional[Dict[str, Any]] = Field(
        None, description="Encoder options overriding the format defaults"
    )
