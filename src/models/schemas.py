"""
Pydantic Models and Schemas
===========================

Core data models for render descriptors, inbound events, response envelopes and
rendered artifacts. Descriptors are immutable once validated.
"""

from typing import Optional, List, Dict, Any
from enum import Enum

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic_core import PydanticCustomError


# Enums
class OutputType(str, Enum):
    """Artifact output types."""
    PNG = "png"
    JPEG = "jpeg"
    PDF = "pdf"
    ZIP = "zip"

    @property
    def content_type(self) -> str:
        return _CONTENT_TYPES[self]

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @property
    def is_image(self) -> bool:
        return self in (OutputType.PNG, OutputType.JPEG)


_CONTENT_TYPES = {
    OutputType.PNG: "image/png",
    OutputType.JPEG: "image/jpeg",
    OutputType.PDF: "application/pdf",
    OutputType.ZIP: "application/zip",
}

_EXTENSIONS = {
    OutputType.PNG: "png",
    OutputType.JPEG: "jpg",
    OutputType.PDF: "pdf",
    OutputType.ZIP: "zip",
}


class BodyEncoding(str, Enum):
    """How the response envelope flags a successful body."""
    DEFAULT = "default"
    BASE64 = "base64"


# Descriptor Models
class Viewport(BaseModel):
    """Viewport dimensions in CSS pixels."""
    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0, description="Viewport width")
    height: int = Field(..., gt=0, description="Viewport height")


def _descriptor_error(message: str) -> PydanticCustomError:
    return PydanticCustomError("invalid_descriptor", message)


class RenderDescriptor(BaseModel):
    """Validated description of one rendering job.

    A descriptor is either a warm-up (``warm`` with no output type and no source),
    a single page render (png, jpeg or pdf with exactly one of ``url``/``content``),
    or a zip batch whose ``pages`` are themselves single page descriptors.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    url: Optional[str] = Field(None, description="Page to navigate to")
    content: Optional[str] = Field(None, description="Raw markup to render")
    output_type: Optional[OutputType] = Field(
        None,
        validation_alias=AliasChoices("type", "outputType", "output_type"),
        description="Artifact type",
    )
    full_page: bool = Field(False, alias="fullPage", description="Capture the scrollable page")
    viewport: Optional[Viewport] = Field(None, description="Viewport dimensions")
    jpeg_quality: Optional[int] = Field(
        None, ge=0, le=100, alias="jpegQuality", description="JPEG quality (0-100)"
    )
    selector: Optional[str] = Field(None, description="Crop the capture to this element")
    script: Optional[str] = Field(None, description="Code evaluated in the page before capture")
    save_filename: Optional[str] = Field(
        None, alias="saveFilename", description="Archive entry name in batch mode"
    )
    encoding: BodyEncoding = Field(BodyEncoding.DEFAULT, description="Envelope body flag")
    pages: Optional[List["RenderDescriptor"]] = Field(None, description="Batch entries")
    warm: bool = Field(False, description="Only ensure an automation session exists")

    @field_validator("full_page", "encoding", "warm", mode="before")
    @classmethod
    def null_to_default(cls, v: Any, info: ValidationInfo) -> Any:
        """Treat an explicit null as the field default."""
        if v is None:
            return cls.model_fields[info.field_name].default
        return v

    @field_validator("url", "content", "selector", "script", "save_filename", mode="after")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        """Treat empty strings as absent."""
        if v is not None and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def check_invariants(self) -> "RenderDescriptor":
        """Enforce source, output type and batch rules."""
        if self.url is not None and self.content is not None:
            raise _descriptor_error("Only one of 'url' or 'content' may be given")

        if self.output_type is None:
            if not self.warm:
                raise _descriptor_error("Missing 'type'; expected one of png, jpeg, pdf, zip")
            if self.has_source:
                raise _descriptor_error("A warm-up request takes no 'url' or 'content'")
            return self

        if self.output_type is OutputType.ZIP:
            if not self.pages:
                raise _descriptor_error("A zip request requires a non-empty 'pages' list")
            for index, page in enumerate(self.pages):
                if page.output_type is OutputType.ZIP:
                    raise _descriptor_error(f"pages[{index}]: zip entries cannot be nested")
                if page.is_warm_up:
                    raise _descriptor_error(f"pages[{index}]: warm-up entries cannot be rendered")
            return self

        if not self.has_source:
            raise _descriptor_error("Missing 'url' or 'content'")
        return self

    @property
    def has_source(self) -> bool:
        return self.url is not None or self.content is not None

    @property
    def is_warm_up(self) -> bool:
        return self.warm and self.output_type is None

    @property
    def is_batch(self) -> bool:
        return self.output_type is OutputType.ZIP


RenderDescriptor.model_rebuild()


# Results
class Artifact(BaseModel):
    """Rendered output bytes plus content type."""
    data: bytes = Field(..., description="Artifact bytes", exclude=True)
    content_type: str = Field(..., description="MIME type of the artifact")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Render metadata")

    @property
    def size(self) -> int:
        return len(self.data)


# Transport Models
class InboundEvent(BaseModel):
    """Request as handed over by the HTTP adapter."""
    model_config = ConfigDict(populate_by_name=True)

    method: str = Field(..., description="HTTP method")
    path: str = Field("/", description="Request path")
    query_parameters: Dict[str, str] = Field(
        default_factory=dict, alias="queryParameters", description="Query string parameters"
    )
    body: Optional[str] = Field(None, description="Raw request body")

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        return v.upper()

    @field_validator("query_parameters", mode="before")
    @classmethod
    def default_query(cls, v: Any) -> Any:
        return {} if v is None else v


class ResponseEnvelope(BaseModel):
    """Response handed back to the HTTP adapter.

    ``body`` is always base64 text. ``is_body_base64`` tells the adapter whether
    to decode it before writing; it is false when the caller asked for
    ``encoding=base64`` and wants the text itself.
    """
    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(..., alias="statusCode", description="HTTP status code")
    headers: Dict[str, str] = Field(default_factory=dict, description="Response headers")
    body: str = Field(..., description="Base64 body")
    is_body_base64: bool = Field(True, alias="isBodyBase64", description="Adapter must decode")
