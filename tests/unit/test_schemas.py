"""
Unit Tests for Render Descriptor Models
=======================================

Validation rules for render descriptors, transport models and output types.
"""

import pytest
from pydantic import ValidationError

from src.models.schemas import (
    BodyEncoding,
    InboundEvent,
    OutputType,
    RenderDescriptor,
    ResponseEnvelope,
)


class TestOutputType:
    """Test output type helpers."""

    @pytest.mark.parametrize(
        "output_type,content_type,extension",
        [
            (OutputType.PNG, "image/png", "png"),
            (OutputType.JPEG, "image/jpeg", "jpg"),
            (OutputType.PDF, "application/pdf", "pdf"),
            (OutputType.ZIP, "application/zip", "zip"),
        ],
    )
    def test_content_type_and_extension(self, output_type, content_type, extension):
        assert output_type.content_type == content_type
        assert output_type.extension == extension

    def test_is_image(self):
        assert OutputType.PNG.is_image
        assert OutputType.JPEG.is_image
        assert not OutputType.PDF.is_image


class TestRenderDescriptor:
    """Test descriptor validation."""

    def test_url_descriptor(self):
        descriptor = RenderDescriptor.model_validate(
            {"url": "https://example.com/", "type": "png"}
        )

        assert descriptor.url == "https://example.com/"
        assert descriptor.output_type is OutputType.PNG
        assert descriptor.full_page is False
        assert descriptor.viewport is None
        assert descriptor.encoding is BodyEncoding.DEFAULT
        assert not descriptor.is_warm_up
        assert not descriptor.is_batch

    def test_camel_case_fields(self):
        descriptor = RenderDescriptor.model_validate(
            {
                "content": "<h1>Hi</h1>",
                "type": "jpeg",
                "fullPage": True,
                "jpegQuality": 50,
                "viewport": {"width": 1280, "height": 600},
                "saveFilename": "hi.jpg",
                "encoding": "base64",
            }
        )

        assert descriptor.full_page is True
        assert descriptor.jpeg_quality == 50
        assert descriptor.viewport.width == 1280
        assert descriptor.viewport.height == 600
        assert descriptor.save_filename == "hi.jpg"
        assert descriptor.encoding is BodyEncoding.BASE64

    def test_output_type_alias(self):
        descriptor = RenderDescriptor.model_validate({"url": "https://example.com/", "outputType": "pdf"})
        assert descriptor.output_type is OutputType.PDF

    def test_snake_case_construction(self):
        descriptor = RenderDescriptor(url="https://example.com/", output_type=OutputType.PNG, full_page=True)
        assert descriptor.full_page is True

    def test_descriptor_is_immutable(self):
        descriptor = RenderDescriptor.model_validate({"url": "https://example.com/", "type": "png"})
        with pytest.raises(ValidationError):
            descriptor.url = "https://other.example/"

    def test_unknown_fields_ignored(self):
        descriptor = RenderDescriptor.model_validate(
            {"url": "https://example.com/", "type": "png", "somethingElse": 1}
        )
        assert descriptor.output_type is OutputType.PNG

    @pytest.mark.parametrize("field", ["fullPage", "encoding", "warm", "viewport", "jpegQuality", "selector"])
    def test_null_optional_field_uses_default(self, field):
        descriptor = RenderDescriptor.model_validate(
            {"url": "https://example.com/", "type": "png", field: None}
        )

        assert descriptor.full_page is False
        assert descriptor.warm is False
        assert descriptor.encoding is BodyEncoding.DEFAULT
        assert descriptor.viewport is None
        assert descriptor.jpeg_quality is None
        assert descriptor.selector is None

    def test_warm_up(self):
        descriptor = RenderDescriptor.model_validate({"warm": True})
        assert descriptor.is_warm_up

    def test_warm_with_output_type_is_a_render(self):
        descriptor = RenderDescriptor.model_validate(
            {"warm": True, "url": "https://example.com/", "type": "png"}
        )
        assert not descriptor.is_warm_up

    def test_missing_type(self):
        with pytest.raises(ValidationError, match="Missing 'type'"):
            RenderDescriptor.model_validate({"url": "https://example.com/"})

    def test_empty_descriptor(self):
        with pytest.raises(ValidationError, match="Missing 'type'"):
            RenderDescriptor.model_validate({})

    def test_missing_source(self):
        with pytest.raises(ValidationError, match="Missing 'url' or 'content'"):
            RenderDescriptor.model_validate({"type": "png"})

    def test_blank_source_counts_as_missing(self):
        with pytest.raises(ValidationError, match="Missing 'url' or 'content'"):
            RenderDescriptor.model_validate({"type": "png", "url": "  "})

    def test_both_sources(self):
        with pytest.raises(ValidationError, match="Only one of"):
            RenderDescriptor.model_validate(
                {"type": "png", "url": "https://example.com/", "content": "<p>x</p>"}
            )

    def test_warm_up_with_source(self):
        with pytest.raises(ValidationError, match="warm-up request takes no"):
            RenderDescriptor.model_validate({"warm": True, "url": "https://example.com/"})

    def test_unknown_type(self):
        with pytest.raises(ValidationError):
            RenderDescriptor.model_validate({"url": "https://example.com/", "type": "gif"})

    @pytest.mark.parametrize("quality", [-1, 101])
    def test_jpeg_quality_range(self, quality):
        with pytest.raises(ValidationError):
            RenderDescriptor.model_validate(
                {"url": "https://example.com/", "type": "jpeg", "jpegQuality": quality}
            )

    @pytest.mark.parametrize("viewport", [{"width": 0, "height": 600}, {"width": 800}])
    def test_invalid_viewport(self, viewport):
        with pytest.raises(ValidationError):
            RenderDescriptor.model_validate(
                {"url": "https://example.com/", "type": "png", "viewport": viewport}
            )


class TestBatchDescriptor:
    """Test zip descriptor validation."""

    def test_zip_with_pages(self):
        descriptor = RenderDescriptor.model_validate(
            {
                "type": "zip",
                "pages": [
                    {"url": "https://a.example/", "type": "png", "saveFilename": "a.png"},
                    {"content": "<p>b</p>", "type": "pdf"},
                ],
            }
        )

        assert descriptor.is_batch
        assert [page.output_type for page in descriptor.pages] == [OutputType.PNG, OutputType.PDF]
        assert descriptor.pages[0].save_filename == "a.png"

    def test_zip_without_pages(self):
        with pytest.raises(ValidationError, match="non-empty 'pages'"):
            RenderDescriptor.model_validate({"type": "zip"})

    def test_zip_with_empty_pages(self):
        with pytest.raises(ValidationError, match="non-empty 'pages'"):
            RenderDescriptor.model_validate({"type": "zip", "pages": []})

    def test_nested_zip_rejected(self):
        with pytest.raises(ValidationError, match=r"pages\[1\]: zip entries cannot be nested"):
            RenderDescriptor.model_validate(
                {
                    "type": "zip",
                    "pages": [
                        {"url": "https://a.example/", "type": "png"},
                        {
                            "type": "zip",
                            "pages": [{"url": "https://b.example/", "type": "png"}],
                        },
                    ],
                }
            )

    def test_page_entries_revalidated(self):
        with pytest.raises(ValidationError) as exc_info:
            RenderDescriptor.model_validate(
                {"type": "zip", "pages": [{"url": "https://a.example/", "type": "png"}, {"type": "png"}]}
            )

        locations = [error["loc"] for error in exc_info.value.errors()]
        assert ("pages", 1) in locations

    def test_warm_up_page_rejected(self):
        with pytest.raises(ValidationError, match="warm-up entries"):
            RenderDescriptor.model_validate({"type": "zip", "pages": [{"warm": True}]})


class TestTransportModels:
    """Test inbound event and envelope models."""

    def test_inbound_event_aliases(self):
        event = InboundEvent.model_validate(
            {"method": "get", "path": "/render", "queryParameters": {"url": "x"}, "body": None}
        )

        assert event.method == "GET"
        assert event.query_parameters == {"url": "x"}

    def test_inbound_event_null_query(self):
        event = InboundEvent.model_validate({"method": "POST", "queryParameters": None})
        assert event.query_parameters == {}
        assert event.path == "/"

    def test_envelope_serializes_camel_case(self):
        envelope = ResponseEnvelope(status_code=200, body="aGk=", is_body_base64=False)

        dumped = envelope.model_dump(by_alias=True)

        assert dumped == {
            "statusCode": 200,
            "headers": {},
            "body": "aGk=",
            "isBodyBase64": False,
        }
