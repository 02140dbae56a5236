"""
Request Orchestrator
====================

Turns an inbound event into exactly one response envelope: parse the request
into a render descriptor, validate it, dispatch to the page renderer or the
archive builder, and encode the artifact or the error.
"""

from typing import Any, Dict, Mapping, Optional, Union
import base64
import json
import uuid

from pydantic import ValidationError

from src.config.logging import get_logger
from src.core.exceptions import (
    DescriptorValidationError,
    MethodError,
    RenderServiceError,
)
from src.core.rendering.archive_builder import ArchiveBuilder
from src.core.rendering.page_renderer import PageRenderer
from src.core.session import AutomationSessionManager
from src.models.schemas import (
    Artifact,
    BodyEncoding,
    InboundEvent,
    RenderDescriptor,
    ResponseEnvelope,
)

logger = get_logger(__name__)

WARM_UP_PREFIX = "Warmed up chrome"

# Query parameters honoured on GET; anything richer needs a POST body.
GET_PARAMETERS = ("url", "type", "warm")


def format_validation_error(error: ValidationError) -> str:
    """Flatten pydantic errors into one readable message."""
    messages = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        messages.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "; ".join(messages)


def validate_descriptor(payload: Mapping[str, Any]) -> RenderDescriptor:
    """
    Build a validated descriptor from a parsed payload.

    Raises:
        DescriptorValidationError: If the payload breaks any descriptor rule
    """
    try:
        return RenderDescriptor.model_validate(payload)
    except ValidationError as e:
        raise DescriptorValidationError(format_validation_error(e))


def parse_descriptor(event: InboundEvent) -> RenderDescriptor:
    """
    Parse a GET query or a POST JSON body into a descriptor.

    Raises:
        MethodError: For methods other than GET and POST
        DescriptorValidationError: For missing or invalid input
    """
    if event.method == "GET":
        if not event.query_parameters:
            raise DescriptorValidationError("Missing query parameters")
        payload: Dict[str, Any] = {
            key: event.query_parameters[key]
            for key in GET_PARAMETERS
            if key in event.query_parameters
        }
        return validate_descriptor(payload)

    if event.method == "POST":
        if event.body is None or not event.body.strip():
            raise DescriptorValidationError("Missing request body")
        try:
            payload = json.loads(event.body)
        except json.JSONDecodeError as e:
            raise DescriptorValidationError(f"Request body is not valid JSON: {e.msg}")
        if not isinstance(payload, dict):
            raise DescriptorValidationError("Request body must be a JSON object")
        return validate_descriptor(payload)

    raise MethodError(f"Method {event.method} is not supported; use GET or POST")


def encode_artifact(artifact: Artifact, encoding: BodyEncoding) -> ResponseEnvelope:
    """Wrap artifact bytes as a base64 success envelope."""
    return ResponseEnvelope(
        status_code=200,
        headers={"Content-Type": artifact.content_type},
        body=base64.b64encode(artifact.data).decode("ascii"),
        is_body_base64=encoding is not BodyEncoding.BASE64,
    )


def encode_message(status_code: int, message: str) -> ResponseEnvelope:
    """Wrap a plain text message as a base64 envelope."""
    return ResponseEnvelope(
        status_code=status_code,
        headers={"Content-Type": "text/plain; charset=utf-8"},
        body=base64.b64encode(message.encode("utf-8")).decode("ascii"),
        is_body_base64=True,
    )


class RequestOrchestrator:
    """Single entry point from the HTTP adapters into the render engine."""

    def __init__(
        self,
        session_manager: AutomationSessionManager,
        renderer: Optional[PageRenderer] = None,
        archive_builder: Optional[ArchiveBuilder] = None,
    ):
        self.session_manager = session_manager
        self.renderer = renderer or PageRenderer(session_manager.settings)
        self.archive_builder = archive_builder or ArchiveBuilder(session_manager, self.renderer)
        self.logger: Any = logger.bind(component="orchestrator")  # structlog.BoundLoggerBase

    async def handle(self, event: Union[InboundEvent, Mapping[str, Any]]) -> ResponseEnvelope:
        """
        Handle one request.

        Never raises; every failure is mapped onto an error envelope.
        """
        log = self.logger.bind(request_id=uuid.uuid4().hex[:12])

        try:
            if not isinstance(event, InboundEvent):
                event = self._coerce_event(event)
            log = log.bind(method=event.method, path=event.path)

            descriptor = parse_descriptor(event)
            if descriptor.is_warm_up:
                return await self._warm_up(log)

            log.info("Render requested", output_type=descriptor.output_type.value)
            artifact = await self._dispatch(descriptor)
        except RenderServiceError as e:
            return self._error_envelope(e, log)
        except Exception:
            log.exception("Unexpected render failure")
            return encode_message(500, "Internal render error")

        log.info(
            "Render completed",
            content_type=artifact.content_type,
            size=artifact.size,
            encoding=descriptor.encoding.value,
        )
        return encode_artifact(artifact, descriptor.encoding)

    async def _dispatch(self, descriptor: RenderDescriptor) -> Artifact:
        if descriptor.is_batch:
            return await self.archive_builder.render_batch(descriptor.pages or [])

        session = await self.session_manager.acquire()
        return await self.renderer.render(descriptor, session)

    async def _warm_up(self, log: Any) -> ResponseEnvelope:
        session = await self.session_manager.acquire()
        log.info("Warm-up completed", browser_version=session.version)
        return encode_message(200, f"{WARM_UP_PREFIX} (browser {session.version})")

    def _coerce_event(self, event: Mapping[str, Any]) -> InboundEvent:
        try:
            return InboundEvent.model_validate(event)
        except ValidationError as e:
            raise DescriptorValidationError(f"Malformed event: {format_validation_error(e)}")

    def _error_envelope(self, error: RenderServiceError, log: Any) -> ResponseEnvelope:
        if error.status_code < 500:
            log.warning("Request rejected", status_code=error.status_code, error=error.message)
        else:
            log.error(
                "Render failed",
                status_code=error.status_code,
                error_type=type(error).__name__,
                error=error.message,
            )
        return encode_message(error.status_code, error.public_message)
