"""
Gateway Handler
===============

Entry point for function-as-a-service invocations. Accepts API-gateway proxy
events or the native inbound event shape and returns a proxy response dict.

The automation session and the event loop it is bound to live for the whole
process, so warm invocations reuse the running browser.
"""

from typing import Any, Dict, Mapping, Optional
import asyncio
import base64
import binascii

from src.config.logging import get_logger
from src.core.orchestrator import RequestOrchestrator
from src.core.session import AutomationSessionManager
from src.models.schemas import ResponseEnvelope

logger = get_logger(__name__)


class GatewayRuntime:
    """Process-lifetime state for gateway invocations."""

    def __init__(self, session_manager: Optional[AutomationSessionManager] = None):
        self.loop = asyncio.new_event_loop()
        self.session_manager = session_manager or AutomationSessionManager()
        self.orchestrator = RequestOrchestrator(self.session_manager)

    def invoke(self, event: Mapping[str, Any]) -> Dict[str, Any]:
        envelope = self.loop.run_until_complete(self.orchestrator.handle(to_inbound_event(event)))
        return to_gateway_response(envelope)

    def close(self) -> None:
        try:
            self.loop.run_until_complete(self.session_manager.shutdown())
        finally:
            self.loop.close()


def to_inbound_event(event: Mapping[str, Any]) -> Dict[str, Any]:
    """Map a proxy event onto the inbound event shape."""
    request_context = event.get("requestContext") or {}
    method = (
        event.get("httpMethod")
        or event.get("method")
        or request_context.get("httpMethod")
        or (request_context.get("http") or {}).get("method")
    )
    query = event.get("queryStringParameters") or event.get("queryParameters") or {}

    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            logger.warning("Discarding undecodable base64 request body")
            body = None

    return {
        "method": method or "",
        "path": event.get("path") or request_context.get("path") or "/",
        "queryParameters": {key: str(value) for key, value in query.items()},
        "body": body,
    }


def to_gateway_response(envelope: ResponseEnvelope) -> Dict[str, Any]:
    """Map an envelope onto the proxy response shape."""
    return {
        "statusCode": envelope.status_code,
        "headers": dict(envelope.headers),
        "body": envelope.body,
        "isBase64Encoded": envelope.is_body_base64,
    }


_runtime: Optional[GatewayRuntime] = None


def get_runtime() -> GatewayRuntime:
    """Get the process-wide runtime, creating it on first invocation."""
    global _runtime
    if _runtime is None:
        _runtime = GatewayRuntime()
    return _runtime


def close_runtime() -> None:
    """Shut the runtime down; used when the process is being torn down."""
    global _runtime
    if _runtime is not None:
        runtime, _runtime = _runtime, None
        runtime.close()


def handler(event: Mapping[str, Any], context: Any = None) -> Dict[str, Any]:
    """Invocation entry point."""
    return get_runtime().invoke(event)
