"""
Render Routes
=============

FastAPI route translating HTTP requests into inbound events for the
orchestrator and response envelopes back into HTTP responses.
"""

import base64

from fastapi import APIRouter, Request, Response

from src.models.schemas import InboundEvent, ResponseEnvelope

router = APIRouter(tags=["Rendering"])


def envelope_to_response(envelope: ResponseEnvelope) -> Response:
    """Write an envelope as raw bytes, decoding only when flagged."""
    if envelope.is_body_base64:
        content = base64.b64decode(envelope.body)
    else:
        content = envelope.body.encode("ascii")

    return Response(
        content=content,
        status_code=envelope.status_code,
        headers=envelope.headers,
    )


@router.api_route("/render", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def render(request: Request) -> Response:
    """Render endpoint; GET for simple jobs, POST with a JSON descriptor."""
    raw_body = await request.body()
    event = InboundEvent(
        method=request.method,
        path=request.url.path,
        query_parameters=dict(request.query_params),
        body=raw_body.decode("utf-8", errors="replace") if raw_body else None,
    )

    envelope = await request.app.state.orchestrator.handle(event)
    return envelope_to_response(envelope)
