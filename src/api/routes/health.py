"""
Health Routes
=============

FastAPI routes for health check endpoints.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Request

from src.config.settings import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(request: Request) -> Dict[str, Any]:
    """Report service status without launching a browser."""
    settings = get_settings()
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version,
        "session_live": request.app.state.session_manager.is_live,
        "launch_count": request.app.state.session_manager.launch_count,
    }
