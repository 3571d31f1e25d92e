"""Service health endpoint"""
from fastapi import APIRouter, Request

from teamspace.config import settings
from teamspace.database import check_connection
from teamspace.utils.time import utc_now

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Report whether the database answers; never fails itself."""
    session_factory = request.app.state.session_factory
    connected = check_connection(session_factory.kw.get("bind"))
    return {
        "success": True,
        "status": "ok" if connected else "degraded",
        "database": "connected" if connected else "disconnected",
        "environment": settings.ENVIRONMENT,
        "timestamp": utc_now().isoformat(),
    }
