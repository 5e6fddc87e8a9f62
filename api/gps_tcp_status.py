"""
GPS TCP Server status endpoints
"""
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from datetime import datetime
import logging
from typing import Dict, Any
from config import settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/gps-tcp", tags=["GPS TCP Server"])


@router.get("/status")
async def get_gps_tcp_status(request: Request) -> Dict[str, Any]:
    """Connection and message counters of the embedded TCP server"""
    status = {
        "timestamp": datetime.now().isoformat(),
        "configured": settings.GPS_TCP_ENABLED,
    }

    tcp_server = getattr(request.app.state, 'tcp_server', None)
    if tcp_server is None:
        status["running"] = False
        status["message"] = "GPS TCP Server is not running"
        return JSONResponse(content=status, status_code=503)

    status.update(tcp_server.get_status())
    if not status["running"]:
        return JSONResponse(content=status, status_code=503)
    return status


@router.get("/health")
async def check_gps_tcp_health(request: Request):
    """Returns 200 if the server is accepting connections, 503 if not"""
    tcp_server = getattr(request.app.state, 'tcp_server', None)

    if tcp_server is not None and tcp_server.is_running():
        return {"status": "healthy", "timestamp": datetime.now().isoformat()}
    raise HTTPException(status_code=503, detail="GPS TCP Server not running")
