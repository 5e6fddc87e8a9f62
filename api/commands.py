"""
Manual command injection and record lookup for SeTracker devices
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from typing import List, Optional
import logging
from database.schemas import CommandSentResponse, DeviceDataResponse
from database.store import SQLAlchemyStore, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/gps", tags=["GPS Commands"])

# Default extra content for commands that can be sent without one
PRESET_COMMANDS = {
    "APN": ",cmnet,,,20634",
    "UPLOAD": ",600",
    "CR": "",
    "SOS1": ",00000000000",
    "IP": ",113.81.229.9,5900",
}


def get_tcp_server(request: Request):
    tcp_server = getattr(request.app.state, 'tcp_server', None)
    if tcp_server is None:
        raise HTTPException(status_code=503, detail="GPS TCP Server is not running")
    return tcp_server


def get_store() -> SQLAlchemyStore:
    return SQLAlchemyStore()


def _send(tcp_server, device_id: str, command: str, content: str) -> CommandSentResponse:
    frame, delivered = tcp_server.send_command(device_id, command, content)
    return CommandSentResponse(device_id=device_id, command=command, frame=frame, delivered=delivered)


@router.post("/command/{device_id}/{command}/{content}", response_model=CommandSentResponse)
async def send_command(device_id: str, command: str, content: str, tcp_server=Depends(get_tcp_server)):
    """
    Send a command with explicit extra content, e.g.
    POST /gps/command/8800000015/UPLOAD/,600
    """
    return _send(tcp_server, device_id, command, content)


@router.post("/command/{device_id}/{command}", response_model=CommandSentResponse)
async def send_preset_command(device_id: str, command: str, tcp_server=Depends(get_tcp_server)):
    """Send one of the preset commands with its default content"""
    if command not in PRESET_COMMANDS:
        raise HTTPException(status_code=400, detail=f"Unsupported command: {command}")
    return _send(tcp_server, device_id, command, PRESET_COMMANDS[command])


@router.get("/data/{device_id}", response_model=List[DeviceDataResponse])
async def get_device_data(
    device_id: str,
    type: Optional[List[str]] = Query(default=None),
    limit: int = Query(default=100, ge=1, le=1000),
    store: SQLAlchemyStore = Depends(get_store),
):
    """Stored records of a device, newest first"""
    try:
        return store.find_by_device(device_id, types=type, limit=limit)
    except StoreError as e:
        logger.error(f"Error loading data for {device_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
