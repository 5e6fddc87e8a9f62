from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field


class CommandRecordBase(BaseModel):
    device_id: str
    type: str
    raw_content: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    battery_level: Optional[int] = None
    signal_strength: Optional[int] = None
    image_timestamp: Optional[str] = None
    image_data: Optional[str] = None


class CommandRecordCreate(CommandRecordBase):
    received_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}


class DeviceDataResponse(BaseModel):
    id: int
    device_id: str
    type: str
    content: str
    received_at: datetime
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    battery_level: Optional[int] = None
    signal_strength: Optional[int] = None
    image_timestamp: Optional[str] = None
    image_data: Optional[str] = None

    class Config:
        from_attributes = True


class CommandSentResponse(BaseModel):
    device_id: str
    command: str
    frame: str
    delivered: bool

    class Config:
        json_schema_extra = {
            "example": {
                "device_id": "8800000015",
                "command": "APN",
                "frame": "[3G*8800000015*0017*APN,cmnet,,,20634]",
                "delivered": True
            }
        }
