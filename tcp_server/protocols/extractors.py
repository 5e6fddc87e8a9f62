"""
Field extraction for position, alarm and snapshot payloads

All extractors are tolerant: short or malformed payloads give None values
instead of raising.
"""
from dataclasses import dataclass
from typing import Any, Callable, List, Optional
import re

HEX_PATTERN = re.compile(r'[0-9A-Fa-f]+')

MIN_POSITION_FIELDS = 5
ALARM_STATUS_INDEX = 15
ALARM_DEFAULT_BITS = "00000000"
FALL_DOWN_BIT = 11
SOS_BIT = 16
SNAPSHOT_SUBTYPE = "5"


@dataclass(frozen=True)
class PositionFields:
    type: str
    latitude: Optional[float]
    longitude: Optional[float]
    signal_strength: Optional[int]
    battery_level: Optional[int]


@dataclass(frozen=True)
class AlarmFlags:
    status_bits: str
    fall_down: bool
    sos: bool


@dataclass(frozen=True)
class ImageSnapshot:
    timestamp: str
    image_data: str


def _field(parts: List[str], index: int, convert: Callable[[str], Any]) -> Optional[Any]:
    """Convert parts[index], or None if it is missing or not a number"""
    if index >= len(parts):
        return None
    try:
        return convert(parts[index])
    except ValueError:
        return None


def extract_position(content: str) -> Optional[PositionFields]:
    """
    Extract coordinates and device status from a UD/UD2/PP payload.

    Index layout: 0 type, 3 latitude, 5 longitude, 11 signal, 12 battery.
    Indices 1, 2 and 4 are not read.
    """
    parts = content.split(',')
    if len(parts) < MIN_POSITION_FIELDS:
        return None

    return PositionFields(
        type=parts[0],
        latitude=_field(parts, 3, float),
        longitude=_field(parts, 5, float),
        signal_strength=_field(parts, 11, int),
        battery_level=_field(parts, 12, int),
    )


def alarm_status_bits(content: str) -> str:
    """Status word of an AL payload as a 32 character binary string"""
    parts = content.split(',')
    if len(parts) > ALARM_STATUS_INDEX and HEX_PATTERN.fullmatch(parts[ALARM_STATUS_INDEX]):
        return format(int(parts[ALARM_STATUS_INDEX], 16), '032b')
    # Falls back to 8 characters, so bits 11 and 16 read as unset
    return ALARM_DEFAULT_BITS


def _bit(bits: str, index: int) -> bool:
    return index < len(bits) and bits[index] == '1'


def decode_alarm(content: str) -> AlarmFlags:
    bits = alarm_status_bits(content)
    return AlarmFlags(
        status_bits=bits,
        fall_down=_bit(bits, FALL_DOWN_BIT),
        sos=_bit(bits, SOS_BIT),
    )


def extract_image(content: str) -> Optional[ImageSnapshot]:
    """Remote snapshot payload: img,5,TIMESTAMP,DATA... (DATA may hold commas)"""
    parts = content.split(',')
    if len(parts) < 3 or parts[1] != SNAPSHOT_SUBTYPE:
        return None
    return ImageSnapshot(timestamp=parts[2], image_data=','.join(parts[3:]))
