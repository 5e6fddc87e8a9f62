"""
SeTracker frame parser

Frame format: [MANUFACTURER*DEVICE_ID*LENGTH*CONTENT]
e.g. [3G*8800000015*000D*LK,50,100,100]
"""
from dataclasses import dataclass
import re
from .errors import FormatError, LengthMismatchError

DECIMAL_PATTERN = re.compile(r'[+-]?[0-9]+')
HEX_PATTERN = re.compile(r'[+-]?[0-9A-Fa-f]+')


@dataclass(frozen=True)
class ParsedMessage:
    manufacturer: str
    device_id: str
    declared_length: int
    content: str

    @property
    def token(self) -> str:
        """First comma field of the content"""
        return self.content.split(',', 1)[0]


def parse_length(field: str) -> int:
    """Length field is decimal when it looks decimal, hexadecimal otherwise"""
    if DECIMAL_PATTERN.fullmatch(field):
        return int(field, 10)
    if HEX_PATTERN.fullmatch(field):
        return int(field, 16)
    raise FormatError(f"Invalid length field: {field!r}")


def parse(raw: str) -> ParsedMessage:
    """Parse a raw frame, raising FormatError or LengthMismatchError"""
    if not raw.startswith('[') or not raw.endswith(']'):
        raise FormatError("Frame must be enclosed in brackets")

    parts = raw[1:-1].split('*')
    if len(parts) != 4:
        raise FormatError(f"Expected 4 '*' separated fields, got {len(parts)}")

    manufacturer, device_id, length_field, content = parts
    declared_length = parse_length(length_field)

    if declared_length != len(content):
        raise LengthMismatchError(declared_length, len(content))

    return ParsedMessage(manufacturer, device_id, declared_length, content)
