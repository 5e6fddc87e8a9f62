"""
Rendering of outbound SeTracker frames
"""
from dataclasses import dataclass

# Outbound commands always go out with this prefix, whatever the device sent
OUTBOUND_MANUFACTURER = "3G"


def zero_pad4(length: int) -> str:
    return f"{length:04d}"


def format_frame(manufacturer: str, device_id: str, length_field: str, body: str) -> str:
    return f"[{manufacturer}*{device_id}*{length_field}*{body}]"


@dataclass(frozen=True)
class OutboundMessage:
    """Reply to an inbound frame; the length field comes from a fixed table"""
    manufacturer: str
    device_id: str
    length_field: str
    body: str

    def render(self) -> str:
        return format_frame(self.manufacturer, self.device_id, self.length_field, self.body)


@dataclass(frozen=True)
class OutboundCommand:
    """Command pushed to a device by the platform"""
    device_id: str
    command_token: str
    extra_content: str = ""

    def render(self) -> str:
        body = self.command_token + self.extra_content
        return format_frame(OUTBOUND_MANUFACTURER, self.device_id, zero_pad4(len(body)), body)


def compose_command(device_id: str, command: str, extra_content: str = "") -> str:
    """
    Build a server to device command frame.

    e.g. compose_command("8800000015", "UPLOAD", ",600")
    -> "[3G*8800000015*0010*UPLOAD,600]"
    """
    return OutboundCommand(device_id, command, extra_content).render()
