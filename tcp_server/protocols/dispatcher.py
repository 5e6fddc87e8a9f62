"""
SeTracker command dispatcher

Classifies a parsed frame by its command token and produces the protocol
reply (if any) plus the records to persist:
- LK: heartbeat, answered immediately to keep the link up
- AL: alarm, acknowledged; status bits are decoded for the log
- UD/UD2/PP: positions, stored without reply
- CONFIG: answered with CONFIG,1
- img: remote snapshot, stored when the sub-type is 5
- server command acks: answered by echoing the token
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
import logging
from database.schemas import CommandRecordCreate
from .commands import CommandKind, classify, reply_length
from .errors import UnknownCommandError
from .extractors import decode_alarm, extract_image, extract_position
from .formatter import OutboundMessage
from .message import ParsedMessage

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    kind: CommandKind
    outbound: Optional[OutboundMessage] = None
    records: List[CommandRecordCreate] = field(default_factory=list)
    error: Optional[UnknownCommandError] = None

    @property
    def reply(self) -> Optional[str]:
        return self.outbound.render() if self.outbound else None


class CommandDispatcher:
    """Stateless; one instance can serve every connection"""

    def __init__(self):
        self.handlers: Dict[CommandKind, Callable[[ParsedMessage, DispatchResult, datetime], None]] = {
            CommandKind.LINK_KEEP: self._handle_link_keep,
            CommandKind.ALARM: self._handle_alarm,
            CommandKind.POSITION: self._handle_position,
            CommandKind.CONFIG: self._handle_config,
            CommandKind.IMAGE: self._handle_image,
            CommandKind.SERVER_COMMAND: self._handle_server_command,
            CommandKind.UNKNOWN: self._handle_unknown,
        }

    def dispatch(self, msg: ParsedMessage, received_at: Optional[datetime] = None) -> DispatchResult:
        received_at = received_at or datetime.now(timezone.utc)
        token = msg.token
        kind = classify(token)

        result = DispatchResult(kind=kind)
        # Baseline record, whatever the command turns out to be
        result.records.append(CommandRecordCreate(
            device_id=msg.device_id,
            type=token,
            raw_content=msg.content,
            received_at=received_at,
        ))

        self.handlers[kind](msg, result, received_at)

        if result.outbound:
            logger.info(f"Generated response: {result.reply}")
        return result

    def _reply(self, msg: ParsedMessage, body: str, length_field: str) -> OutboundMessage:
        return OutboundMessage(msg.manufacturer, msg.device_id, length_field, body)

    def _handle_link_keep(self, msg: ParsedMessage, result: DispatchResult, received_at: datetime):
        result.outbound = self._reply(msg, 'LK', reply_length('LK'))

    def _handle_alarm(self, msg: ParsedMessage, result: DispatchResult, received_at: datetime):
        flags = decode_alarm(msg.content)
        logger.info(
            f"Alarm from {msg.device_id}: status={flags.status_bits} "
            f"fall_down={flags.fall_down} sos={flags.sos}"
        )
        result.outbound = self._reply(msg, 'AL', reply_length('AL'))

    def _handle_position(self, msg: ParsedMessage, result: DispatchResult, received_at: datetime):
        position = extract_position(msg.content)
        if position is None:
            logger.debug(f"Position payload too short from {msg.device_id}, skipping extraction")
            return

        result.records.append(CommandRecordCreate(
            device_id=msg.device_id,
            type=position.type,
            raw_content=msg.content,
            received_at=received_at,
            latitude=position.latitude,
            longitude=position.longitude,
            signal_strength=position.signal_strength,
            battery_level=position.battery_level,
        ))
        logger.info(f"Position data for deviceId={msg.device_id}: {position.latitude}, {position.longitude}")

    def _handle_config(self, msg: ParsedMessage, result: DispatchResult, received_at: datetime):
        result.outbound = self._reply(msg, 'CONFIG,1', reply_length('CONFIG'))

    def _handle_image(self, msg: ParsedMessage, result: DispatchResult, received_at: datetime):
        snapshot = extract_image(msg.content)
        if snapshot is None:
            return

        result.records.append(CommandRecordCreate(
            device_id=msg.device_id,
            type=msg.token,
            raw_content=msg.content,
            received_at=received_at,
            image_timestamp=snapshot.timestamp,
            image_data=snapshot.image_data,
        ))
        logger.info(f"Snapshot from {msg.device_id} taken at {snapshot.timestamp} ({len(snapshot.image_data)} chars)")

    def _handle_server_command(self, msg: ParsedMessage, result: DispatchResult, received_at: datetime):
        token = msg.token
        result.outbound = self._reply(msg, token, reply_length(token))

    def _handle_unknown(self, msg: ParsedMessage, result: DispatchResult, received_at: datetime):
        result.error = UnknownCommandError(msg.token)
        logger.warning(f"{result.error} (device {msg.device_id})")
