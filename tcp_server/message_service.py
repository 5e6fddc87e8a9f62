"""
Per-frame processing: parse, dispatch, persist, reply
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging
from database.store import StoreError
from tcp_server.protocols import (
    CommandDispatcher,
    DispatchResult,
    ParsedMessage,
    ProtocolError,
    compose_command,
    parse,
)

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    message: ParsedMessage
    dispatch: DispatchResult
    record_ids: List[int] = field(default_factory=list)

    @property
    def reply(self) -> Optional[str]:
        return self.dispatch.reply


class MessageService:
    """
    Runs one frame through the protocol engine.

    Reply and persistence are independent outcomes: a store failure is
    logged and the reply is still returned.
    """

    def __init__(self, store, transport=None, dispatcher: Optional[CommandDispatcher] = None):
        self.store = store
        self.transport = transport
        self.dispatcher = dispatcher or CommandDispatcher()

    def handle_frame(self, raw: str) -> Optional[FrameResult]:
        """Process one frame; returns None when the frame was discarded"""
        logger.info(f"Received message: {raw[:200]}")

        try:
            message = parse(raw)
        except ProtocolError as e:
            logger.warning(f"Failed to parse message ({e}): {raw[:200]}")
            return None

        logger.debug(
            f"Parsed message: manufacturer={message.manufacturer}, deviceId={message.device_id}, "
            f"length={message.declared_length}, content={message.content[:200]}"
        )

        dispatch = self.dispatcher.dispatch(message)
        result = FrameResult(message=message, dispatch=dispatch)

        for record in dispatch.records:
            try:
                result.record_ids.append(self.store.save(record))
            except StoreError as e:
                logger.error(f"Store error for deviceId={message.device_id}: {e}")

        return result

    def send_command(self, device_id: str, command: str, content: str = "") -> Tuple[str, bool]:
        """Compose an outbound command and hand it to the transport.

        Returns the frame and whether a live connection accepted it.
        """
        frame = compose_command(device_id, command, content)
        logger.info(f"Sending command: {frame}")

        if self.transport is None:
            logger.warning(f"No transport available, command for {device_id} not sent")
            return frame, False

        delivered = self.transport.send(device_id, frame)
        if not delivered:
            logger.warning(f"Device {device_id} is not connected, command dropped")
        return frame, delivered
