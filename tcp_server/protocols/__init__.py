"""
SeTracker (Beesure) watch protocol engine
"""
from .commands import CommandKind, classify, reply_length
from .dispatcher import CommandDispatcher, DispatchResult
from .errors import FormatError, LengthMismatchError, ProtocolError, UnknownCommandError
from .extractors import decode_alarm, extract_image, extract_position
from .formatter import OutboundCommand, OutboundMessage, compose_command, format_frame
from .message import ParsedMessage, parse


__all__ = [
    'CommandKind',
    'classify',
    'reply_length',
    'CommandDispatcher',
    'DispatchResult',
    'FormatError',
    'LengthMismatchError',
    'ProtocolError',
    'UnknownCommandError',
    'decode_alarm',
    'extract_image',
    'extract_position',
    'OutboundCommand',
    'OutboundMessage',
    'compose_command',
    'format_frame',
    'ParsedMessage',
    'parse',
]
