"""
Command tokens of the SeTracker protocol and their reply lengths
"""
from enum import Enum


class CommandKind(Enum):
    LINK_KEEP = "link_keep"
    ALARM = "alarm"
    POSITION = "position"
    CONFIG = "config"
    IMAGE = "image"
    SERVER_COMMAND = "server_command"
    UNKNOWN = "unknown"


POSITION_TOKENS = frozenset({'UD', 'UD2', 'PP'})

# Acks for commands the platform pushed to the device; reply echoes the token
SERVER_COMMAND_TOKENS = frozenset({
    'APN', 'UPLOAD', 'PW', 'CALL', 'CENTER', 'MONITOR', 'SOS1', 'SOS2', 'SOS3',
    'SOS', 'IP', 'FACTORY', 'LZ', 'SOSSMS', 'LOWBAT', 'VERNO', 'TS', 'RESET',
    'CR', 'POWEROFF', 'REMOVE', 'REMOVESMS', 'WALKTIME', 'SLEEPTIME',
    'SILENCETIME', 'SILENCETIME2', 'FIND', 'FLOWER', 'REMIND', 'TK', 'TKQ',
    'TKQ2', 'MESSAGE', 'PHB', 'PHB2', 'PHBX', 'PHBX2', 'DPHBX', 'PPR',
    'profile', 'WHITELIST1', 'WHITELIST2', 'hrtstart', 'HEALTHAUTOSET',
    'bphrt', 'oxygen', 'TAKEPILLS', 'rcapture', 'FALLDOWN', 'LSSET',
    'bodytemp', 'bodytemp2', 'btemp2', 'WIFISEARCH', 'WIFISET', 'WIFIDEL',
    'WIFICUR', 'WIFIINFOUP', 'APPLOCK', 'DEVREFUSEPHONESWITCH', 'ACALL',
})

DEFAULT_REPLY_LENGTH = "0002"

REPLY_LENGTHS = {
    'LK': "0002",
    'AL': "0002",
    'CONFIG': "0006",
    'APN': "0004",
    'CALL': "0004",
    'SOS1': "0004",
    'SOS2': "0004",
    'SOS3': "0004",
    'CENTER': "0004",
    'MONITOR': "0004",
    'IP': "0008",
}

_FIXED_KINDS = {
    'LK': CommandKind.LINK_KEEP,
    'AL': CommandKind.ALARM,
    'CONFIG': CommandKind.CONFIG,
    'img': CommandKind.IMAGE,
}


def classify(token: str) -> CommandKind:
    """Map a command token to its kind; matching is exact and case sensitive"""
    if token in _FIXED_KINDS:
        return _FIXED_KINDS[token]
    if token in POSITION_TOKENS:
        return CommandKind.POSITION
    if token in SERVER_COMMAND_TOKENS:
        return CommandKind.SERVER_COMMAND
    return CommandKind.UNKNOWN


def reply_length(token: str) -> str:
    """Fixed length field used when acknowledging ``token``"""
    if token in REPLY_LENGTHS:
        return REPLY_LENGTHS[token]
    if token in SERVER_COMMAND_TOKENS:
        return "0006"
    return DEFAULT_REPLY_LENGTH
