"""
Errors raised while decoding SeTracker frames
"""


class ProtocolError(Exception):
    """Base class for frame decoding problems"""


class FormatError(ProtocolError):
    """Frame is not [manufacturer*device*length*content]"""


class LengthMismatchError(ProtocolError):
    """Declared length field disagrees with the content length"""

    def __init__(self, declared: int, actual: int):
        super().__init__(f"Declared length {declared} != content length {actual}")
        self.declared = declared
        self.actual = actual


class UnknownCommandError(ProtocolError):
    """Command token has no handler; the frame is still stored"""

    def __init__(self, token: str):
        super().__init__(f"Unknown command: {token}")
        self.token = token
