"""Tests for outbound frame rendering and reply lengths."""

import pytest

from tcp_server.protocols import OutboundCommand, classify, compose_command, format_frame, reply_length
from tcp_server.protocols.commands import SERVER_COMMAND_TOKENS, CommandKind


def test_format_frame():
    assert format_frame("CS", "1234567890", "0002", "LK") == "[CS*1234567890*0002*LK]"


def test_compose_command_counts_command_and_content():
    frame = compose_command("8800000015", "APN", ",cmnet,,,20634")

    # "APN,cmnet,,,20634" is 17 characters
    assert frame == "[3G*8800000015*0017*APN,cmnet,,,20634]"


def test_compose_command_without_content():
    assert compose_command("8800000015", "CR") == "[3G*8800000015*0002*CR]"


def test_outbound_command_always_uses_3g_prefix():
    command = OutboundCommand("8800000015", "UPLOAD", ",600")

    assert command.render() == "[3G*8800000015*0010*UPLOAD,600]"


@pytest.mark.parametrize("token,expected", [
    ("LK", "0002"),
    ("AL", "0002"),
    ("CONFIG", "0006"),
    ("APN", "0004"),
    ("CALL", "0004"),
    ("SOS1", "0004"),
    ("SOS2", "0004"),
    ("SOS3", "0004"),
    ("CENTER", "0004"),
    ("MONITOR", "0004"),
    ("IP", "0008"),
    ("UPLOAD", "0006"),
    ("SOS", "0006"),
    ("bodytemp", "0006"),
    ("DEVREFUSEPHONESWITCH", "0006"),
    ("NOPE", "0002"),
])
def test_reply_length_table(token, expected):
    assert reply_length(token) == expected


def test_every_server_command_has_a_reply_length():
    for token in SERVER_COMMAND_TOKENS:
        assert reply_length(token) in {"0004", "0006", "0008"}


@pytest.mark.parametrize("token,kind", [
    ("LK", CommandKind.LINK_KEEP),
    ("AL", CommandKind.ALARM),
    ("UD", CommandKind.POSITION),
    ("UD2", CommandKind.POSITION),
    ("PP", CommandKind.POSITION),
    ("CONFIG", CommandKind.CONFIG),
    ("img", CommandKind.IMAGE),
    ("profile", CommandKind.SERVER_COMMAND),
    ("PROFILE", CommandKind.UNKNOWN),
    ("IMG", CommandKind.UNKNOWN),
    ("", CommandKind.UNKNOWN),
])
def test_classify_is_exact(token, kind):
    assert classify(token) is kind
