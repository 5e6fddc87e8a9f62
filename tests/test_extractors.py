"""Tests for position, alarm and snapshot field extraction."""

import pytest

from tcp_server.protocols import decode_alarm, extract_image, extract_position
from tcp_server.protocols.extractors import alarm_status_bits


def alarm_content(status: str) -> str:
    # status word is the 16th comma field
    return ",".join(["AL"] + ["0"] * 14 + [status])


def test_position_uses_fixed_indices():
    position = extract_position("UD,50,100,1.0,X,2.0,Y,Z,A,B,C,7,80")

    assert position.type == "UD"
    assert position.latitude == 1.0
    assert position.longitude == 2.0
    assert position.signal_strength == 7
    assert position.battery_level == 80


def test_position_short_payload_is_skipped():
    assert extract_position("UD,1,2,3") is None


def test_position_missing_trailing_fields_are_none():
    position = extract_position("UD2,1,2,22.5,N,113.9")

    assert position.latitude == 22.5
    assert position.longitude == 113.9
    assert position.signal_strength is None
    assert position.battery_level is None


def test_position_unparsable_fields_do_not_reject_the_rest():
    position = extract_position("PP,1,2,north,X,2.5,Y,Z,A,B,C,strong,80")

    assert position.latitude is None
    assert position.longitude == 2.5
    assert position.signal_strength is None
    assert position.battery_level == 80


def test_alarm_status_is_padded_to_32_bits():
    bits = alarm_status_bits(alarm_content("15"))

    assert bits == "0" * 27 + "10101"
    flags = decode_alarm(alarm_content("15"))
    assert flags.fall_down is False
    assert flags.sos is False


def test_alarm_fall_down_bit():
    flags = decode_alarm(alarm_content("00100000"))

    assert flags.status_bits[11] == "1"
    assert flags.fall_down is True
    assert flags.sos is False


def test_alarm_sos_bit():
    flags = decode_alarm(alarm_content("8000"))

    assert flags.fall_down is False
    assert flags.sos is True


def test_alarm_both_bits():
    flags = decode_alarm(alarm_content("108000"))

    assert flags.fall_down is True
    assert flags.sos is True


@pytest.mark.parametrize("content", ["AL", "AL,1,2,3", alarm_content("XYZ"), alarm_content("")])
def test_alarm_defaults_to_eight_zero_bits(content):
    flags = decode_alarm(content)

    assert flags.status_bits == "00000000"
    assert flags.fall_down is False
    assert flags.sos is False


def test_image_snapshot_keeps_commas_in_data():
    snapshot = extract_image("img,5,20240101120000,AAEC,FF,00")

    assert snapshot.timestamp == "20240101120000"
    assert snapshot.image_data == "AAEC,FF,00"


def test_image_snapshot_without_data():
    snapshot = extract_image("img,5,20240101120000")

    assert snapshot.image_data == ""


@pytest.mark.parametrize("content", ["img", "img,5", "img,4,20240101120000,AAEC"])
def test_image_other_subtypes_are_ignored(content):
    assert extract_image(content) is None
