import struct

import pytest

from crsf_codec import CRSFFrameError, FrameError, build_frame, build_rc_frame
from crsf_format import describe
from crsf_frames import (
    Attitude,
    Battery,
    DeviceInfo,
    ElrsStatus,
    Gps,
    LinkStatistics,
    MspFrame,
    RcChannels,
    UnknownFrame,
    decode_frame,
    read_u24,
    write_u24,
)
from crsf_protocol import FrameType, CRSF_SYNC, CRSF_SYNC_ELRS


def test_u24_accessors():
    buf = bytearray(5)
    write_u24(buf, 1, 0x123456)
    assert buf == bytearray([0x00, 0x12, 0x34, 0x56, 0x00])
    assert read_u24(buf, 1) == 0x123456
    write_u24(buf, 0, 0x1FFFFFF)
    assert read_u24(buf, 0) == 0xFFFFFF


def test_decode_rc_channels():
    channels = [172 + i * 100 for i in range(16)]
    frame = decode_frame(build_rc_frame(channels))
    assert isinstance(frame, RcChannels)
    assert frame.sync == CRSF_SYNC
    assert frame.frame_type == FrameType.RC_CHANNELS_PACKED
    assert list(frame.channels) == channels


def test_decode_link_statistics():
    frame = decode_frame(build_frame(FrameType.LINK_STATISTICS, bytes(range(1, 11))))
    assert isinstance(frame, LinkStatistics)
    assert frame.uplink_rssi_ant1 == 1
    assert frame.uplink_link_quality == 3
    assert frame.downlink_snr == 10


def test_decode_gps():
    payload = struct.pack('>iiHHiB', 515000000, -1250000, 120, 18000, 250, 9)
    frame = decode_frame(build_frame(FrameType.GPS, payload))
    assert isinstance(frame, Gps)
    assert frame.latitude_deg == pytest.approx(51.5)
    assert frame.longitude_deg == pytest.approx(-0.125)
    assert frame.heading == 18000
    assert frame.satellites == 9


def test_decode_battery():
    payload = bytes([0x00, 0xA8, 0x00, 0x19, 0x01, 0x23, 0x45, 80])
    frame = decode_frame(build_frame(FrameType.BATTERY_SENSOR, payload))
    assert isinstance(frame, Battery)
    assert frame.voltage_v == pytest.approx(16.8)
    assert frame.current_a == pytest.approx(2.5)
    assert frame.capacity == 0x012345
    assert frame.remaining == 80


def test_decode_attitude_signed():
    payload = struct.pack('>hhh', -1000, 2000, -31416)
    frame = decode_frame(build_frame(FrameType.ATTITUDE, payload, sync=CRSF_SYNC_ELRS))
    assert isinstance(frame, Attitude)
    assert frame.sync == CRSF_SYNC_ELRS
    assert (frame.pitch, frame.roll, frame.yaw) == (-1000, 2000, -31416)


def test_decode_device_info():
    payload = bytes([0xEA, 0xEE, 0x01, 0x02, 6]) + b"ELRS\x00\x00"
    frame = decode_frame(build_frame(FrameType.DEVICE_INFO, payload))
    assert isinstance(frame, DeviceInfo)
    assert frame.name == "ELRS"
    assert frame.src_addr == 0xEE


def test_decode_device_info_name_bounded_by_payload():
    payload = bytes([0xEA, 0xEE, 0x01, 0x02, 40]) + b"TX"
    frame = decode_frame(build_frame(FrameType.DEVICE_INFO, payload))
    assert frame.name == "TX"


def test_decode_elrs_status():
    frame = decode_frame(build_frame(FrameType.ELRS_STATUS, bytes([3, 4, 0, 90, 7, 1, 1, 0])))
    assert isinstance(frame, ElrsStatus)
    assert frame.packet_rate == 3
    assert frame.signal_quality == 90


def test_decode_msp():
    payload = bytes([0xC8, 0xEA, 1, 3, 7, 100]) + b"\x0a\x0b\x0c\xff"
    for ftype in (FrameType.MSP_REQ, FrameType.MSP_RESP, FrameType.MSP_WRITE):
        frame = decode_frame(build_frame(ftype, payload))
        assert isinstance(frame, MspFrame)
        assert frame.frame_type == ftype
        assert frame.function == 100
        assert frame.data == b"\x0a\x0b\x0c"


def test_unknown_type_preserved():
    raw = bytes(build_frame(0x99, b"\x01\x02\x03", sync=CRSF_SYNC_ELRS))
    frame = decode_frame(raw)
    assert isinstance(frame, UnknownFrame)
    assert frame.payload == b"\x01\x02\x03"
    assert frame.to_bytes() == raw


def test_short_known_payload_kept_raw():
    frame = decode_frame(build_frame(FrameType.GPS, bytes(4)))
    assert isinstance(frame, UnknownFrame)
    assert frame.frame_type == FrameType.GPS


def test_decode_invalid_raises():
    raw = bytearray(build_rc_frame([992] * 16))
    raw[-1] ^= 0xFF
    with pytest.raises(CRSFFrameError) as exc:
        decode_frame(raw)
    assert exc.value.reason == FrameError.CRC_MISMATCH
    with pytest.raises(ValueError):
        decode_frame(b"\xc8")


def test_describe_every_variant():
    frames = [
        build_rc_frame([992] * 16),
        build_frame(FrameType.LINK_STATISTICS, bytes(10)),
        build_frame(FrameType.GPS, bytes(17)),
        build_frame(FrameType.BATTERY_SENSOR, bytes(8)),
        build_frame(FrameType.ATTITUDE, bytes(6)),
        build_frame(FrameType.DEVICE_INFO, bytes(5)),
        build_frame(FrameType.ELRS_STATUS, bytes(8)),
        build_frame(FrameType.MSP_RESP, bytes(6)),
        build_frame(0x99, b"\xab"),
    ]
    lines = [describe(decode_frame(f)) for f in frames]
    assert lines[0].startswith("RC_CHANNELS_PACKED: [992")
    assert "1500" in lines[0]
    assert lines[-1].startswith("UNKNOWN_0x99: unknown type")
    assert "ab" in lines[-1]


def test_describe_names_enums_and_addresses():
    elrs = decode_frame(build_frame(FrameType.ELRS_STATUS, bytes([3, 6, 0, 90, 7, 1, 1, 0])))
    assert "rate RATE_500HZ" in describe(elrs)
    assert "power POWER_1000MW" in describe(elrs)

    odd = decode_frame(build_frame(FrameType.ELRS_STATUS, bytes([9, 9, 0, 0, 0, 0, 0, 0])))
    assert "rate 9 power 9" in describe(odd)

    stats = decode_frame(build_frame(FrameType.LINK_STATISTICS, bytes([0, 0, 0, 0, 0, 2, 0, 0, 0, 0])))
    assert "mode MODE_250HZ" in describe(stats)

    info = decode_frame(build_frame(FrameType.DEVICE_INFO, bytes([0xEA, 0xEE, 1, 2, 4]) + b"ELRS"))
    assert describe(info) == "DEVICE_INFO: 'ELRS' from CRSF_TRANSMITTER"

    msp = decode_frame(build_frame(FrameType.MSP_REQ, bytes([0xC8, 0x42, 1, 0, 1, 100])))
    assert "0x42 -> FLIGHT_CONTROLLER" in describe(msp)
