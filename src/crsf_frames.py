"""
Decoded CRSF frames.

decode_frame() validates a raw frame and reads its payload into one
immutable variant per known frame type. Anything the decoder does not
understand comes back as UnknownFrame with the raw payload kept, so it
can be forwarded unchanged. Multi-byte fields are big-endian.
"""
import logging
import struct
from dataclasses import dataclass
from typing import Tuple

from crsf_codec import (
    CRSFFrameError,
    build_frame,
    check_frame,
    frame_payload,
    unpack_channels,
)
from crsf_protocol import FrameType, RC_PAYLOAD_LEN, to_frame_type

logger = logging.getLogger(__name__)

DEVICE_NAME_MAX = 16


def read_u24(data, offset):
    """Reads a big-endian 24-bit unsigned value at offset."""
    return (data[offset] << 16) | (data[offset + 1] << 8) | data[offset + 2]


def write_u24(data, offset, value):
    value &= 0xFFFFFF
    data[offset] = (value >> 16) & 0xFF
    data[offset + 1] = (value >> 8) & 0xFF
    data[offset + 2] = value & 0xFF


@dataclass(frozen=True)
class Frame:
    sync: int
    frame_type: int


@dataclass(frozen=True)
class RcChannels(Frame):
    channels: Tuple[int, ...]


@dataclass(frozen=True)
class LinkStatistics(Frame):
    uplink_rssi_ant1: int
    uplink_rssi_ant2: int
    uplink_link_quality: int
    uplink_snr: int
    active_antenna: int
    rf_mode: int
    uplink_tx_power: int
    downlink_rssi: int
    downlink_link_quality: int
    downlink_snr: int


@dataclass(frozen=True)
class Gps(Frame):
    latitude: int       # degrees * 1e7
    longitude: int      # degrees * 1e7
    ground_speed: int
    heading: int
    altitude: int
    satellites: int

    @property
    def latitude_deg(self):
        return self.latitude / 1e7

    @property
    def longitude_deg(self):
        return self.longitude / 1e7


@dataclass(frozen=True)
class Battery(Frame):
    voltage: int        # 0.1 V
    current: int        # 0.1 A
    capacity: int       # mAh, 24 bit
    remaining: int      # percent

    @property
    def voltage_v(self):
        return self.voltage / 10.0

    @property
    def current_a(self):
        return self.current / 10.0


@dataclass(frozen=True)
class Attitude(Frame):
    pitch: int          # radians * 10000
    roll: int
    yaw: int


@dataclass(frozen=True)
class DeviceInfo(Frame):
    dest_addr: int
    src_addr: int
    dev_type: int
    dev_id: int
    name: str


@dataclass(frozen=True)
class ElrsStatus(Frame):
    packet_rate: int
    tx_power: int
    rx_sensitivity: int
    signal_quality: int
    snr: int
    antenna: int
    model_match: int
    ph_mode: int


@dataclass(frozen=True)
class MspFrame(Frame):
    dest_addr: int
    src_addr: int
    msp_version: int
    packet_id: int
    function: int
    data: bytes


@dataclass(frozen=True)
class UnknownFrame(Frame):
    payload: bytes

    def to_bytes(self):
        """Re-emits the frame exactly as received."""
        return bytes(build_frame(self.frame_type, self.payload, sync=self.sync))


_LINK_STATS = struct.Struct('>10B')
_GPS = struct.Struct('>iiHHiB')
_BATTERY_HEAD = struct.Struct('>HH')
_ATTITUDE = struct.Struct('>hhh')
_DEVICE_INFO_HEAD = struct.Struct('>5B')
_ELRS_STATUS = struct.Struct('>8B')
_MSP_HEAD = struct.Struct('>6B')


def _rc_channels(sync, ftype, payload):
    return RcChannels(sync, ftype, tuple(unpack_channels(payload)))


def _link_stats(sync, ftype, payload):
    return LinkStatistics(sync, ftype, *_LINK_STATS.unpack_from(payload))


def _gps(sync, ftype, payload):
    return Gps(sync, ftype, *_GPS.unpack_from(payload))


def _battery(sync, ftype, payload):
    voltage, current = _BATTERY_HEAD.unpack_from(payload)
    capacity = read_u24(payload, 4)
    return Battery(sync, ftype, voltage, current, capacity, payload[7])


def _attitude(sync, ftype, payload):
    return Attitude(sync, ftype, *_ATTITUDE.unpack_from(payload))


def _device_info(sync, ftype, payload):
    dest, src, dev_type, dev_id, name_len = _DEVICE_INFO_HEAD.unpack_from(payload)
    start = _DEVICE_INFO_HEAD.size
    name_len = min(name_len, DEVICE_NAME_MAX, len(payload) - start)
    raw_name = payload[start:start + name_len]
    name = raw_name.split(b'\x00', 1)[0].decode('ascii', errors='replace')
    return DeviceInfo(sync, ftype, dest, src, dev_type, dev_id, name)


def _elrs_status(sync, ftype, payload):
    return ElrsStatus(sync, ftype, *_ELRS_STATUS.unpack_from(payload))


def _msp(sync, ftype, payload):
    dest, src, version, size, packet_id, function = _MSP_HEAD.unpack_from(payload)
    start = _MSP_HEAD.size
    data = bytes(payload[start:start + size])
    return MspFrame(sync, ftype, dest, src, version, packet_id, function, data)


# frame type -> (minimum payload length, decoder)
_DECODERS = {
    FrameType.RC_CHANNELS_PACKED: (RC_PAYLOAD_LEN, _rc_channels),
    FrameType.LINK_STATISTICS: (_LINK_STATS.size, _link_stats),
    FrameType.GPS: (_GPS.size, _gps),
    FrameType.BATTERY_SENSOR: (8, _battery),
    FrameType.ATTITUDE: (_ATTITUDE.size, _attitude),
    FrameType.DEVICE_INFO: (_DEVICE_INFO_HEAD.size, _device_info),
    FrameType.ELRS_STATUS: (_ELRS_STATUS.size, _elrs_status),
    FrameType.MSP_REQ: (_MSP_HEAD.size, _msp),
    FrameType.MSP_RESP: (_MSP_HEAD.size, _msp),
    FrameType.MSP_WRITE: (_MSP_HEAD.size, _msp),
}


def decode_frame(buffer):
    """Validates buffer and decodes it into a frame variant.

    Raises CRSFFrameError when the buffer is not a well-formed frame.
    """
    error = check_frame(buffer)
    if error is not None:
        raise CRSFFrameError(error)

    sync = buffer[0]
    ftype = to_frame_type(buffer[2])
    payload = frame_payload(buffer)

    entry = _DECODERS.get(ftype)
    if entry is None:
        return UnknownFrame(sync, ftype, payload)

    min_len, decoder = entry
    if len(payload) < min_len:
        logger.debug(f"Short {ftype.name} payload ({len(payload)} < {min_len}), keeping raw")
        return UnknownFrame(sync, ftype, payload)
    return decoder(sync, ftype, payload)
