"""
CRSF frame codec.

Frame on the wire: [Sync] [Len] [Type] [Payload] [CRC8]
Len counts everything after itself (type + payload + crc), CRC covers
type + payload.
"""
import struct
from enum import IntEnum

from crsf_crc import crc8
from crsf_protocol import (
    CRSF_FRAME_LEN_OFFSET,
    CRSF_FRAME_PAYLOAD_OFFSET,
    CRSF_FRAME_TYPE_OFFSET,
    CRSF_HEADER_LEN,
    CRSF_MAX_FRAME_LEN,
    CRSF_MAX_PAYLOAD_LEN,
    CRSF_MIN_FRAME_LEN,
    CRSF_SYNC,
    CHANNEL_MID,
    FrameType,
    RC_CHANNEL_BITS,
    RC_CHANNEL_COUNT,
    RC_CHANNEL_MASK,
    RC_FRAME_LEN,
    RC_PAYLOAD_LEN,
    SYNC_BYTES,
    to_frame_type,
)

# Minimum: sync + len + type + crc
MIN_BUFFER_LEN = 4


class FrameError(IntEnum):
    TOO_SHORT = 1
    BAD_SYNC = 2
    BAD_LENGTH = 3
    TRUNCATED = 4
    CRC_MISMATCH = 5


class CRSFFrameError(ValueError):
    def __init__(self, reason, message=None):
        self.reason = reason
        super().__init__(message or f"invalid CRSF frame: {reason.name}")


def _header_error(buffer):
    if buffer[0] not in SYNC_BYTES:
        return FrameError.BAD_SYNC
    frame_len = buffer[CRSF_FRAME_LEN_OFFSET]
    if frame_len < CRSF_MIN_FRAME_LEN or frame_len > CRSF_MAX_FRAME_LEN:
        return FrameError.BAD_LENGTH
    return None


def classify(buffer):
    """Returns the declared frame type, or None if the header is malformed.

    Known types come back as FrameType members, anything else as the raw
    int so unknown frames stay distinguishable from an invalid header.
    """
    if len(buffer) < 3:
        return None
    if _header_error(buffer) is not None:
        return None
    return to_frame_type(buffer[CRSF_FRAME_TYPE_OFFSET])


def check_frame(buffer):
    """Returns None for a well-formed frame, else the first FrameError found."""
    if len(buffer) < MIN_BUFFER_LEN:
        return FrameError.TOO_SHORT
    error = _header_error(buffer)
    if error is not None:
        return error

    frame_len = buffer[CRSF_FRAME_LEN_OFFSET]
    # Capacity first, the crc index is derived from the declared length
    if len(buffer) < frame_len + CRSF_HEADER_LEN:
        return FrameError.TRUNCATED

    crc_index = frame_len + 1
    calculated_crc = crc8(buffer[CRSF_FRAME_TYPE_OFFSET:crc_index])
    if calculated_crc != buffer[crc_index]:
        return FrameError.CRC_MISMATCH
    return None


def is_valid(buffer):
    return check_frame(buffer) is None


def frame_payload(buffer):
    """Payload bytes of a frame whose header has already been checked."""
    return bytes(buffer[CRSF_FRAME_PAYLOAD_OFFSET:buffer[CRSF_FRAME_LEN_OFFSET] + 1])


def pack_channels(channels, out=None):
    """Packs 16 x 11-bit channels into 22 bytes, LSB first.

    Values above 11 bits are masked, not rejected.
    """
    if len(channels) != RC_CHANNEL_COUNT:
        raise ValueError(f"expected {RC_CHANNEL_COUNT} channels, got {len(channels)}")
    if out is None:
        out = bytearray(RC_PAYLOAD_LEN)
    elif len(out) < RC_PAYLOAD_LEN:
        raise ValueError(f"output buffer needs {RC_PAYLOAD_LEN} bytes, has {len(out)}")

    bit_buffer = 0
    bit_count = 0
    byte_index = 0
    for ch_val in channels:
        bit_buffer |= (int(ch_val) & RC_CHANNEL_MASK) << bit_count
        bit_count += RC_CHANNEL_BITS
        while bit_count >= 8:
            out[byte_index] = bit_buffer & 0xFF
            byte_index += 1
            bit_buffer >>= 8
            bit_count -= 8

    # Zero-filled tail; 16 x 11 bits leaves none
    if bit_count > 0:
        out[byte_index] = bit_buffer & 0xFF
    return out


def unpack_channels(payload):
    """Unpacks 16 x 11-bit channels from the first 22 bytes of payload."""
    if len(payload) < RC_PAYLOAD_LEN:
        raise ValueError(f"RC payload needs {RC_PAYLOAD_LEN} bytes, has {len(payload)}")

    channels = []
    bit_buffer = 0
    bit_count = 0
    byte_index = 0
    for _ in range(RC_CHANNEL_COUNT):
        while bit_count < RC_CHANNEL_BITS:
            bit_buffer |= payload[byte_index] << bit_count
            byte_index += 1
            bit_count += 8
        channels.append(bit_buffer & RC_CHANNEL_MASK)
        bit_buffer >>= RC_CHANNEL_BITS
        bit_count -= RC_CHANNEL_BITS
    return channels


def build_frame(frame_type, payload, sync=CRSF_SYNC):
    """Assembles [Sync] [Len] [Type] [Payload] [CRC] for any frame type."""
    if len(payload) > CRSF_MAX_PAYLOAD_LEN:
        raise ValueError(f"payload too long ({len(payload)} > {CRSF_MAX_PAYLOAD_LEN})")
    frame = bytearray(struct.pack('BBB', sync & 0xFF, len(payload) + 2, frame_type & 0xFF))
    frame += payload
    frame.append(crc8(frame[CRSF_FRAME_TYPE_OFFSET:]))
    return frame


def build_rc_frame(channels):
    """RC_CHANNELS_PACKED frame: 26 bytes on the wire, length field 24."""
    frame = bytearray(struct.pack('BBB', CRSF_SYNC, RC_FRAME_LEN, FrameType.RC_CHANNELS_PACKED))
    frame += pack_channels(channels)
    # CRC is calculated on Type + Payload
    frame.append(crc8(frame[CRSF_FRAME_TYPE_OFFSET:]))
    return frame


def channel_to_us(value):
    """11-bit channel value to microseconds (992 -> 1500us)."""
    return int(round(1500 + (value - CHANNEL_MID) * 5 / 8))


def us_to_channel(us):
    """Microseconds to an 11-bit channel value, clamped to 0..2047."""
    value = int(round(CHANNEL_MID + (us - 1500) * 8 / 5))
    return max(0, min(RC_CHANNEL_MASK, value))
