from enum import IntEnum

# Sync bytes
CRSF_SYNC = 0xC8
CRSF_SYNC_ELRS = 0xEE
SYNC_BYTES = (CRSF_SYNC, CRSF_SYNC_ELRS)

# Frame sizes
CRSF_MAX_PAYLOAD_LEN = 62
CRSF_MIN_FRAME_LEN = 2    # type + crc
CRSF_MAX_FRAME_LEN = CRSF_MAX_PAYLOAD_LEN + 2
CRSF_HEADER_LEN = 2       # sync + length

CRSF_FRAME_LEN_OFFSET = 1
CRSF_FRAME_TYPE_OFFSET = 2
CRSF_FRAME_PAYLOAD_OFFSET = 3

# RC channels
RC_CHANNEL_COUNT = 16
RC_CHANNEL_BITS = 11
RC_CHANNEL_MASK = 0x07FF
RC_PAYLOAD_LEN = 22       # 16 * 11 bits = 176 bits
RC_FRAME_LEN = RC_PAYLOAD_LEN + 2
RC_FRAME_SIZE = RC_FRAME_LEN + CRSF_HEADER_LEN

# 11-bit channel units (992 is center, 1500us)
CHANNEL_MID = 992


class FrameType(IntEnum):
    # Telemetry (receiver -> transmitter)
    GPS = 0x02
    VARIO = 0x03
    BATTERY_SENSOR = 0x08
    BARO_ALTITUDE = 0x09
    HEARTBEAT = 0x0B
    OPENTX_SYNC = 0x10
    LINK_STATISTICS = 0x14
    RADIO_ID = 0x3A

    # Attitude and position
    ATTITUDE = 0x1E
    FLIGHT_MODE = 0x21

    # RC channels (transmitter -> receiver)
    RC_CHANNELS_PACKED = 0x16
    SUBSET_RC_CHANNELS_PACKED = 0x17
    LINK_STATISTICS_RX = 0x1C
    LINK_STATISTICS_TX = 0x1D

    # Device communication
    DEVICE_PING = 0x28
    DEVICE_INFO = 0x29
    PARAMETER_SETTINGS = 0x2C
    PARAMETER_READ = 0x2D
    COMMAND = 0x32

    # ELRS
    ELRS_STATUS = 0x2A
    ELRS_BOOTLOADER = 0x30

    # MSP over CRSF (Betaflight/iNav)
    MSP_REQ = 0x7A
    MSP_RESP = 0x7B
    MSP_WRITE = 0x7C

    # Vendor specific
    ARDUINO = 0x80


class Address(IntEnum):
    BROADCAST = 0x00
    USB = 0x10
    TBS_CORE_PNP = 0x80
    RESERVED1 = 0x8A
    CURRENT_SENSOR = 0xC0
    GPS = 0xC2
    TBS_BLACKBOX = 0xC4
    FLIGHT_CONTROLLER = 0xC8
    RESERVED2 = 0xCA
    RACE_TAG = 0xCC
    RADIO_TRANSMITTER = 0xEA
    CRSF_RECEIVER = 0xEC
    CRSF_TRANSMITTER = 0xEE


class ElrsPacketRate(IntEnum):
    RATE_50HZ = 0
    RATE_150HZ = 1
    RATE_250HZ = 2
    RATE_500HZ = 3
    RATE_1000HZ = 4


class ElrsPowerLevel(IntEnum):
    POWER_10MW = 0
    POWER_25MW = 1
    POWER_50MW = 2
    POWER_100MW = 3
    POWER_250MW = 4
    POWER_500MW = 5
    POWER_1000MW = 6
    POWER_2000MW = 7


class ElrsRfMode(IntEnum):
    MODE_4CH = 0
    MODE_DYNAMIC = 1
    MODE_250HZ = 2
    MODE_500HZ = 3


_KNOWN_TYPES = {t.value: t for t in FrameType}


def to_frame_type(value):
    """Returns the FrameType member for value, or the plain int when unknown."""
    return _KNOWN_TYPES.get(value, value)


def frame_type_name(value):
    known = _KNOWN_TYPES.get(value)
    if known is not None:
        return known.name
    return f"UNKNOWN_0x{value:02X}"
