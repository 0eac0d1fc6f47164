from crsf_codec import channel_to_us
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
)
from crsf_protocol import (
    Address,
    ElrsPacketRate,
    ElrsPowerLevel,
    ElrsRfMode,
    frame_type_name,
)


def enum_name(enum_cls, value):
    """Member name for value, or the raw number when it is not a member."""
    try:
        return enum_cls(value).name
    except ValueError:
        return str(value)


def address_name(value):
    try:
        return Address(value).name
    except ValueError:
        return f"0x{value:02X}"


def describe(frame):
    """One-line human readable summary of a decoded frame."""
    name = frame_type_name(frame.frame_type)

    if isinstance(frame, RcChannels):
        chans = " ".join(f"{v}" for v in frame.channels)
        us = " ".join(f"{channel_to_us(v)}" for v in frame.channels[:4])
        return f"{name}: [{chans}] | CH1-4 us: {us}"
    if isinstance(frame, LinkStatistics):
        return (f"{name}: RSSI {frame.uplink_rssi_ant1}/{frame.uplink_rssi_ant2} "
                f"LQ {frame.uplink_link_quality}% SNR {frame.uplink_snr} "
                f"mode {enum_name(ElrsRfMode, frame.rf_mode)} "
                f"| Down RSSI {frame.downlink_rssi} LQ {frame.downlink_link_quality}%")
    if isinstance(frame, Gps):
        return (f"{name}: {frame.latitude_deg:.7f}, {frame.longitude_deg:.7f} "
                f"alt {frame.altitude} sats {frame.satellites}")
    if isinstance(frame, Battery):
        return (f"{name}: {frame.voltage_v:.1f}V {frame.current_a:.1f}A "
                f"{frame.capacity}mAh ({frame.remaining}%)")
    if isinstance(frame, Attitude):
        return f"{name}: P:{frame.pitch} R:{frame.roll} Y:{frame.yaw}"
    if isinstance(frame, DeviceInfo):
        return f"{name}: '{frame.name}' from {address_name(frame.src_addr)}"
    if isinstance(frame, ElrsStatus):
        return (f"{name}: rate {enum_name(ElrsPacketRate, frame.packet_rate)} "
                f"power {enum_name(ElrsPowerLevel, frame.tx_power)} "
                f"quality {frame.signal_quality}")
    if isinstance(frame, MspFrame):
        return (f"{name}: {address_name(frame.src_addr)} -> {address_name(frame.dest_addr)} "
                f"function {frame.function} ({len(frame.data)} bytes)")
    if isinstance(frame, UnknownFrame):
        return f"{name}: unknown type, {len(frame.payload)} bytes: {frame.payload.hex(' ')}"
    return f"{name}: unhandled"
