"""CRSF CRC8 (poly 0xD5, MSB first, init 0x00)."""

CRSF_CRC_POLY = 0xD5


def crc8(data, poly=CRSF_CRC_POLY, init=0x00):
    """CRSF CRC8 implementation.

    Covers type + payload of a frame, i.e. everything between the length
    byte and the CRC byte. An empty input yields 0.
    """
    crc = init
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 0x80:
                crc = (crc << 1) ^ poly
            else:
                crc <<= 1
            crc &= 0xFF
    return crc
