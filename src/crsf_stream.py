import logging

from crsf_codec import FrameError, check_frame, MIN_BUFFER_LEN
from crsf_protocol import CRSF_HEADER_LEN, SYNC_BYTES

logger = logging.getLogger(__name__)


class CRSFStreamParser:
    """
    Splits a raw serial byte stream into CRSF frames.
    Hunts for a sync byte, waits for the declared length, checks the CRC.
    On a bad header or CRC it drops one byte and resyncs.
    """

    def __init__(self):
        self.buffer = bytearray()
        self.frames = 0
        self.crc_errors = 0
        self.dropped_bytes = 0

    def feed(self, data):
        """Adds data to the buffer and returns every complete valid frame."""
        self.buffer.extend(data)
        found = []
        while True:
            self._skip_to_sync()
            if len(self.buffer) < MIN_BUFFER_LEN:
                break

            error = check_frame(self.buffer)
            if error == FrameError.TRUNCATED:
                break
            if error is None:
                size = self.buffer[1] + CRSF_HEADER_LEN
                found.append(bytes(self.buffer[:size]))
                del self.buffer[:size]
                self.frames += 1
                continue

            if error == FrameError.CRC_MISMATCH:
                self.crc_errors += 1
            logger.debug(f"Dropping byte 0x{self.buffer[0]:02X}: {error.name}")
            del self.buffer[0]
            self.dropped_bytes += 1

        # Whatever is left is shorter than one declared frame
        return found

    def _skip_to_sync(self):
        for i, byte in enumerate(self.buffer):
            if byte in SYNC_BYTES:
                if i:
                    del self.buffer[:i]
                    self.dropped_bytes += i
                return
        self.dropped_bytes += len(self.buffer)
        self.buffer.clear()

    def reset(self):
        """Drops buffered bytes and zeroes the counters."""
        self.buffer.clear()
        self.frames = 0
        self.crc_errors = 0
        self.dropped_bytes = 0
