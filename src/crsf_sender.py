import serial
import threading
import time
import logging

from crsf_codec import build_rc_frame
from crsf_protocol import RC_CHANNEL_COUNT, CHANNEL_MID

logger = logging.getLogger(__name__)

# Sticks map -1.0..1.0 onto this range, throttle 0.0..1.0
STICK_MIN = 191
STICK_MAX = 1792


class CRSFSender:
    """
    Sends CRSF RC_CHANNELS_PACKED frames at a fixed rate from a daemon thread.
    CRSF v2: [Sync] [Len] [Type] [Payload] [CRC8]
    """

    def __init__(self, port='/dev/ttyACM0', baud=420000, rate_hz=50, fallback_ports=None, start=True):
        if rate_hz <= 0:
            raise ValueError(f"rate must be positive, got {rate_hz}")
        self.port = port
        self.baud = baud
        self.interval = 1.0 / rate_hz
        self.fallback_ports = list(fallback_ports or [])

        # Thread safety
        self.data_lock = threading.Lock()

        # Disarmed default: R,P,Y center, throttle and aux low
        self.rc_channels = self.disarmed_channels()
        self.armed = False

        self.running = False
        self.ser = None
        self.frames_sent = 0
        self.thread = None
        if start:
            self.start()

    @staticmethod
    def disarmed_channels():
        return [CHANNEL_MID, CHANNEL_MID, CHANNEL_MID, STICK_MIN] + [STICK_MIN] * (RC_CHANNEL_COUNT - 4)

    def start(self):
        self.thread = threading.Thread(target=self._sender_loop, daemon=True)
        self.running = True
        self.thread.start()
        logger.info(f"CRSF Sender started on {self.port} at {1.0 / self.interval:.0f}Hz")

    def open_serial(self):
        """Opens the port, or the first fallback that works. False if none opens."""
        if self.ser and self.ser.is_open:
            return True
        for p in [self.port] + self.fallback_ports:
            try:
                self.ser = serial.Serial(p, self.baud, timeout=0.1)
                logger.info(f"Connected to CRSF link on {p}")
                self.port = p
                return True
            except serial.SerialException as e:
                logger.debug(f"Could not open {p}: {e}")
        return False

    def update_channels(self, channels):
        """Replaces all 16 raw 11-bit channel values."""
        if len(channels) != RC_CHANNEL_COUNT:
            raise ValueError(f"expected {RC_CHANNEL_COUNT} channels, got {len(channels)}")
        with self.data_lock:
            self.rc_channels = [int(v) for v in channels]

    def update_values(self, filtered_vals, armed):
        """Maps -1.0..1.0 sticks (0.0..1.0 throttle) to 191..1792."""
        span = STICK_MAX - STICK_MIN
        with self.data_lock:
            self.armed = armed
            if not self.armed:
                self.rc_channels = self.disarmed_channels()
                return
            self.rc_channels[0] = int(CHANNEL_MID + filtered_vals["roll"] * span / 2)
            self.rc_channels[1] = int(CHANNEL_MID + filtered_vals["pitch"] * span / 2)
            self.rc_channels[2] = int(CHANNEL_MID + filtered_vals["yaw"] * span / 2)
            self.rc_channels[3] = int(STICK_MIN + filtered_vals["throttle"] * span)
            self.rc_channels[4] = STICK_MAX  # AUX1 (ARMED)

            # Clamp for safety
            for i in range(RC_CHANNEL_COUNT):
                self.rc_channels[i] = max(STICK_MIN, min(STICK_MAX, self.rc_channels[i]))

    def current_frame(self):
        with self.data_lock:
            return build_rc_frame(self.rc_channels)

    def _sender_loop(self):
        last_heartbeat = time.time()
        packet_cnt = 0
        while self.running:
            start_time = time.time()
            if self.open_serial():
                frame = self.current_frame()
                try:
                    self.ser.write(frame)
                    packet_cnt += 1
                    self.frames_sent += 1
                except (serial.SerialException, OSError) as e:
                    logger.error(f"Serial error: {e}")
                    self.ser.close()
                    self.ser = None

            if time.time() - last_heartbeat > 10:
                if self.ser:
                    logger.info(f"CRSF Heartbeat: Sent {packet_cnt} frames. Status: {'ARMED' if self.armed else 'DIS'}")
                last_heartbeat = time.time()
                packet_cnt = 0

            elapsed = time.time() - start_time
            sleep_time = self.interval - elapsed
            if sleep_time > 0:
                time.sleep(sleep_time)

    def close(self):
        logger.info("Closing CRSF Sender...")
        self.running = False
        if self.thread:
            self.thread.join(timeout=1.0)
        if self.ser:
            self.ser.close()
