import argparse
import logging
import os
import sys
import time

import serial

from crsf_codec import build_rc_frame
from crsf_format import describe
from crsf_frames import decode_frame
from crsf_protocol import CHANNEL_MID, RC_CHANNEL_COUNT
from crsf_sender import CRSFSender
from crsf_stream import CRSFStreamParser

# Configuration
DEFAULT_PORT = os.getenv("CRSF_PORT", "/dev/ttyACM0")
DEFAULT_BAUD = int(os.getenv("CRSF_BAUD", "420000"))
DEFAULT_RATE_HZ = 50

logger = logging.getLogger(__name__)


def parse_channels(values):
    """Pads a partial channel list with center (992) up to 16 values."""
    if len(values) > RC_CHANNEL_COUNT:
        raise ValueError(f"at most {RC_CHANNEL_COUNT} channels, got {len(values)}")
    return list(values) + [CHANNEL_MID] * (RC_CHANNEL_COUNT - len(values))


def cmd_decode(args):
    try:
        data = bytes.fromhex("".join(args.hex))
    except ValueError as e:
        logger.error(f"Bad hex input: {e}")
        return 1

    parser = CRSFStreamParser()
    frames = parser.feed(data)
    if not frames:
        logger.error(f"No valid CRSF frame in {len(data)} bytes (CRC errors: {parser.crc_errors})")
        return 1
    for raw in frames:
        print(describe(decode_frame(raw)))
    return 0


def cmd_build(args):
    try:
        channels = parse_channels(args.channels)
    except ValueError as e:
        logger.error(str(e))
        return 1
    print(build_rc_frame(channels).hex(" "))
    return 0


def cmd_monitor(args):
    try:
        ser = serial.Serial(args.port, args.baud, timeout=0.1)
    except serial.SerialException as e:
        logger.error(f"Could not open {args.port}: {e}")
        return 1

    logger.info(f"Listening on {args.port} at {args.baud} baud...")
    parser = CRSFStreamParser()
    try:
        with ser:
            while True:
                chunk = ser.read(128)
                if not chunk:
                    continue
                for raw in parser.feed(chunk):
                    print(describe(decode_frame(raw)))
    except KeyboardInterrupt:
        logger.info(f"Frames: {parser.frames} | CRC errors: {parser.crc_errors} | Dropped: {parser.dropped_bytes}")
    except serial.SerialException as e:
        logger.error(f"Serial error: {e}")
        return 1
    return 0


def cmd_send(args):
    try:
        channels = parse_channels(args.channels)
    except ValueError as e:
        logger.error(str(e))
        return 1
    if args.rate <= 0:
        logger.error(f"Rate must be positive, got {args.rate}")
        return 1

    sender = CRSFSender(port=args.port, baud=args.baud, rate_hz=args.rate, start=False)
    if not sender.open_serial():
        logger.error(f"Could not open {args.port}")
        return 1
    sender.update_channels(channels)
    sender.start()
    try:
        if args.duration:
            time.sleep(args.duration)
        else:
            while True:
                time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        sender.close()
    logger.info(f"Sent {sender.frames_sent} frames")
    return 0


def build_parser():
    parser = argparse.ArgumentParser(prog="crsf-tool", description="CRSF frame codec tool")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("decode", help="decode frames from hex bytes")
    p.add_argument("hex", nargs="+")
    p.set_defaults(func=cmd_decode)

    p = sub.add_parser("build", help="build an RC_CHANNELS_PACKED frame")
    p.add_argument("channels", nargs="*", type=int)
    p.set_defaults(func=cmd_build)

    p = sub.add_parser("monitor", help="print frames read from a serial port")
    p.add_argument("-P", "--port", default=DEFAULT_PORT)
    p.add_argument("-b", "--baud", type=int, default=DEFAULT_BAUD)
    p.set_defaults(func=cmd_monitor)

    p = sub.add_parser("send", help="send RC frames to a serial port")
    p.add_argument("-P", "--port", default=DEFAULT_PORT)
    p.add_argument("-b", "--baud", type=int, default=DEFAULT_BAUD)
    p.add_argument("-r", "--rate", type=float, default=DEFAULT_RATE_HZ)
    p.add_argument("-d", "--duration", type=float, default=0, help="seconds, 0 runs until Ctrl-C")
    p.add_argument("channels", nargs="*", type=int)
    p.set_defaults(func=cmd_send)
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
