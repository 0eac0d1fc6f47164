from crsf_codec import build_frame, build_rc_frame
from crsf_protocol import FrameType
from crsf_stream import CRSFStreamParser


def test_single_frame():
    parser = CRSFStreamParser()
    frame = bytes(build_rc_frame([992] * 16))
    assert parser.feed(frame) == [frame]
    assert parser.frames == 1
    assert len(parser.buffer) == 0


def test_frame_split_across_reads():
    parser = CRSFStreamParser()
    frame = bytes(build_rc_frame([1500] * 16))
    assert parser.feed(frame[:10]) == []
    assert parser.feed(frame[10:]) == [frame]


def test_garbage_and_multiple_frames():
    parser = CRSFStreamParser()
    rc = bytes(build_rc_frame([992] * 16))
    att = bytes(build_frame(FrameType.ATTITUDE, bytes(6)))
    data = b"\x00\x11\x22" + rc + b"\x55" + att
    assert parser.feed(data) == [rc, att]
    assert parser.dropped_bytes == 4


def test_resync_after_crc_error():
    parser = CRSFStreamParser()
    bad = bytearray(build_rc_frame([992] * 16))
    bad[-1] ^= 0xFF
    good = bytes(build_rc_frame([1000] * 16))
    assert parser.feed(bytes(bad) + good) == [good]
    assert parser.crc_errors == 1


def test_bad_length_after_sync():
    parser = CRSFStreamParser()
    good = bytes(build_rc_frame([992] * 16))
    assert parser.feed(b"\xc8\x00\x16\x00" + good) == [good]


def test_reset():
    parser = CRSFStreamParser()
    bad = bytearray(build_rc_frame([992] * 16))
    bad[-1] ^= 0xFF
    parser.feed(b"\x00" + bytes(build_rc_frame([992] * 16)) + bytes(bad) + b"\xc8\x18\x16")
    assert parser.frames == 1
    assert parser.crc_errors == 1
    assert parser.dropped_bytes > 0
    parser.reset()
    assert len(parser.buffer) == 0
    assert (parser.frames, parser.crc_errors, parser.dropped_bytes) == (0, 0, 0)
