from __future__ import annotations

import unittest

from elm327diag.elm import FrameReleaseError, ReceiveError, ResponseFrame, receiving
from tests.replay_transport import build_replay_elm


class ResponseFrameTests(unittest.TestCase):
    def test_payload_offsets(self) -> None:
        frame = ResponseFrame([b"\x41\x0C\x1A\x0F"])
        self.assertEqual(1, frame.frame_count)
        self.assertEqual(b"\x41\x0C", frame.header())
        self.assertEqual((0x1A, 0x0F), frame.payload_bytes())

    def test_single_byte_payload_reads_zero_second_byte(self) -> None:
        frame = ResponseFrame([b"\x41\x0D\x64"])
        self.assertEqual((0x64, 0), frame.payload_bytes())

    def test_header_only_frame_has_no_payload(self) -> None:
        frame = ResponseFrame([b"\x41\x0D"])
        with self.assertRaises(ReceiveError):
            frame.payload_bytes()

    def test_release_exactly_once(self) -> None:
        frame = ResponseFrame([b"\x41\x0D\x64"])
        frame.release()
        self.assertTrue(frame.released)
        with self.assertRaises(FrameReleaseError):
            frame.release()
        with self.assertRaises(FrameReleaseError):
            frame.payload_bytes()

    def test_context_manager_releases(self) -> None:
        with ResponseFrame([b"\x41\x0D\x64"]) as frame:
            self.assertEqual((0x64, 0), frame.payload_bytes())
        self.assertTrue(frame.released)


class ReceivingTests(unittest.TestCase):
    def test_frame_released_when_block_raises(self) -> None:
        elm, _fake = build_replay_elm([{"command": "010D", "lines": ["41 0D 64"]}])
        elm.send(b"010D\r")
        with self.assertRaises(RuntimeError):
            with receiving(elm):
                raise RuntimeError("boom")
        self.assertEqual(1, len(elm.frames))
        self.assertEqual([], elm.unreleased_frames)

    def test_frame_released_after_block(self) -> None:
        elm, _fake = build_replay_elm([{"command": "010D", "lines": ["41 0D 64"]}])
        elm.send(b"010D\r")
        with receiving(elm) as frame:
            self.assertEqual((0x64, 0), frame.payload_bytes())
        self.assertTrue(frame.released)

    def test_absent_frame_raises_receive_error(self) -> None:
        elm, _fake = build_replay_elm([{"command": "010D", "lines": ["NO DATA"]}])
        elm.send(b"010D\r")
        with self.assertRaises(ReceiveError):
            with receiving(elm):
                self.fail("block must not run")
        self.assertEqual([], elm.frames)
