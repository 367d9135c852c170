from __future__ import annotations

import tempfile
import time
import unittest
from pathlib import Path
from unittest import mock

import serial

from elm327diag.elm import (
    ELM327,
    ELMError,
    ReceiveError,
    ResponseTimeoutError,
    SendError,
    TrafficLog,
    TransportOpenError,
)
from tests.replay_transport import ReplaySerial, build_replay_elm


INIT_STEPS = [
    {"command": "ATZ", "lines": ["", "ELM327 v1.5"]},
    {"command": "ATE0", "lines": ["ATE0", "OK"]},
    {"command": "ATL0", "lines": ["OK"]},
    {"command": "ATS1", "lines": ["OK"]},
    {"command": "ATH0", "lines": ["OK"]},
    {"command": "ATSP0", "lines": ["OK"]},
]


class TransportOpenTests(unittest.TestCase):
    def test_open_runs_init_sequence(self) -> None:
        fake = ReplaySerial(INIT_STEPS)
        with mock.patch("elm327diag.elm.elm327.serial.Serial", return_value=fake), mock.patch(
            "elm327diag.elm.elm327.time.sleep"
        ):
            elm = ELM327("/dev/ttyUSB0").open()
        self.assertEqual("ELM327 v1.5", elm.elm_version)
        self.assertEqual(["ATZ", "ATE0", "ATL0", "ATS1", "ATH0", "ATSP0"], fake.writes)
        self.assertTrue(elm.is_open)
        elm.close()
        self.assertFalse(elm.is_open)

    def test_open_missing_device_fails_fast(self) -> None:
        with mock.patch(
            "elm327diag.elm.elm327.serial.Serial",
            side_effect=serial.SerialException("could not open port /dev/nope"),
        ):
            with self.assertRaises(TransportOpenError):
                ELM327("/dev/nope").open()

    def test_open_rejected_init_closes_port(self) -> None:
        steps = [INIT_STEPS[0], {"command": "ATE0", "lines": ["?"]}]
        fake = ReplaySerial(steps)
        with mock.patch("elm327diag.elm.elm327.serial.Serial", return_value=fake), mock.patch(
            "elm327diag.elm.elm327.time.sleep"
        ):
            elm = ELM327("/dev/ttyUSB0")
            with self.assertRaises(TransportOpenError):
                elm.open()
        self.assertFalse(fake.is_open)
        self.assertIsNone(elm.connection)

    def test_close_is_idempotent(self) -> None:
        elm, fake = build_replay_elm([])
        elm.close()
        elm.close()
        self.assertFalse(fake.is_open)


class TransportExchangeTests(unittest.TestCase):
    def test_send_receive(self) -> None:
        elm, fake = build_replay_elm([{"command": "010C", "lines": ["SEARCHING...", "41 0C 1A 0F"]}])
        elm.send(b"010C\r")
        frame = elm.receive()
        self.assertIsNotNone(frame)
        self.assertEqual([b"\x41\x0C\x1A\x0F"], frame.messages)
        self.assertEqual(["SEARCHING...", "41 0C 1A 0F"], elm.last_lines)
        frame.release()
        self.assertEqual(["010C"], fake.writes)

    def test_echo_is_dropped(self) -> None:
        elm, _fake = build_replay_elm([{"command": "010D", "lines": ["010D", "41 0D 64"]}])
        elm.send(b"010D\r")
        frame = elm.receive()
        self.assertEqual([b"\x41\x0D\x64"], frame.messages)
        frame.release()

    def test_ascii_receive_keeps_text(self) -> None:
        elm, _fake = build_replay_elm([{"command": "010D", "lines": ["41 0D 64"]}])
        elm.send(b"010D\r")
        frame = elm.receive(ascii=True)
        self.assertEqual([b"41 0D 64"], frame.messages)
        frame.release()

    def test_no_data_is_absent(self) -> None:
        elm, _fake = build_replay_elm([{"command": "010D", "lines": ["NO DATA"]}])
        elm.send(b"010D\r")
        self.assertIsNone(elm.receive())

    def test_flush_drops_residual_bytes(self) -> None:
        elm, fake = build_replay_elm(
            [
                {"command": "010D", "lines": ["41 0D 64"], "trailing": "41 0D 99\r>"},
                {"command": "010C", "lines": ["41 0C 1A 0F"]},
            ]
        )
        elm.send(b"010D\r")
        elm.receive().release()
        elm.flush()
        self.assertGreaterEqual(fake.input_resets, 1)

        elm.send(b"010C\r")
        frame = elm.receive()
        self.assertEqual([b"\x41\x0C\x1A\x0F"], frame.messages)
        frame.release()

    def test_timeout_returns_control(self) -> None:
        elm, _fake = build_replay_elm([{"command": "010D", "silent": True}], timeout=0.1)
        elm.send(b"010D\r")
        start = time.monotonic()
        with self.assertRaises(ResponseTimeoutError) as ctx:
            elm.receive()
        elapsed = time.monotonic() - start
        self.assertLess(elapsed, 0.1 + 0.5)
        self.assertGreaterEqual(elapsed, 0.1)
        self.assertIsInstance(ctx.exception, TimeoutError)
        self.assertEqual([], elm.frames)

    def test_partial_reply_is_discarded_on_timeout(self) -> None:
        elm, _fake = build_replay_elm(
            [
                {"command": "010C", "partial": "41 0C 1A"},
                {"command": "010D", "lines": ["41 0D 64"]},
            ],
            timeout=0.1,
        )
        elm.send(b"010C\r")
        start = time.monotonic()
        with self.assertRaises(ResponseTimeoutError):
            elm.receive()
        self.assertLess(time.monotonic() - start, 0.1 + 0.5)
        self.assertEqual([], elm.frames)
        self.assertEqual([], elm.last_lines)

        elm.send(b"010D\r")
        frame = elm.receive()
        self.assertEqual([b"\x41\x0D\x64"], frame.messages)
        frame.release()

    def test_receive_timeout_override(self) -> None:
        elm, _fake = build_replay_elm([{"command": "010D", "silent": True}], timeout=5.0)
        elm.send(b"010D\r")
        start = time.monotonic()
        with self.assertRaises(ResponseTimeoutError):
            elm.receive(timeout=0.05)
        self.assertLess(time.monotonic() - start, 0.05 + 0.5)

    def test_set_timeout_in_milliseconds(self) -> None:
        elm, _fake = build_replay_elm([])
        elm.set_timeout(250)
        self.assertAlmostEqual(0.25, elm.timeout)
        with self.assertRaises(ValueError):
            elm.set_timeout(0)

    def test_write_failure_is_send_error(self) -> None:
        elm, _fake = build_replay_elm([{"command": "010D", "error": "write"}])
        with self.assertRaises(SendError):
            elm.send(b"010D\r")

    def test_short_write_is_send_error(self) -> None:
        elm, _fake = build_replay_elm([{"command": "010D", "short_write": True}])
        with self.assertRaises(SendError):
            elm.send(b"010D\r")

    def test_send_on_closed_port(self) -> None:
        elm = ELM327("/dev/ttyUSB0")
        with self.assertRaises(SendError):
            elm.send(b"010D\r")

    def test_port_closing_mid_read(self) -> None:
        elm, fake = build_replay_elm([{"command": "010D", "silent": True}])
        elm.send(b"010D\r")
        fake.close()
        with self.assertRaises(ReceiveError):
            elm.receive()

    def test_traffic_log_records_one_line_per_event(self) -> None:
        with tempfile.TemporaryDirectory(prefix="elm_traffic_") as tmp_dir:
            path = Path(tmp_dir) / "logs" / "traffic.log"
            elm, _fake = build_replay_elm(
                [
                    {"command": "010D", "lines": ["41 0D 64"]},
                    {"command": "010C", "silent": True},
                ],
                timeout=0.05,
            )
            elm.raw_logger = TrafficLog(path)
            elm.send(b"010D\r")
            elm.receive().release()
            elm.send(b"010C\r")
            with self.assertRaises(ResponseTimeoutError):
                elm.receive()
            entries = path.read_text(encoding="utf-8").splitlines()

        self.assertEqual(3, len(entries))
        self.assertTrue(entries[0].endswith(" TX 010D"))
        self.assertTrue(entries[1].endswith(" RX 010D: 41 0D 64"))
        self.assertTrue(entries[2].endswith(" TX 010C"))


class ErrorTests(unittest.TestCase):
    def test_error_context_in_message(self) -> None:
        err = ReceiveError("No data returned", command="010D", lines=["NO DATA"])
        self.assertIn("cmd=010D", str(err))
        self.assertIn("NO DATA", str(err))
        self.assertIsInstance(err, ELMError)
