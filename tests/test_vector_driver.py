import io
import json
from pathlib import Path

import pytest

from loralink_compost.protocol import CompostTemp, Format0x2bCodec, Measurements
from loralink_compost.runtime.clock import FakeClock
from loralink_compost.runtime.logging import JsonlLogger
from loralink_compost.vectors import BANNER, VectorDriver, format_measurement
from loralink_compost.vectors.tokens import (
    ParseFailure,
    Parsed,
    TokenReader,
    parse_float,
    parse_uint8,
)


def _run(text: str, **kwargs) -> tuple[int, str, str, VectorDriver]:  # type: ignore[no-untyped-def]
    out = io.StringIO()
    err = io.StringIO()
    driver = VectorDriver(Format0x2bCodec(), out=out, err=err, **kwargs)
    status = driver.run(io.StringIO(text))
    return status, out.getvalue(), err.getvalue(), driver


def test_driver_emits_log_line_then_hex() -> None:
    status, out, err, driver = _run("Vbat 3.3 Vbus 5.0 .\n")
    assert status == 0
    assert err == ""
    assert out == "Vbat 3.3 Vbus 5 .\n2b 03 34 cd 50 00\n"
    assert len(driver.vectors) == 1
    assert driver.vectors[0].payload == bytes.fromhex("2b0334cd5000")


def test_driver_fixed_field_order_regardless_of_input_order() -> None:
    status, out, _, _ = _run("CompostTemp 25.5 Boot 7 Vbat 3.3 .\n")
    assert status == 0
    assert out == "Vbat 3.3 Boot 7 CompostTemp 25.5 .\n2b 0d 34 cd 07 19 80\n"


def test_driver_empty_record() -> None:
    status, out, _, _ = _run(".\n")
    assert status == 0
    assert out == ".\n2b 00\n"


def test_driver_unknown_key_is_reported_and_skipped() -> None:
    status, out, err, _ = _run("Frobnicate 1 .")
    assert status == 0
    assert err == "unknown key: Frobnicate\nunknown key: 1\n"
    assert out == ".\n2b 00\n"


def test_driver_parse_error_stops_without_emit() -> None:
    status, out, err, driver = _run("Vbat abc")
    assert status == 1
    assert err == "parse error: abc\n"
    assert out == ""
    assert driver.vectors == []


def test_driver_parse_error_drops_pending_record_only() -> None:
    status, out, err, driver = _run("Boot 7 .\nVbus 4.0 Vbat 3..3 .\n")
    assert status == 1
    assert out == "Boot 7 .\n2b 04 07\n"
    assert err == "parse error: 3..3\n"
    assert len(driver.vectors) == 1


def test_driver_boot_requires_integer() -> None:
    status, _, err, _ = _run("Boot 7.5 .")
    assert status == 1
    assert err == "parse error: 7.5\n"


def test_driver_missing_value_at_end_of_input_emits_zeroed_field() -> None:
    status, out, err, driver = _run("Boot 1 Vbat")
    assert status == 0
    assert err == ""
    assert out == "Vbat 0 Boot 1 .\n2b 05 00 00 01\n"
    assert driver.vectors[0].measurements == Measurements(vbat=0.0, boot=1)


def test_driver_missing_value_after_end_of_record() -> None:
    status, out, _, _ = _run("Boot 1 .\nCompostTemp")
    assert status == 0
    assert out == "Boot 1 .\n2b 04 01\nCompostTemp 0 .\n2b 08 00 00\n"


def test_driver_emits_pending_record_at_end_of_input() -> None:
    status, out, _, _ = _run("Vbat 3.3 . Boot 7")
    assert status == 0
    assert out == "Vbat 3.3 .\n2b 01 34 cd\nBoot 7 .\n2b 04 07\n"


def test_driver_no_final_emit_without_valid_fields() -> None:
    status, out, err, _ = _run("Vbat 3.3 .\nBogus\n")
    assert status == 0
    assert out == "Vbat 3.3 .\n2b 01 34 cd\n"
    assert err == "unknown key: Bogus\n"


def test_driver_empty_input() -> None:
    status, out, err, driver = _run("")
    assert (status, out, err) == (0, "", "")
    assert driver.vectors == []


def test_driver_tokens_may_span_lines() -> None:
    status, out, _, _ = _run("Vbat\n  3.3\n\n.\n")
    assert status == 0
    assert out == "Vbat 3.3 .\n2b 01 34 cd\n"


def test_driver_later_value_overwrites_earlier() -> None:
    _, out, _, _ = _run("Boot 1 Boot 2 .")
    assert out == "Boot 2 .\n2b 04 02\n"


def test_driver_boot_narrowing() -> None:
    _, out, _, _ = _run("Boot 263 . Boot -1 .")
    assert out == "Boot 7 .\n2b 04 07\nBoot 255 .\n2b 04 ff\n"


def test_driver_output_is_deterministic() -> None:
    text = "Vbat 3.71 Vbus 4.98 Boot 12 CompostTemp 61.3 .\nCompostTemp -4 .\n"
    first = _run(text)
    second = _run(text)
    assert first[:3] == second[:3]


def test_driver_banner() -> None:
    _, out, _, _ = _run("Boot 7 .", banner=True)
    assert out.splitlines() == [BANNER, "Boot 7 .", "2b 04 07"]


def test_driver_jsonl_events(tmp_path: Path) -> None:
    logger = JsonlLogger(tmp_path, "drv", "0x2b", clock=FakeClock(start_ms=42))
    status, _, _, _ = _run("Nope Vbat 3.3 Boot 7 .", logger=logger)
    logger.close()
    assert status == 0

    lines = (tmp_path / "drv_vectors.jsonl").read_text(encoding="utf-8").splitlines()
    events = [json.loads(line) for line in lines]
    assert [event["event"] for event in events] == ["unknown_key", "record_emitted", "run_end"]
    for event in events:
        assert event["ts_ms"] == 42
        assert event["run_id"] == "drv"
        assert event["format_id"] == "0x2b"
    assert events[0]["key"] == "Nope"
    emitted = events[1]
    assert emitted["flags"] == 0x05
    assert emitted["payload_hex"] == "2b0534cd07"
    assert emitted["payload_bytes"] == 5
    assert emitted["fields"]["Boot"] == 7
    assert emitted["fields"]["Vbat"] == pytest.approx(3.3)
    assert events[2]["status"] == 0
    assert events[2]["records"] == 1


def test_driver_jsonl_parse_error_event(tmp_path: Path) -> None:
    logger = JsonlLogger(tmp_path, "bad", "0x2b", clock=FakeClock())
    status, _, _, _ = _run("CompostTemp hot", logger=logger)
    logger.close()
    assert status == 1
    events = [
        json.loads(line)
        for line in (tmp_path / "bad_vectors.jsonl").read_text(encoding="utf-8").splitlines()
    ]
    assert [event["event"] for event in events] == ["parse_error", "run_end"]
    assert events[0]["token"] == "hot"
    assert events[1]["status"] == 1


def test_format_measurement_float_rendering() -> None:
    record = Measurements(vbat=0.1, vbus=1e-7, compost_temp=CompostTemp(t=123456789.0))
    assert format_measurement(record) == "Vbat 0.1 Vbus 1e-07 CompostTemp 1.23457e+08 ."
    assert format_measurement(Measurements()) == "."


def test_token_parsers_return_explicit_results() -> None:
    assert parse_float("2.5") == Parsed(2.5)
    assert parse_float("x") == ParseFailure("x")
    assert parse_uint8("300") == Parsed(44)
    assert parse_uint8("0x10") == ParseFailure("0x10")


def test_token_reader_end_of_stream() -> None:
    reader = TokenReader(io.StringIO("a  b\n\nc"))
    assert [reader.next_token() for _ in range(5)] == ["a", "b", "c", "", ""]


@pytest.mark.parametrize("token", ["1_0", "nan", "NaN", "inf", "-infinity", "0x10", "3.3v", "."])
def test_driver_rejects_non_decimal_float_literals(token: str) -> None:
    status, out, err, _ = _run(f"Vbat {token} .\n")
    assert status == 1
    assert out == ""
    assert err == f"parse error: {token}\n"


@pytest.mark.parametrize("token", ["1_0", "+", "7e0", " "])
def test_boot_rejects_non_decimal_integer_literals(token: str) -> None:
    assert parse_uint8(token) == ParseFailure(token)


@pytest.mark.parametrize(
    "token,value",
    [("3", 3.0), ("-2.5", -2.5), ("+.5", 0.5), ("5.", 5.0), ("1e-3", 0.001), ("2E+2", 200.0)],
)
def test_parse_float_accepts_decimal_literals(token: str, value: float) -> None:
    assert parse_float(token) == Parsed(value)


def test_parse_uint8_accepts_signed_decimal() -> None:
    assert parse_uint8("+7") == Parsed(7)
    assert parse_uint8("-1") == Parsed(255)
