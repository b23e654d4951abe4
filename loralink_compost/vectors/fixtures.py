from __future__ import annotations

import math
from dataclasses import dataclass

from loralink_compost.codecs.base import CodecError
from loralink_compost.codecs.numeric import decode16s, encode_temp, encode_volts
from loralink_compost.protocol.base import IMessageFormat
from loralink_compost.protocol.measurement import (
    FIELDS_BY_KEY,
    MeasurementField,
    Measurements,
)
from loralink_compost.vectors.driver import BANNER
from loralink_compost.vectors.render import END_OF_RECORD, format_hex
from loralink_compost.vectors.tokens import ParseFailure, parse_value

_ENCODERS = {"volts": encode_volts, "temp": encode_temp}


class FixtureError(ValueError):
    pass


@dataclass(frozen=True)
class FixturePair:
    record_line_no: int
    record_line: str
    hex_line_no: int
    hex_line: str


@dataclass(frozen=True)
class FixtureMismatch:
    line_no: int
    reason: str
    expected: str
    actual: str


def read_fixture_pairs(text: str) -> list[FixturePair]:
    """Split a driver transcript into (log line, hex line) pairs."""
    pairs: list[FixturePair] = []
    pending: tuple[int, str] | None = None
    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line == BANNER:
            continue
        if pending is None:
            if not line.endswith(END_OF_RECORD):
                raise FixtureError(f"line {line_no}: record line must end with '.'")
            pending = (line_no, line)
            continue
        pairs.append(
            FixturePair(
                record_line_no=pending[0],
                record_line=pending[1],
                hex_line_no=line_no,
                hex_line=line,
            )
        )
        pending = None
    if pending is not None:
        raise FixtureError(f"line {pending[0]}: record line has no hex line")
    return pairs


def parse_record_line(line: str, line_no: int = 0) -> Measurements:
    tokens = line.split()
    if not tokens or tokens[-1] != END_OF_RECORD:
        raise FixtureError(f"line {line_no}: record line must end with '.'")
    body = tokens[:-1]
    if len(body) % 2 != 0:
        raise FixtureError(f"line {line_no}: unpaired key/value tokens")

    record = Measurements()
    for key, token in zip(body[0::2], body[1::2]):
        field = FIELDS_BY_KEY.get(key)
        if field is None:
            raise FixtureError(f"line {line_no}: unknown key: {key}")
        result = parse_value(field, token)
        if isinstance(result, ParseFailure):
            raise FixtureError(f"line {line_no}: parse error: {result.token}")
        record.set(field, result.value)
    return record


def _parse_hex_line(pair: FixturePair) -> bytes:
    try:
        return bytes.fromhex(pair.hex_line)
    except ValueError as exc:
        raise FixtureError(f"line {pair.hex_line_no}: invalid hex line") from exc


def _print_window(value: float) -> tuple[float, float]:
    # values that print the same with six significant digits
    if value == 0.0 or not math.isfinite(value):
        return value, value
    half_step = 0.5 * 10.0 ** (math.floor(math.log10(abs(value))) - 5)
    return value - half_step, value + half_step


def _field_matches(field: MeasurementField, logged: float | int, decoded: float | int) -> bool:
    if field.kind == "count":
        return int(logged) == int(decoded)
    encode = _ENCODERS[field.kind]
    low, high = _print_window(float(logged))
    return decode16s(encode(low)) <= decode16s(encode(decoded)) <= decode16s(encode(high))


def check_fixtures(text: str, message_format: IMessageFormat) -> list[FixtureMismatch]:
    """
    Verify a driver transcript. A payload is accepted when some value that
    prints as the logged text encodes to it, so the six-digit rounding of the
    log line is not reported as a mismatch.
    """
    mismatches: list[FixtureMismatch] = []
    for pair in read_fixture_pairs(text):
        record = parse_record_line(pair.record_line, pair.record_line_no)
        expected = _parse_hex_line(pair)

        try:
            decoded = message_format.decode(expected)
        except CodecError as exc:
            mismatches.append(
                FixtureMismatch(
                    line_no=pair.hex_line_no,
                    reason=f"payload does not decode: {exc}",
                    expected=pair.record_line,
                    actual="",
                )
            )
            continue

        expected_keys = " ".join(field.key for field in record.valid_fields())
        decoded_keys = " ".join(field.key for field in decoded.valid_fields())
        if expected_keys != decoded_keys:
            mismatches.append(
                FixtureMismatch(
                    line_no=pair.hex_line_no,
                    reason="decoded field set mismatch",
                    expected=expected_keys,
                    actual=decoded_keys,
                )
            )
            continue

        if not all(
            _field_matches(field, record.get(field), decoded.get(field))
            for field in record.valid_fields()
        ):
            mismatches.append(
                FixtureMismatch(
                    line_no=pair.hex_line_no,
                    reason="payload mismatch",
                    expected=format_hex(expected),
                    actual=format_hex(message_format.encode(record)),
                )
            )
    return mismatches
