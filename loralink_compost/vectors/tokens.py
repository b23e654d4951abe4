from __future__ import annotations

import re
from collections import deque
from dataclasses import dataclass
from typing import TextIO, Union

from loralink_compost.protocol.measurement import MeasurementField

# plain decimal literals only: no underscores, nan or inf spellings
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Parsed:
    value: float | int


@dataclass(frozen=True)
class ParseFailure:
    token: str


ParseResult = Union[Parsed, ParseFailure]


class TokenReader:
    """Whitespace-delimited tokens, read from the stream one line at a time."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._pending: deque[str] = deque()

    def next_token(self) -> str:
        # "" means the stream is exhausted
        while not self._pending:
            line = self._stream.readline()
            if not line:
                return ""
            self._pending.extend(line.split())
        return self._pending.popleft()


def parse_float(token: str) -> ParseResult:
    if not _FLOAT_RE.fullmatch(token):
        return ParseFailure(token)
    return Parsed(float(token))


def parse_uint8(token: str) -> ParseResult:
    if not _INT_RE.fullmatch(token):
        return ParseFailure(token)
    return Parsed(int(token, 10) & 0xFF)


def parse_value(field: MeasurementField, token: str) -> ParseResult:
    if field.kind == "count":
        return parse_uint8(token)
    return parse_float(token)
