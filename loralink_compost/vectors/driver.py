from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Dict, TextIO

from loralink_compost.protocol.base import IMessageFormat
from loralink_compost.protocol.measurement import FIELDS_BY_KEY, Measurements
from loralink_compost.runtime.logging import JsonlLogger
from loralink_compost.vectors.render import (
    END_OF_RECORD,
    format_hex,
    format_measurement,
)
from loralink_compost.vectors.tokens import ParseFailure, TokenReader, parse_value

BANNER = "Input one or more lines of name/value tuples, ended by '.'"


class DriverState(enum.Enum):
    ACCUMULATING = "accumulating"
    EMIT = "emit"
    FINALIZE = "finalize"


@dataclass(frozen=True)
class EmittedVector:
    measurements: Measurements
    payload: bytes


class VectorDriver:
    """
    Reads `Key value` tokens, one record per `.`, and writes for each record
    its cut/pastable log line followed by the hex of the encoded payload.

    Unknown keys are reported on `err` and skipped. A value that does not
    parse stops the run with status 1 and nothing further is emitted; otherwise
    a pending record at end of input is emitted and the status is 0.
    """

    def __init__(
        self,
        message_format: IMessageFormat,
        out: TextIO,
        err: TextIO,
        logger: JsonlLogger | None = None,
        banner: bool = False,
    ) -> None:
        self._format = message_format
        self._out = out
        self._err = err
        self._logger = logger
        self._banner = banner
        self.vectors: list[EmittedVector] = []

    def run(self, stream: TextIO) -> int:
        if self._banner:
            self._out.write(BANNER + "\n")

        reader = TokenReader(stream)
        record = Measurements()
        failure: ParseFailure | None = None
        state = DriverState.ACCUMULATING
        while state is not DriverState.FINALIZE:
            if state is DriverState.EMIT:
                self._emit(record)
                record = Measurements()
                state = DriverState.ACCUMULATING
                continue
            state, failure = self._accumulate(reader, record)
        return self._finalize(record, failure)

    def _accumulate(
        self, reader: TokenReader, record: Measurements
    ) -> tuple[DriverState, ParseFailure | None]:
        key = reader.next_token()
        if not key:
            return DriverState.FINALIZE, None
        if key == END_OF_RECORD:
            return DriverState.EMIT, None

        field = FIELDS_BY_KEY.get(key)
        if field is None:
            self._err.write(f"unknown key: {key}\n")
            self._log("unknown_key", {"key": key})
            return DriverState.ACCUMULATING, None

        token = reader.next_token()
        if not token:
            # a read cut short by end of input leaves the field valid and zeroed
            record.set(field, 0)
            return DriverState.FINALIZE, None
        result = parse_value(field, token)
        if isinstance(result, ParseFailure):
            return DriverState.FINALIZE, result
        record.set(field, result.value)
        return DriverState.ACCUMULATING, None

    def _finalize(self, record: Measurements, failure: ParseFailure | None) -> int:
        if failure is not None:
            self._err.write(f"parse error: {failure.token}\n")
            self._log("parse_error", {"token": failure.token})
            status = 1
        else:
            if record.any_valid():
                self._emit(record)
            status = 0
        self._log("run_end", {"status": status, "records": len(self.vectors)})
        return status

    def _emit(self, record: Measurements) -> None:
        payload = self._format.encode(record)
        self._out.write(format_measurement(record) + "\n")
        self._out.write(format_hex(payload) + "\n")
        self.vectors.append(EmittedVector(measurements=record, payload=payload))
        self._log(
            "record_emitted",
            {
                "flags": payload[1] if len(payload) > 1 else 0,
                "payload_bytes": len(payload),
                "payload_hex": payload.hex(),
                "fields": {field.key: record.get(field) for field in record.valid_fields()},
            },
        )

    def _log(self, event: str, fields: Dict[str, Any]) -> None:
        if self._logger is not None:
            self._logger.log_event(event, fields)
