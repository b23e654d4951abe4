from __future__ import annotations

from typing import Protocol

from loralink_compost.protocol.measurement import Measurements


class IMessageFormat(Protocol):
    format_id: str
    format_version: str
    tag: int

    def encode(self, measurements: Measurements) -> bytes:
        ...

    def decode(self, payload: bytes) -> Measurements:
        ...

    def payload_schema(self) -> str:
        ...
