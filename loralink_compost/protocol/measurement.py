from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

FieldKind = Literal["volts", "count", "temp"]


@dataclass(frozen=True)
class CompostTemp:
    t: float


@dataclass(frozen=True)
class MeasurementField:
    key: str
    attr: str
    kind: FieldKind


# Order is the flag bit order of the uplink formats.
FIELDS = (
    MeasurementField(key="Vbat", attr="vbat", kind="volts"),
    MeasurementField(key="Vbus", attr="vbus", kind="volts"),
    MeasurementField(key="Boot", attr="boot", kind="count"),
    MeasurementField(key="CompostTemp", attr="compost_temp", kind="temp"),
)

FIELDS_BY_KEY = {field.key: field for field in FIELDS}


@dataclass
class Measurements:
    """
    One telemetry sample. A field left as None is not valid and is neither
    encoded nor logged.
    """

    vbat: float | None = None
    vbus: float | None = None
    boot: int | None = None
    compost_temp: CompostTemp | None = None

    def get(self, field: MeasurementField) -> float | int | None:
        value = getattr(self, field.attr)
        if isinstance(value, CompostTemp):
            return value.t
        return value

    def set(self, field: MeasurementField, value: float | int) -> None:
        if field.kind == "count":
            setattr(self, field.attr, int(value) & 0xFF)
        elif field.kind == "temp":
            setattr(self, field.attr, CompostTemp(t=float(value)))
        else:
            setattr(self, field.attr, float(value))

    def valid_fields(self) -> list[MeasurementField]:
        return [field for field in FIELDS if self.get(field) is not None]

    def any_valid(self) -> bool:
        return bool(self.valid_fields())

    def clear(self) -> None:
        for field in FIELDS:
            setattr(self, field.attr, None)
