from __future__ import annotations

from loralink_compost.codecs.numeric import as_float32
from loralink_compost.protocol.measurement import MeasurementField, Measurements

END_OF_RECORD = "."


def format_value(field: MeasurementField, value: float | int) -> str:
    if field.kind == "count":
        return str(int(value))
    # device floats print with six significant digits
    return f"{as_float32(value):.6g}"


def format_measurement(measurements: Measurements) -> str:
    parts = [
        f"{field.key} {format_value(field, measurements.get(field))}"
        for field in measurements.valid_fields()
    ]
    parts.append(END_OF_RECORD)
    return " ".join(parts)


def format_hex(payload: bytes) -> str:
    return " ".join(f"{byte:02x}" for byte in payload)
