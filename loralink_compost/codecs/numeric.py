"""
Fixed-width numeric encodings shared by the Catena uplink formats.

All arithmetic is done in binary32 so the results match the device firmware,
which quantizes C `float` values. Every encoder is total: out-of-range input
saturates and NaN encodes to 0.
"""

from __future__ import annotations

import math

import numpy as np

VOLTS_SCALE = 4096.0
TEMP_SCALE = 256.0

_HALF = np.float32(0.5)


def _f32(value: float) -> np.float32:
    with np.errstate(over="ignore", invalid="ignore"):
        return np.float32(value)


def _scaled(value: float, scale: float) -> np.float32:
    with np.errstate(over="ignore", invalid="ignore"):
        return _f32(value) * np.float32(scale)


def f2uflt16(f: float) -> int:
    """
    Encode a value in [0, 1) as an unsigned compact float:
      bits 15..12: biased exponent
      bits 11..0: fraction

    Negative input encodes to 0, input >= 1.0 to 0xFFFF.
    """
    value = _f32(f)
    if np.isnan(value) or value < 0.0:
        return 0
    if value >= 1.0:
        return 0xFFFF

    mantissa, exponent = np.frexp(value)
    # useful exponent range is [0..-15]
    exponent = int(exponent) + 15
    if exponent < 0:
        exponent = 0

    fraction = int(float(np.ldexp(mantissa, 12)) + 0.5)
    if fraction >= (1 << 12):
        fraction = 1 << 11
        exponent += 1

    if exponent > 15:
        return 0xFFFF
    return (exponent << 12) | fraction


def f2sflt16(f: float) -> int:
    """
    Encode a value in (-1, 1) as a signed compact float:
      bit 15: sign
      bits 14..11: biased exponent
      bits 10..0: fraction

    Sign/magnitude, not two's complement. Input <= -1.0 encodes to 0xFFFF,
    input >= 1.0 to 0x7FFF.
    """
    value = _f32(f)
    if np.isnan(value):
        return 0
    if value <= -1.0:
        return 0xFFFF
    if value >= 1.0:
        return 0x7FFF

    mantissa, exponent = np.frexp(value)
    sign = 0
    if mantissa < 0:
        sign = 0x8000
        mantissa = -mantissa

    exponent = int(exponent) + 15
    if exponent < 0:
        exponent = 0

    fraction = int(float(np.ldexp(mantissa, 11)) + 0.5)
    if fraction >= (1 << 11):
        fraction = 1 << 10
        exponent += 1

    if exponent > 15:
        return 0x7FFF | sign
    return sign | (exponent << 11) | fraction


def encode16s(v: float) -> int:
    """Round to nearest and saturate into a signed 16-bit two's-complement pattern."""
    value = _f32(v)
    if np.isnan(value):
        return 0
    nv = np.floor(value + _HALF)
    if nv > 32767.0:
        return 0x7FFF
    if nv < -32768.0:
        return 0x8000
    return int(nv) & 0xFFFF


def encode16u(v: float) -> int:
    value = _f32(v)
    if np.isnan(value):
        return 0
    nv = np.floor(value + _HALF)
    if nv > 65535.0:
        return 0xFFFF
    if nv < 0.0:
        return 0
    return int(nv)


def encode_volts(v: float) -> int:
    return encode16s(_scaled(v, VOLTS_SCALE))


def encode_temp(t: float) -> int:
    return encode16s(_scaled(t, TEMP_SCALE))


def uflt16_to_float(raw: int) -> float:
    raw &= 0xFFFF
    exponent = raw >> 12
    fraction = (raw & 0x0FFF) / 4096.0
    return math.ldexp(fraction, exponent - 15)


def sflt16_to_float(raw: int) -> float:
    raw &= 0xFFFF
    sign = -1.0 if raw & 0x8000 else 1.0
    exponent = (raw >> 11) & 0x0F
    fraction = (raw & 0x07FF) / 2048.0
    return sign * math.ldexp(fraction, exponent - 15)


def decode16s(raw: int) -> int:
    raw &= 0xFFFF
    if raw & 0x8000:
        return raw - 0x10000
    return raw


def decode16u(raw: int) -> int:
    return raw & 0xFFFF


def decode_volts(raw: int) -> float:
    return decode16s(raw) / VOLTS_SCALE


def decode_temp(raw: int) -> float:
    return decode16s(raw) / TEMP_SCALE


def as_float32(value: float) -> float:
    return float(_f32(value))
