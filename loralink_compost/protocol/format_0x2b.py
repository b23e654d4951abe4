from __future__ import annotations

import struct

from loralink_compost.codecs.base import CodecError
from loralink_compost.codecs.numeric import (
    decode_temp,
    decode_volts,
    encode_temp,
    encode_volts,
)
from loralink_compost.protocol.buffer import MessageBuffer
from loralink_compost.protocol.measurement import FIELDS, MeasurementField, Measurements

FORMAT_TAG = 0x2B
RESERVED_FLAGS = 0xF0

_WIDTHS = {"volts": 2, "count": 1, "temp": 2}


def field_width(field: MeasurementField) -> int:
    return _WIDTHS[field.kind]


def _push_field(buf: MessageBuffer, field: MeasurementField, value: float | int) -> None:
    if field.kind == "volts":
        buf.push_be16(encode_volts(value))
    elif field.kind == "temp":
        buf.push_be16(encode_temp(value))
    else:
        buf.push(int(value) & 0xFF)


def encode_measurement(measurements: Measurements, buf: MessageBuffer | None = None) -> bytes:
    if buf is None:
        buf = MessageBuffer()
    buf.clear()
    buf.push(FORMAT_TAG)
    flags_index = buf.reserve()

    flags = 0
    for bit, field in enumerate(FIELDS):
        value = measurements.get(field)
        if value is None:
            continue
        flags |= 1 << bit
        _push_field(buf, field, value)

    buf.patch(flags_index, flags)
    return buf.to_bytes()


def decode_measurement(payload: bytes) -> Measurements:
    if len(payload) < 2:
        raise CodecError("format 0x2b payload must be at least 2 bytes")
    if payload[0] != FORMAT_TAG:
        raise CodecError(f"unexpected format tag 0x{payload[0]:02x}")
    flags = payload[1]
    if flags & RESERVED_FLAGS:
        raise CodecError(f"reserved flag bits set: 0x{flags:02x}")

    measurements = Measurements()
    offset = 2
    for bit, field in enumerate(FIELDS):
        if not flags & (1 << bit):
            continue
        width = field_width(field)
        if offset + width > len(payload):
            raise CodecError(f"payload truncated in {field.key}")
        if field.kind == "count":
            measurements.set(field, payload[offset])
        else:
            (raw,) = struct.unpack_from(">H", payload, offset)
            if field.kind == "volts":
                measurements.set(field, decode_volts(raw))
            else:
                measurements.set(field, decode_temp(raw))
        offset += width

    if offset != len(payload):
        raise CodecError(
            f"payload length {len(payload)} does not match flags 0x{flags:02x} ({offset} bytes)"
        )
    return measurements


class Format0x2bCodec:
    """
    Port 1 uplink, format 0x2b:
      byte 0: 0x2b
      byte 1: flags (bit0 Vbat, bit1 Vbus, bit2 Boot, bit3 CompostTemp)
      then each present field in bit order:
        Vbat, Vbus: int16 big-endian, volts * 4096
        Boot: uint8
        CompostTemp: int16 big-endian, degrees C * 256
    """

    format_id = "0x2b"
    format_version = "1"
    tag = FORMAT_TAG

    def encode(self, measurements: Measurements) -> bytes:
        return encode_measurement(measurements)

    def decode(self, payload: bytes) -> Measurements:
        return decode_measurement(payload)

    def payload_schema(self) -> str:
        return (
            "catena_0x2b_v1:"
            "port=1:"
            "flags=u8:"
            "Vbat=i16be@4096:"
            "Vbus=i16be@4096:"
            "Boot=u8:"
            "CompostTemp=i16be@256"
        )
