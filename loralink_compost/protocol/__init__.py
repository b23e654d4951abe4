from loralink_compost.protocol.base import IMessageFormat
from loralink_compost.protocol.buffer import MessageBuffer
from loralink_compost.protocol.factory import create_format
from loralink_compost.protocol.format_0x2b import (
    FORMAT_TAG,
    Format0x2bCodec,
    decode_measurement,
    encode_measurement,
)
from loralink_compost.protocol.measurement import (
    FIELDS,
    FIELDS_BY_KEY,
    CompostTemp,
    MeasurementField,
    Measurements,
)

__all__ = [
    "IMessageFormat",
    "MessageBuffer",
    "create_format",
    "FORMAT_TAG",
    "Format0x2bCodec",
    "encode_measurement",
    "decode_measurement",
    "FIELDS",
    "FIELDS_BY_KEY",
    "CompostTemp",
    "MeasurementField",
    "Measurements",
]
