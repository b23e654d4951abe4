from loralink_compost.codecs.base import CodecError, payload_schema_hash
from loralink_compost.codecs.numeric import (
    as_float32,
    decode16s,
    decode16u,
    decode_temp,
    decode_volts,
    encode16s,
    encode16u,
    encode_temp,
    encode_volts,
    f2sflt16,
    f2uflt16,
    sflt16_to_float,
    uflt16_to_float,
)

__all__ = [
    "CodecError",
    "payload_schema_hash",
    "f2uflt16",
    "f2sflt16",
    "encode16s",
    "encode16u",
    "encode_volts",
    "encode_temp",
    "uflt16_to_float",
    "sflt16_to_float",
    "decode16s",
    "decode16u",
    "decode_volts",
    "decode_temp",
    "as_float32",
]
