from __future__ import annotations

from loralink_compost.config.driverspec import FormatSpec
from loralink_compost.protocol.base import IMessageFormat
from loralink_compost.protocol.format_0x2b import Format0x2bCodec


def create_format(spec: FormatSpec) -> IMessageFormat:
    format_id = spec.id.lower()
    if format_id in ("0x2b", "port1_0x2b"):
        if spec.version != Format0x2bCodec.format_version:
            raise ValueError(f"unsupported format 0x2b version: {spec.version}")
        if spec.params:
            joined = ", ".join(sorted(spec.params))
            raise ValueError(f"format 0x2b takes no params: {joined}")
        return Format0x2bCodec()
    raise ValueError(f"unknown message format id: {spec.id}")
