from __future__ import annotations

import hashlib


class CodecError(ValueError):
    pass


def payload_schema_hash(schema: str) -> str:
    return hashlib.sha256(schema.encode("utf-8")).hexdigest()
