from __future__ import annotations

import struct


class MessageBuffer:
    """Append-only byte builder whose reserved slots can be patched later."""

    def __init__(self) -> None:
        self._data = bytearray()

    def __len__(self) -> int:
        return len(self._data)

    def clear(self) -> None:
        self._data.clear()

    def push(self, value: int) -> None:
        self._data.append(int(value) & 0xFF)

    def push_be16(self, value: int) -> None:
        self._data.extend(struct.pack(">H", int(value) & 0xFFFF))

    def reserve(self) -> int:
        index = len(self._data)
        self._data.append(0)
        return index

    def patch(self, index: int, value: int) -> None:
        if not (0 <= index < len(self._data)):
            raise IndexError(f"patch index {index} outside buffer of {len(self._data)} bytes")
        self._data[index] = int(value) & 0xFF

    def to_bytes(self) -> bytes:
        return bytes(self._data)
