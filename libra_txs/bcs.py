# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Binary Canonical Serialization (BCS), the encoding the chain uses for transactions, their
arguments and their signing messages. See https://github.com/diem/bcs for the format.
"""

from __future__ import annotations

import io
import typing
from typing import Any, Callable, List

from .errors import TxsError

MAX_U8 = 2**8 - 1
MAX_U16 = 2**16 - 1
MAX_U32 = 2**32 - 1
MAX_U64 = 2**64 - 1
MAX_U128 = 2**128 - 1
MAX_U256 = 2**256 - 1

# Sequence lengths are bounded by the format, not by Python.
MAX_SEQUENCE_LENGTH = MAX_U32


class BcsError(TxsError):
    """A value could not be encoded, or the input ended early or was malformed"""


class Deserializer:
    _input: io.BytesIO
    _length: int

    def __init__(self, data: bytes):
        self._length = len(data)
        self._input = io.BytesIO(data)

    def remaining(self) -> int:
        return self._length - self._input.tell()

    def bool(self) -> bool:
        value = self._read_int(1)
        if value not in (0, 1):
            raise BcsError(f"Unexpected boolean value: {value}")
        return value == 1

    def to_bytes(self) -> bytes:
        return self._read(self.uleb128())

    def fixed_bytes(self, length: int) -> bytes:
        return self._read(length)

    def sequence(self, value_decoder: Callable[[Deserializer], Any]) -> List[Any]:
        return [value_decoder(self) for _ in range(self.uleb128())]

    def str(self) -> str:
        try:
            return self.to_bytes().decode()
        except UnicodeDecodeError as error:
            raise BcsError(f"Invalid utf-8 string: {error}") from error

    def struct(self, struct: Any) -> Any:
        return struct.deserialize(self)

    def u8(self) -> int:
        return self._read_int(1)

    def u16(self) -> int:
        return self._read_int(2)

    def u32(self) -> int:
        return self._read_int(4)

    def u64(self) -> int:
        return self._read_int(8)

    def u128(self) -> int:
        return self._read_int(16)

    def u256(self) -> int:
        return self._read_int(32)

    def uleb128(self) -> int:
        value = 0
        shift = 0
        while True:
            byte = self._read_int(1)
            value |= (byte & 0x7F) << shift
            if byte & 0x80 == 0:
                break
            shift += 7
            if shift > 28:
                raise BcsError("uleb128 value does not fit in a u32")

        if value > MAX_SEQUENCE_LENGTH:
            raise BcsError(f"Unexpectedly large uleb128 value {value}")
        return value

    def _read(self, length: int) -> bytes:
        value = self._input.read(length)
        if len(value) < length:
            raise BcsError(
                f"Unexpected end of input. Requested: {length}, found: {len(value)}"
            )
        return value

    def _read_int(self, length: int) -> int:
        return int.from_bytes(self._read(length), byteorder="little", signed=False)


class Serializer:
    _output: io.BytesIO

    def __init__(self):
        self._output = io.BytesIO()

    def output(self) -> bytes:
        return self._output.getvalue()

    def bool(self, value: bool):
        self._write_int(int(value), 1, 1)

    def to_bytes(self, value: bytes):
        self.uleb128(len(value))
        self._output.write(value)

    def fixed_bytes(self, value: bytes):
        self._output.write(value)

    def sequence(
        self,
        values: typing.Sequence[Any],
        value_encoder: Callable[[Serializer, Any], None],
    ):
        self.uleb128(len(values))
        for value in values:
            value_encoder(self, value)

    def str(self, value: str):
        self.to_bytes(value.encode())

    def struct(self, value: Any):
        value.serialize(self)

    def u8(self, value: int):
        self._write_int(value, 1, MAX_U8)

    def u16(self, value: int):
        self._write_int(value, 2, MAX_U16)

    def u32(self, value: int):
        self._write_int(value, 4, MAX_U32)

    def u64(self, value: int):
        self._write_int(value, 8, MAX_U64)

    def u128(self, value: int):
        self._write_int(value, 16, MAX_U128)

    def u256(self, value: int):
        self._write_int(value, 32, MAX_U256)

    def uleb128(self, value: int):
        if value < 0 or value > MAX_SEQUENCE_LENGTH:
            raise BcsError(f"Cannot encode {value} into uleb128")

        while value >= 0x80:
            # Low 7 bits with the continuation bit set.
            self._output.write(bytes([(value & 0x7F) | 0x80]))
            value >>= 7
        self._output.write(bytes([value]))

    def _write_int(self, value: int, length: int, maximum: int):
        if value < 0 or value > maximum:
            raise BcsError(f"Cannot encode {value} into {length * 8} bits")
        self._output.write(value.to_bytes(length, "little", signed=False))


def encoder(value: Any, encoder: Callable[[Serializer, Any], None]) -> bytes:
    ser = Serializer()
    encoder(ser, value)
    return ser.output()
