# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Turns the textual form of an entry function call, as typed on the command line, into an
`EntryFunction` payload. Value arguments follow a small closed literal grammar:

    123          u64 (unsuffixed integers default to u64)
    123u8        u8, and likewise u16, u32, u64, u128 and u256
    true, false  bool
    0x1, @0x1    address
    x"00ff"      vector<u8> from hex
    b"text"      vector<u8> from UTF-8 text

Everything is parsed before any network request is made.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, ClassVar, List, Optional, Tuple, Union

from .account_address import AccountAddress, ParseAddressError
from .bcs import Serializer, encoder
from .errors import InvalidArgumentLiteral, MalformedFunctionId
from .transactions import EntryFunction, ModuleId
from .type_tag import IDENTIFIER_REGEX, TypeTag, parse_type_tags

_INTEGER_REGEX = re.compile(r"^([0-9]+(?:_[0-9]+)*)(u8|u16|u32|u64|u128|u256)?$")
_BYTES_REGEX = re.compile(r'^([xb])"(.*)"$', re.DOTALL)


@dataclass(frozen=True)
class IntegerLiteral:
    BITS: ClassVar[int]

    value: int

    def encode(self, serializer: Serializer):
        getattr(serializer, f"u{self.BITS}")(self.value)

    def to_json(self) -> Any:
        # The REST API takes 64 bit and wider integers as strings.
        if self.BITS > 32:
            return str(self.value)
        return self.value


class U8Literal(IntegerLiteral):
    BITS = 8


class U16Literal(IntegerLiteral):
    BITS = 16


class U32Literal(IntegerLiteral):
    BITS = 32


class U64Literal(IntegerLiteral):
    BITS = 64


class U128Literal(IntegerLiteral):
    BITS = 128


class U256Literal(IntegerLiteral):
    BITS = 256


_INTEGER_LITERALS = {
    f"u{literal.BITS}": literal
    for literal in [
        U8Literal,
        U16Literal,
        U32Literal,
        U64Literal,
        U128Literal,
        U256Literal,
    ]
}


@dataclass(frozen=True)
class BoolLiteral:
    value: bool

    def encode(self, serializer: Serializer):
        serializer.bool(self.value)

    def to_json(self) -> Any:
        return self.value


@dataclass(frozen=True)
class AddressLiteral:
    value: AccountAddress

    def encode(self, serializer: Serializer):
        self.value.serialize(serializer)

    def to_json(self) -> Any:
        return str(self.value)


@dataclass(frozen=True)
class BytesLiteral:
    value: bytes

    def encode(self, serializer: Serializer):
        serializer.to_bytes(self.value)

    def to_json(self) -> Any:
        return f"0x{self.value.hex()}"


ArgumentLiteral = Union[
    U8Literal,
    U16Literal,
    U32Literal,
    U64Literal,
    U128Literal,
    U256Literal,
    BoolLiteral,
    AddressLiteral,
    BytesLiteral,
]


def parse_function_id(function_id: str) -> Tuple[AccountAddress, str, str]:
    """Splits `<address>::<module>::<function>`, e.g., 0x1::coin::transfer."""
    split = function_id.strip().split("::")
    if len(split) != 3:
        raise MalformedFunctionId(
            f"Function id {function_id!r} must be <address>::<module>::<function>"
        )

    address, module, function = split
    try:
        account_address = AccountAddress.from_str(address)
    except ParseAddressError as error:
        raise MalformedFunctionId(
            f"Function id {function_id!r} has an invalid address"
        ) from error

    for identifier in (module, function):
        if not IDENTIFIER_REGEX.match(identifier):
            raise MalformedFunctionId(
                f"Function id {function_id!r} has an invalid identifier {identifier!r}"
            )
    return account_address, module, function


def parse_type_arguments(type_args: Optional[str]) -> List[TypeTag]:
    if type_args is None:
        return []
    return parse_type_tags(type_args)


def parse_argument_literal(token: str) -> ArgumentLiteral:
    literal = token.strip()
    if literal == "":
        raise InvalidArgumentLiteral("Empty argument", token)

    if literal in ("true", "false"):
        return BoolLiteral(literal == "true")

    bytes_match = _BYTES_REGEX.match(literal)
    if bytes_match:
        kind, body = bytes_match.groups()
        if kind == "b":
            return BytesLiteral(body.encode())
        try:
            return BytesLiteral(bytes.fromhex(body))
        except ValueError as error:
            raise InvalidArgumentLiteral(
                f"Invalid hex in byte string {literal}", token
            ) from error

    if literal.startswith("@"):
        literal = literal[1:]
        if not literal.startswith("0x"):
            raise InvalidArgumentLiteral(f"Invalid address {token.strip()}", token)
    if literal.startswith("0x"):
        try:
            return AddressLiteral(AccountAddress.from_str(literal))
        except ParseAddressError as error:
            raise InvalidArgumentLiteral(
                f"Invalid address {literal}: {error}", token
            ) from error

    integer_match = _INTEGER_REGEX.match(literal)
    if integer_match:
        digits, suffix = integer_match.groups()
        literal_type = _INTEGER_LITERALS[suffix or "u64"]
        value = int(digits)
        if value > 2**literal_type.BITS - 1:
            raise InvalidArgumentLiteral(
                f"{digits} does not fit in {suffix or 'u64'}", token
            )
        return literal_type(value)

    raise InvalidArgumentLiteral(f"Unrecognized argument {literal}", token)


def parse_argument_literals(args: Optional[str]) -> List[ArgumentLiteral]:
    """Splits on commas outside of quoted strings and parses each token."""
    if args is None or args.strip() == "":
        return []
    return [parse_argument_literal(token) for token in _split_arguments(args)]


def parse_value_arguments(args: Optional[str]) -> List[bytes]:
    return [
        encoder(literal, lambda ser, value: value.encode(ser))
        for literal in parse_argument_literals(args)
    ]


def encode_entry_function(
    function_id: str,
    type_args: Optional[str] = None,
    args: Optional[str] = None,
) -> EntryFunction:
    address, module, function = parse_function_id(function_id)
    return EntryFunction(
        ModuleId(address, module),
        function,
        parse_type_arguments(type_args),
        parse_value_arguments(args),
    )


def _split_arguments(args: str) -> List[str]:
    tokens = []
    current: List[str] = []
    quoted = False
    for char in args:
        if char == '"':
            quoted = not quoted
        if char == "," and not quoted:
            tokens.append("".join(current))
            current = []
        else:
            current.append(char)

    if quoted:
        raise InvalidArgumentLiteral("Unterminated string in arguments", args)
    tokens.append("".join(current))
    return tokens
