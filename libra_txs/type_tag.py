# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import re
import typing
from typing import List, Optional

from .account_address import AccountAddress, ParseAddressError
from .bcs import Deserializer, Serializer
from .errors import InvalidTypeArgument

IDENTIFIER_REGEX = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TOKEN_REGEX = re.compile(r"::|<|>|,|[A-Za-z0-9_]+")


class TypeTag:
    """TypeTag represents a type in Move."""

    BOOL: int = 0
    U8: int = 1
    U64: int = 2
    U128: int = 3
    ACCOUNT_ADDRESS: int = 4
    SIGNER: int = 5
    VECTOR: int = 6
    STRUCT: int = 7
    U16: int = 8
    U32: int = 9
    U256: int = 10

    value: typing.Any

    def __init__(self, value: typing.Any):
        self.value = value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TypeTag):
            return NotImplemented
        return (
            self.value.variant() == other.value.variant() and self.value == other.value
        )

    def __str__(self):
        return self.value.__str__()

    def __repr__(self):
        return self.__str__()

    @staticmethod
    def from_str(type_tag: str) -> TypeTag:
        parser = _TypeTagParser(type_tag)
        tag = parser.type_tag()
        parser.finish()
        return tag

    @staticmethod
    def deserialize(deserializer: Deserializer) -> TypeTag:
        variant = deserializer.uleb128()
        if variant == TypeTag.VECTOR:
            return TypeTag(VectorTag.deserialize(deserializer))
        elif variant == TypeTag.STRUCT:
            return TypeTag(StructTag.deserialize(deserializer))
        for primitive in _PRIMITIVES.values():
            if primitive.VARIANT == variant:
                return TypeTag(primitive())
        raise InvalidTypeArgument(f"Unknown type tag variant {variant}")

    def serialize(self, serializer: Serializer):
        serializer.uleb128(self.value.variant())
        serializer.struct(self.value)


class PrimitiveTag:
    """A type with no parameters; it serializes as its variant alone."""

    VARIANT: int
    NAME: str

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrimitiveTag):
            return NotImplemented
        return self.VARIANT == other.VARIANT

    def __str__(self):
        return self.NAME

    def variant(self):
        return self.VARIANT

    def serialize(self, serializer: Serializer):
        pass


class BoolTag(PrimitiveTag):
    VARIANT = TypeTag.BOOL
    NAME = "bool"


class U8Tag(PrimitiveTag):
    VARIANT = TypeTag.U8
    NAME = "u8"


class U16Tag(PrimitiveTag):
    VARIANT = TypeTag.U16
    NAME = "u16"


class U32Tag(PrimitiveTag):
    VARIANT = TypeTag.U32
    NAME = "u32"


class U64Tag(PrimitiveTag):
    VARIANT = TypeTag.U64
    NAME = "u64"


class U128Tag(PrimitiveTag):
    VARIANT = TypeTag.U128
    NAME = "u128"


class U256Tag(PrimitiveTag):
    VARIANT = TypeTag.U256
    NAME = "u256"


class AccountAddressTag(PrimitiveTag):
    VARIANT = TypeTag.ACCOUNT_ADDRESS
    NAME = "address"


class SignerTag(PrimitiveTag):
    VARIANT = TypeTag.SIGNER
    NAME = "signer"


_PRIMITIVES = {
    primitive.NAME: primitive
    for primitive in [
        BoolTag,
        U8Tag,
        U16Tag,
        U32Tag,
        U64Tag,
        U128Tag,
        U256Tag,
        AccountAddressTag,
        SignerTag,
    ]
}


class VectorTag:
    element: TypeTag

    def __init__(self, element: TypeTag):
        self.element = element

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VectorTag):
            return NotImplemented
        return self.element == other.element

    def __str__(self):
        return f"vector<{self.element}>"

    def variant(self):
        return TypeTag.VECTOR

    @staticmethod
    def deserialize(deserializer: Deserializer) -> VectorTag:
        return VectorTag(TypeTag.deserialize(deserializer))

    def serialize(self, serializer: Serializer):
        self.element.serialize(serializer)


class StructTag:
    address: AccountAddress
    module: str
    name: str
    type_args: List[TypeTag]

    def __init__(self, address, module, name, type_args):
        self.address = address
        self.module = module
        self.name = name
        self.type_args = type_args

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StructTag):
            return NotImplemented
        return (
            self.address == other.address
            and self.module == other.module
            and self.name == other.name
            and self.type_args == other.type_args
        )

    def __str__(self) -> str:
        value = f"{self.address}::{self.module}::{self.name}"
        if len(self.type_args) > 0:
            value += f"<{self.type_args[0]}"
            for type_arg in self.type_args[1:]:
                value += f", {type_arg}"
            value += ">"
        return value

    @staticmethod
    def from_str(type_tag: str) -> StructTag:
        tag = TypeTag.from_str(type_tag)
        if not isinstance(tag.value, StructTag):
            raise InvalidTypeArgument(f"{type_tag} is not a struct type")
        return tag.value

    def variant(self):
        return TypeTag.STRUCT

    @staticmethod
    def deserialize(deserializer: Deserializer) -> StructTag:
        address = deserializer.struct(AccountAddress)
        module = deserializer.str()
        name = deserializer.str()
        type_args = deserializer.sequence(TypeTag.deserialize)
        return StructTag(address, module, name, type_args)

    def serialize(self, serializer: Serializer):
        self.address.serialize(serializer)
        serializer.str(self.module)
        serializer.str(self.name)
        serializer.sequence(self.type_args, Serializer.struct)


def parse_type_tags(type_tags: str) -> List[TypeTag]:
    """
    Parses a comma separated list of types such as
    `0x1::aptos_coin::AptosCoin, vector<u8>`. Commas inside angle brackets belong to the
    enclosing generic, and blank input is an empty list.
    """
    parser = _TypeTagParser(type_tags)
    if parser.peek() is None:
        return []

    tags = [parser.type_tag()]
    while parser.peek() == ",":
        parser.next()
        tags.append(parser.type_tag())
    parser.finish()
    return tags


class _TypeTagParser:
    """Recursive descent over the tokens `::`, `<`, `>`, `,` and words."""

    text: str
    tokens: List[str]
    index: int

    def __init__(self, text: str):
        self.text = text
        self.tokens = []
        self.index = 0

        position = 0
        while position < len(text):
            if text[position].isspace():
                position += 1
                continue
            match = _TOKEN_REGEX.match(text, position)
            if match is None:
                raise InvalidTypeArgument(
                    f"Unexpected character {text[position]!r} in type {text!r}"
                )
            self.tokens.append(match.group())
            position = match.end()

    def peek(self) -> Optional[str]:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def next(self) -> str:
        token = self.peek()
        if token is None:
            raise InvalidTypeArgument(f"Unexpected end of type {self.text!r}")
        self.index += 1
        return token

    def expect(self, expected: str):
        token = self.next()
        if token != expected:
            raise InvalidTypeArgument(
                f"Expected {expected!r} but found {token!r} in type {self.text!r}"
            )

    def identifier(self) -> str:
        token = self.next()
        if not IDENTIFIER_REGEX.match(token):
            raise InvalidTypeArgument(
                f"Invalid identifier {token!r} in type {self.text!r}"
            )
        return token

    def finish(self):
        token = self.peek()
        if token is not None:
            raise InvalidTypeArgument(
                f"Unexpected trailing {token!r} in type {self.text!r}"
            )

    def type_tag(self) -> TypeTag:
        token = self.next()
        if token in _PRIMITIVES:
            return TypeTag(_PRIMITIVES[token]())

        if token == "vector":
            self.expect("<")
            element = self.type_tag()
            self.expect(">")
            return TypeTag(VectorTag(element))

        if not token.startswith("0x"):
            raise InvalidTypeArgument(f"Unknown type {token!r} in type {self.text!r}")
        try:
            address = AccountAddress.from_str(token)
        except ParseAddressError as error:
            raise InvalidTypeArgument(
                f"Invalid address {token!r} in type {self.text!r}"
            ) from error

        self.expect("::")
        module = self.identifier()
        self.expect("::")
        name = self.identifier()

        type_args: List[TypeTag] = []
        if self.peek() == "<":
            self.next()
            type_args.append(self.type_tag())
            while self.peek() == ",":
                self.next()
                type_args.append(self.type_tag())
            self.expect(">")
        return TypeTag(StructTag(address, module, name, type_args))
