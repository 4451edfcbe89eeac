# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import hashlib

from . import asymmetric_crypto, ed25519
from .bcs import Deserializer, Serializer
from .errors import TxsError


class AuthKeyScheme:
    Ed25519: bytes = b"\x00"


class ParseAddressError(TxsError):
    """
    There was an error parsing an address.
    """


def _auth_key_bytes(key: asymmetric_crypto.PublicKey) -> bytes:
    hasher = hashlib.sha3_256()
    hasher.update(key.to_crypto_bytes())

    if isinstance(key, ed25519.PublicKey):
        hasher.update(AuthKeyScheme.Ed25519)
    else:
        raise TxsError("Unsupported asymmetric_crypto.PublicKey key type.")

    return hasher.digest()


class AccountAddress:
    address: bytes
    LENGTH: int = 32

    def __init__(self, address: bytes):
        self.address = address

        if len(address) != AccountAddress.LENGTH:
            raise ParseAddressError("Expected address of length 32")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AccountAddress):
            return NotImplemented
        return self.address == other.address

    def __hash__(self):
        return hash(self.address)

    def __str__(self):
        """
        Addresses are always written out in LONG form, 0x followed by 64 hex characters,
        including special addresses such as 0x1. The node accepts this form everywhere.
        """
        return self.to_hex_literal()

    def __repr__(self):
        return self.__str__()

    def to_hex_literal(self) -> str:
        return f"0x{self.address.hex()}"

    @staticmethod
    def from_str(address: str) -> AccountAddress:
        """
        Creates an instance of AccountAddress from a hex string.

        Both LONG (64 hex characters) and SHORT (1 to 63 hex characters) forms are accepted,
        with or without a leading 0x. SHORT forms are left-padded with zeroes, so 0x1 is the
        framework address.
        """
        addr = address.strip()

        # Strip 0x prefix if present.
        if addr[0:2] == "0x":
            addr = addr[2:]

        if len(addr) < 1:
            raise ParseAddressError(
                "Hex string is too short, must be 1 to 64 chars long, excluding the "
                "leading 0x."
            )

        if len(addr) > AccountAddress.LENGTH * 2:
            raise ParseAddressError(
                "Hex string is too long, must be 1 to 64 chars long, excluding the "
                "leading 0x."
            )

        if len(addr) < AccountAddress.LENGTH * 2:
            pad = "0" * (AccountAddress.LENGTH * 2 - len(addr))
            addr = pad + addr

        try:
            return AccountAddress(bytes.fromhex(addr))
        except ValueError as error:
            raise ParseAddressError(f"Invalid address {address}: {error}") from error

    @staticmethod
    def from_key(key: asymmetric_crypto.PublicKey) -> AccountAddress:
        return AccountAddress(_auth_key_bytes(key))

    @staticmethod
    def deserialize(deserializer: Deserializer) -> AccountAddress:
        return AccountAddress(deserializer.fixed_bytes(AccountAddress.LENGTH))

    def serialize(self, serializer: Serializer):
        serializer.fixed_bytes(self.address)


class AuthenticationKey:
    """
    The key the chain checks a transaction's public key against. Accounts created from a single
    ed25519 key keep an address equal to their original authentication key.
    """

    key: bytes
    LENGTH: int = 32

    def __init__(self, key: bytes):
        if len(key) != AuthenticationKey.LENGTH:
            raise ParseAddressError("Expected authentication key of length 32")
        self.key = key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AuthenticationKey):
            return NotImplemented
        return self.key == other.key

    def __str__(self):
        return self.key.hex()

    def __repr__(self):
        return self.__str__()

    @staticmethod
    def from_key(key: asymmetric_crypto.PublicKey) -> AuthenticationKey:
        return AuthenticationKey(_auth_key_bytes(key))

    def derived_address(self) -> AccountAddress:
        return AccountAddress(self.key)
