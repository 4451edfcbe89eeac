# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import typing
from typing import Optional, Union

from . import ed25519
from .account_address import AccountAddress, AuthenticationKey
from .errors import InvalidKeyEncoding, InvalidPath

if typing.TYPE_CHECKING:
    from .transaction_builder import TransactionBuilder
    from .transactions import SignedTransaction


class AccountKey:
    """The private, public key-pair of an account along with what derives from it."""

    private_key: ed25519.PrivateKey

    def __init__(self, private_key: ed25519.PrivateKey):
        self.private_key = private_key

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AccountKey):
            return NotImplemented
        return self.private_key == other.private_key

    @staticmethod
    def generate() -> AccountKey:
        return AccountKey(ed25519.PrivateKey.random())

    @staticmethod
    def from_private_key(key: Union[bytes, str]) -> AccountKey:
        if isinstance(key, str):
            return AccountKey(ed25519.PrivateKey.from_str(key))
        return AccountKey(ed25519.PrivateKey.from_bytes(key))

    @staticmethod
    def from_mnemonic(
        phrase: str,
        derivation_path: str = ed25519.DEFAULT_DERIVATION_PATH,
        account_index: Optional[int] = None,
    ) -> AccountKey:
        """
        Derives the key for a BIP-39 phrase. When account_index is set it replaces the account
        segment of the path, e.g., 2 turns m/44'/637'/0'/0'/0' into m/44'/637'/2'/0'/0'.
        """
        if account_index is not None:
            if account_index < 0:
                raise InvalidPath(
                    f"Account index must not be negative: {account_index}"
                )
            segments = derivation_path.split("/")
            if len(segments) != 6:
                raise InvalidPath(f"Invalid derivation path: {derivation_path}")
            segments[3] = f"{account_index}'"
            derivation_path = "/".join(segments)
        return AccountKey(ed25519.PrivateKey.from_derive_path(derivation_path, phrase))

    @staticmethod
    def load(path: str) -> AccountKey:
        with open(path) as file:
            data = json.load(file)
        key = AccountKey(ed25519.PrivateKey.from_str(data["private_key"]))
        if "account_address" in data:
            if AccountAddress.from_str(data["account_address"]) != key.address():
                raise InvalidKeyEncoding(
                    f"Key file {path} does not match its account address"
                )
        return key

    def store(self, path: str):
        data = {
            "account_address": str(self.address()),
            "private_key": str(self.private_key),
        }
        with open(path, "w") as file:
            json.dump(data, file)

    def public_key(self) -> ed25519.PublicKey:
        return self.private_key.public_key()

    def authentication_key(self) -> AuthenticationKey:
        return AuthenticationKey.from_key(self.public_key())

    def address(self) -> AccountAddress:
        """Returns the address associated with the given key"""

        return self.authentication_key().derived_address()

    def sign(self, data: bytes) -> ed25519.Signature:
        return self.private_key.sign(data)


class LocalAccount:
    """
    A key together with the sequence number the next transaction it signs will carry.
    """

    key: AccountKey
    sequence_number: int

    def __init__(self, key: AccountKey, sequence_number: int = 0):
        self.key = key
        self.sequence_number = sequence_number

    def address(self) -> AccountAddress:
        return self.key.address()

    def increment_sequence_number(self) -> int:
        self.sequence_number += 1
        return self.sequence_number

    def sign_with_transaction_builder(
        self, builder: TransactionBuilder
    ) -> SignedTransaction:
        signed_transaction = (
            builder.sender(self.address())
            .sequence_number(self.sequence_number)
            .sign(self.key)
        )
        self.increment_sequence_number()
        return signed_transaction
