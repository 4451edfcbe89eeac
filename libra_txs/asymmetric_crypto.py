# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing_extensions import Protocol

from .bcs import Serializer


class PublicKey(Protocol):
    def to_crypto_bytes(self) -> bytes:
        """The raw key bytes that feed authentication key derivation."""
        ...

    def verify(self, data: bytes, signature: Signature) -> bool:
        ...

    def serialize(self, serializer: Serializer):
        ...


class Signature(Protocol):
    def data(self) -> bytes:
        ...

    def serialize(self, serializer: Serializer):
        ...


class Signer(Protocol):
    """
    Anything that can sign a transaction: it must expose the public key the chain will verify
    against and produce a signature over arbitrary bytes.
    """

    def public_key(self) -> PublicKey:
        ...

    def sign(self, data: bytes) -> Signature:
        ...
