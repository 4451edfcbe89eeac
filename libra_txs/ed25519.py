# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import hashlib
import hmac
import re
from typing import Tuple, Union, cast

from mnemonic import Mnemonic
from nacl.exceptions import BadSignatureError
from nacl.signing import SigningKey, VerifyKey

from . import asymmetric_crypto
from .bcs import Deserializer, Serializer
from .errors import InvalidKeyEncoding, InvalidMnemonic, InvalidPath

DEFAULT_DERIVATION_PATH = "m/44'/637'/0'/0'/0'"

# SLIP-0010 only defines hardened derivation for ed25519.
HARDENED_OFFSET = 0x80000000
ED25519_SEED = b"ed25519 seed"
DERIVATION_PATH_REGEX = re.compile(r"^m/44'/637'/[0-9]+'/[0-9]+'/[0-9]+'$")


def _decode_hex(value: str, what: str) -> bytes:
    if value[0:2] == "0x":
        value = value[2:]
    try:
        return bytes.fromhex(value)
    except ValueError as error:
        raise InvalidKeyEncoding(f"Unable to decode the {what}: {error}") from error


class PrivateKey:
    LENGTH: int = 32

    key: SigningKey

    def __init__(self, key: SigningKey):
        self.key = key

    def __eq__(self, other: object):
        if not isinstance(other, PrivateKey):
            return NotImplemented
        return self.key == other.key

    def __str__(self):
        return self.hex()

    @staticmethod
    def from_bytes(value: bytes) -> PrivateKey:
        if len(value) != PrivateKey.LENGTH:
            raise InvalidKeyEncoding(
                f"Expected a {PrivateKey.LENGTH} byte private key, got {len(value)} bytes"
            )
        return PrivateKey(SigningKey(bytes(value)))

    @staticmethod
    def from_str(value: str) -> PrivateKey:
        return PrivateKey.from_bytes(_decode_hex(value.strip(), "private key"))

    @staticmethod
    def random() -> PrivateKey:
        return PrivateKey(SigningKey.generate())

    @staticmethod
    def from_derive_path(path: str, phrase: str) -> PrivateKey:
        """
        Derive a key from a BIP-39 mnemonic following SLIP-0010, e.g., path m/44'/637'/0'/0'/0'.
        Every segment is hardened as ed25519 has no public derivation.
        """
        if not DERIVATION_PATH_REGEX.match(path):
            raise InvalidPath(f"Invalid derivation path: {path}")

        words = " ".join(word.lower() for word in phrase.split())
        if not Mnemonic("english").check(words):
            raise InvalidMnemonic("Mnemonic phrase failed BIP-39 validation")
        seed = Mnemonic.to_seed(words)

        key, chain_code = _hmac_sha512(ED25519_SEED, seed)
        for segment in path.split("/")[1:]:
            index = int(segment.rstrip("'"))
            if index >= HARDENED_OFFSET:
                raise InvalidPath(f"Path segment out of range: {segment}")
            data = b"\x00" + key + (index + HARDENED_OFFSET).to_bytes(4, "big")
            key, chain_code = _hmac_sha512(chain_code, data)
        return PrivateKey.from_bytes(key)

    def hex(self) -> str:
        return f"0x{self.key.encode().hex()}"

    def to_bytes(self) -> bytes:
        return self.key.encode()

    def public_key(self) -> PublicKey:
        return PublicKey(self.key.verify_key)

    def sign(self, data: bytes) -> Signature:
        return Signature(self.key.sign(data).signature)

    @staticmethod
    def deserialize(deserializer: Deserializer) -> PrivateKey:
        return PrivateKey.from_bytes(deserializer.to_bytes())

    def serialize(self, serializer: Serializer):
        serializer.to_bytes(self.key.encode())


class PublicKey(asymmetric_crypto.PublicKey):
    LENGTH: int = 32

    key: VerifyKey

    def __init__(self, key: VerifyKey):
        self.key = key

    def __eq__(self, other: object):
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.key == other.key

    def __str__(self) -> str:
        return self.key.encode().hex()

    @staticmethod
    def from_str(value: str) -> PublicKey:
        key = _decode_hex(value.strip(), "public key")
        if len(key) != PublicKey.LENGTH:
            raise InvalidKeyEncoding(
                f"Expected a {PublicKey.LENGTH} byte public key, got {len(key)} bytes"
            )
        return PublicKey(VerifyKey(key))

    def verify(self, data: bytes, signature: asymmetric_crypto.Signature) -> bool:
        try:
            self.key.verify(data, cast(Signature, signature).data())
        except BadSignatureError:
            return False
        return True

    def to_crypto_bytes(self) -> bytes:
        return self.key.encode()

    @staticmethod
    def deserialize(deserializer: Deserializer) -> PublicKey:
        key = deserializer.to_bytes()
        if len(key) != PublicKey.LENGTH:
            raise InvalidKeyEncoding("Public key length mismatch")
        return PublicKey(VerifyKey(key))

    def serialize(self, serializer: Serializer):
        serializer.to_bytes(self.key.encode())


class Signature(asymmetric_crypto.Signature):
    LENGTH: int = 64

    signature: bytes

    def __init__(self, signature: bytes):
        self.signature = signature

    def __eq__(self, other: object):
        if not isinstance(other, Signature):
            return NotImplemented
        return self.signature == other.signature

    def __str__(self) -> str:
        return f"0x{self.signature.hex()}"

    def data(self) -> bytes:
        return self.signature

    @staticmethod
    def deserialize(deserializer: Deserializer) -> Signature:
        signature = deserializer.to_bytes()
        if len(signature) != Signature.LENGTH:
            raise InvalidKeyEncoding("Signature length mismatch")
        return Signature(signature)

    def serialize(self, serializer: Serializer):
        serializer.to_bytes(self.signature)


def _hmac_sha512(key: bytes, data: Union[bytes, bytearray]) -> Tuple[bytes, bytes]:
    digest = hmac.new(key, data, hashlib.sha512).digest()
    return digest[:32], digest[32:]
