# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import unittest

from .account import AccountKey
from .bcs import BcsError, Serializer
from .transactions import (
    EntryFunction,
    RawTransaction,
    SignedTransaction,
    TransactionArgument,
    TransactionPayload,
)
from .type_tag import StructTag, TypeTag

SENDER_KEY = "9bf49a6a0755f953811fce125f2683d50429c3bb49e074147e0089a52eae155f"
RECEIVER_KEY = "0564f879d27ae3c02ce82834acfa8c793a629f2ca0de6919610be82f411326be"

# Validated corpus
RAW_TRANSACTION = "7deeccb1080854f499ec8b4c1b213b82c5e34b925cf6875fec02d4b77adbd2d60b0000000000000002000000000000000000000000000000000000000000000000000000000000000104636f696e087472616e73666572010700000000000000000000000000000000000000000000000000000000000000010a6170746f735f636f696e094170746f73436f696e0002202d133ddd281bb6205558357cc6ac75661817e9aaeac3afebc32842759cbf7fa9088813000000000000d0070000000000000100000000000000d20296490000000004"
SIGNED_TRANSACTION = (
    RAW_TRANSACTION
    + "0020b9c6ee1630ef3e711144a648db06bbb2284f7274cfbee53ffcee503cc1a4920040f25b74ec60a38a1ed780fd2bef6ddb6eb4356e3ab39276c9176cdf0fcae2ab37d79b626abb43d926e91595b66503a4a3c90acbae36a28d405e308f3537af720b"
)


def corpus_transaction() -> RawTransaction:
    sender = AccountKey.from_private_key(SENDER_KEY)
    receiver = AccountKey.from_private_key(RECEIVER_KEY)

    payload = EntryFunction.natural(
        "0x1::coin",
        "transfer",
        [TypeTag(StructTag.from_str("0x1::aptos_coin::AptosCoin"))],
        [
            TransactionArgument(receiver.address(), Serializer.struct),
            TransactionArgument(5000, Serializer.u64),
        ],
    )
    return RawTransaction(
        sender.address(),
        11,
        TransactionPayload(payload),
        2000,
        1,
        1234567890,
        4,
    )


class TransactionsTest(unittest.TestCase):
    def test_entry_function_with_corpus(self):
        raw_transaction = corpus_transaction()
        ser = Serializer()
        raw_transaction.serialize(ser)
        self.assertEqual(ser.output().hex(), RAW_TRANSACTION)

        sender = AccountKey.from_private_key(SENDER_KEY)
        signed_transaction = SignedTransaction(
            raw_transaction, raw_transaction.sign(sender)
        )
        self.assertTrue(signed_transaction.verify())
        self.assertEqual(signed_transaction.hex(), SIGNED_TRANSACTION)

    def test_signing_message_is_domain_separated(self):
        keyed = corpus_transaction().keyed()
        self.assertEqual(len(keyed), 32 + len(bytes.fromhex(RAW_TRANSACTION)))
        self.assertEqual(keyed[32:].hex(), RAW_TRANSACTION)

    def test_deserialize_corpus(self):
        signed_transaction = SignedTransaction.from_hex(f"0x{SIGNED_TRANSACTION}")
        self.assertEqual(signed_transaction.transaction, corpus_transaction())
        self.assertTrue(signed_transaction.verify())
        self.assertEqual(signed_transaction.hex(), SIGNED_TRANSACTION)

    def test_tampered_transaction_does_not_verify(self):
        signed_transaction = SignedTransaction.from_hex(SIGNED_TRANSACTION)
        signed_transaction.transaction.sequence_number += 1
        self.assertFalse(signed_transaction.verify())

    def test_from_hex_errors(self):
        with self.assertRaises(BcsError):
            SignedTransaction.from_hex("not hex")
        with self.assertRaises(BcsError):
            SignedTransaction.from_hex(SIGNED_TRANSACTION[:-2])
        with self.assertRaises(BcsError):
            SignedTransaction.from_hex(SIGNED_TRANSACTION + "00")


if __name__ == "__main__":
    unittest.main()
