# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import unittest

from .account import AccountKey, LocalAccount
from .errors import IncompleteTransaction, InvalidGasParameters
from .payload_encoder import encode_entry_function
from .transaction_builder import TransactionBuilder
from .transactions_test import (
    RECEIVER_KEY,
    SENDER_KEY,
    SIGNED_TRANSACTION,
)


def transfer_builder() -> TransactionBuilder:
    receiver = AccountKey.from_private_key(RECEIVER_KEY)
    payload = encode_entry_function(
        "0x1::coin::transfer",
        "0x1::aptos_coin::AptosCoin",
        f"{receiver.address()}, 5000",
    )
    return TransactionBuilder(payload, 1234567890, 4)


class TransactionBuilderTest(unittest.TestCase):
    def test_matches_corpus(self):
        sender = AccountKey.from_private_key(SENDER_KEY)
        signed = (
            transfer_builder()
            .sender(sender.address())
            .sequence_number(11)
            .max_gas_amount(2000)
            .gas_unit_price(1)
            .sign(sender)
        )
        self.assertEqual(signed.hex(), SIGNED_TRANSACTION)
        self.assertTrue(signed.verify())

    def test_missing_fields(self):
        with self.assertRaises(IncompleteTransaction) as context:
            transfer_builder().sequence_number(0).build()
        self.assertEqual(
            context.exception.missing, ["sender", "max_gas_amount", "gas_unit_price"]
        )

    def test_gas_must_be_positive(self):
        sender = AccountKey.from_private_key(SENDER_KEY)
        builder = (
            transfer_builder()
            .sender(sender.address())
            .sequence_number(0)
            .gas_unit_price(100)
        )
        with self.assertRaises(InvalidGasParameters):
            builder.max_gas_amount(0).build()
        with self.assertRaises(InvalidGasParameters):
            builder.max_gas_amount(5000).gas_unit_price(-1).build()

    def test_local_account_increments_sequence_number(self):
        account = LocalAccount(AccountKey.from_private_key(SENDER_KEY), 11)
        first = account.sign_with_transaction_builder(
            transfer_builder().max_gas_amount(2000).gas_unit_price(1)
        )
        second = account.sign_with_transaction_builder(
            transfer_builder().max_gas_amount(2000).gas_unit_price(1)
        )

        self.assertEqual(account.sequence_number, 13)
        self.assertEqual(first.hex(), SIGNED_TRANSACTION)
        self.assertEqual(second.transaction.sequence_number, 12)
        self.assertNotEqual(first.bytes(), second.bytes())
        self.assertTrue(first.verify())
        self.assertTrue(second.verify())


if __name__ == "__main__":
    unittest.main()
