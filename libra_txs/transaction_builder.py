# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import List, Optional

from . import asymmetric_crypto
from .account_address import AccountAddress
from .errors import IncompleteTransaction, InvalidGasParameters
from .transactions import (
    EntryFunction,
    RawTransaction,
    SignedTransaction,
    TransactionPayload,
)


def validate_gas(max_gas_amount: int, gas_unit_price: int):
    if max_gas_amount <= 0:
        raise InvalidGasParameters(
            f"max_gas_amount must be positive, got {max_gas_amount}"
        )
    if gas_unit_price <= 0:
        raise InvalidGasParameters(
            f"gas_unit_price must be positive, got {gas_unit_price}"
        )


class TransactionBuilder:
    """
    Collects the fields of a RawTransaction. The payload, expiration and chain id are fixed at
    construction; the rest is set through chainable setters:

        signed = (
            TransactionBuilder(payload, expiration_timestamp_secs, chain_id)
            .sender(address)
            .sequence_number(11)
            .max_gas_amount(5000)
            .gas_unit_price(100)
            .sign(account_key)
        )
    """

    payload: TransactionPayload
    expiration_timestamp_secs: int
    chain_id: int

    _sender: Optional[AccountAddress]
    _sequence_number: Optional[int]
    _max_gas_amount: Optional[int]
    _gas_unit_price: Optional[int]

    def __init__(
        self,
        payload: EntryFunction | TransactionPayload,
        expiration_timestamp_secs: int,
        chain_id: int,
    ):
        if not isinstance(payload, TransactionPayload):
            payload = TransactionPayload(payload)
        self.payload = payload
        self.expiration_timestamp_secs = expiration_timestamp_secs
        self.chain_id = chain_id
        self._sender = None
        self._sequence_number = None
        self._max_gas_amount = None
        self._gas_unit_price = None

    def sender(self, sender: AccountAddress) -> TransactionBuilder:
        self._sender = sender
        return self

    def sequence_number(self, sequence_number: int) -> TransactionBuilder:
        self._sequence_number = sequence_number
        return self

    def max_gas_amount(self, max_gas_amount: int) -> TransactionBuilder:
        self._max_gas_amount = max_gas_amount
        return self

    def gas_unit_price(self, gas_unit_price: int) -> TransactionBuilder:
        self._gas_unit_price = gas_unit_price
        return self

    def build(self) -> RawTransaction:
        missing: List[str] = []
        if self._sender is None:
            missing.append("sender")
        if self._sequence_number is None:
            missing.append("sequence_number")
        if self._max_gas_amount is None:
            missing.append("max_gas_amount")
        if self._gas_unit_price is None:
            missing.append("gas_unit_price")
        if missing:
            raise IncompleteTransaction(missing)

        assert self._sender is not None
        assert self._sequence_number is not None
        assert self._max_gas_amount is not None
        assert self._gas_unit_price is not None
        validate_gas(self._max_gas_amount, self._gas_unit_price)

        return RawTransaction(
            self._sender,
            self._sequence_number,
            self.payload,
            self._max_gas_amount,
            self._gas_unit_price,
            self.expiration_timestamp_secs,
            self.chain_id,
        )

    def sign(self, signer: asymmetric_crypto.Signer) -> SignedTransaction:
        raw_transaction = self.build()
        return SignedTransaction(raw_transaction, raw_transaction.sign(signer))
