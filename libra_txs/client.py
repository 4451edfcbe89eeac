# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
The transaction client: turns "transfer N coins to A" or "call F with these arguments" into a
signed transaction, submits it and follows it until it is committed or expires.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from .account import LocalAccount
from .account_address import AccountAddress
from .async_client import FaucetClient, PendingTransaction, RestClient
from .bcs import Serializer
from .config import (
    DEFAULT_ACCOUNT_RESOURCE_TYPE,
    DEFAULT_COIN_TYPE,
    Config,
    TransactionOptions,
    TransferOptions,
)
from .payload_encoder import (
    encode_entry_function,
    parse_argument_literals,
    parse_function_id,
    parse_type_arguments,
)
from .transaction_builder import TransactionBuilder, validate_gas
from .transactions import EntryFunction, SignedTransaction, TransactionArgument
from .type_tag import TypeTag

log = logging.getLogger(__name__)


class Client:
    """
    Every call goes to the node; nothing but the connection configuration is kept between
    calls. Sequence numbers and the chain id are read fresh before each signature.
    """

    config: Config
    rest_client: RestClient
    faucet_client: FaucetClient

    def __init__(
        self,
        config: Config,
        rest_client: Optional[RestClient] = None,
        faucet_client: Optional[FaucetClient] = None,
    ):
        self.config = config
        self.rest_client = rest_client or RestClient(config.node_url, config)
        self.faucet_client = faucet_client or FaucetClient(
            config.faucet_url, self.rest_client
        )

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def close(self):
        await self.rest_client.close()

    #
    # Reads
    #

    async def get_account_balance(
        self, address: AccountAddress, coin_type: Optional[str] = None
    ) -> int:
        return await self.rest_client.account_balance(
            address, coin_type or DEFAULT_COIN_TYPE
        )

    async def get_sequence_number(self, address: AccountAddress) -> int:
        return await self.rest_client.account_sequence_number(address)

    async def get_account_resource(
        self, address: AccountAddress, resource_type: Optional[str] = None
    ) -> Dict[str, Any]:
        resource = await self.rest_client.account_resource(
            address, resource_type or DEFAULT_ACCOUNT_RESOURCE_TYPE
        )
        return resource["data"]

    async def get_chain_id(self) -> int:
        return await self.rest_client.chain_id()

    async def view(
        self,
        function_id: str,
        type_args: Optional[str] = None,
        args: Optional[str] = None,
    ) -> List[Any]:
        address, module, function = parse_function_id(function_id)
        type_arguments = [str(tag) for tag in parse_type_arguments(type_args)]
        arguments = [literal.to_json() for literal in parse_argument_literals(args)]
        return await self.rest_client.view(
            f"{address}::{module}::{function}", type_arguments, arguments
        )

    #
    # Transactions
    #

    async def transfer(
        self,
        local_account: LocalAccount,
        to: AccountAddress,
        amount: int,
        options: TransferOptions = TransferOptions(),
    ) -> PendingTransaction:
        payload = EntryFunction.natural(
            "0x1::coin",
            "transfer",
            [TypeTag.from_str(options.coin_type)],
            [
                TransactionArgument(to, Serializer.struct),
                TransactionArgument(amount, Serializer.u64),
            ],
        )
        signed_transaction = await self._sign(local_account, payload, options)
        log.info(f"Transferring {amount} {options.coin_type} to {to}")
        return await self.submit_transaction(signed_transaction)

    async def generate_transaction(
        self,
        local_account: LocalAccount,
        function_id: str,
        type_args: Optional[str] = None,
        args: Optional[str] = None,
        options: TransactionOptions = TransactionOptions(),
    ) -> SignedTransaction:
        """Builds and signs, but does not submit, a call to the entry function."""
        payload = encode_entry_function(function_id, type_args, args)
        return await self._sign(local_account, payload, options)

    async def submit_transaction(
        self, signed_transaction: SignedTransaction
    ) -> PendingTransaction:
        return await self.rest_client.submit_bcs_transaction(signed_transaction)

    async def wait_for_transaction(self, pending: PendingTransaction) -> Dict[str, Any]:
        return await self.rest_client.wait_for_transaction(
            pending.hash, pending.expiration_timestamp_secs
        )

    async def _sign(
        self,
        local_account: LocalAccount,
        payload: EntryFunction,
        options: TransactionOptions,
    ) -> SignedTransaction:
        validate_gas(options.max_gas_amount, options.gas_unit_price)

        chain_id = await self.get_chain_id()
        # The chain's count wins over ours, which may have drifted after a failure.
        local_account.sequence_number = await self.get_sequence_number(
            local_account.address()
        )
        log.debug(
            f"Signing for {local_account.address()} with sequence number "
            f"{local_account.sequence_number} on chain {chain_id}"
        )

        expiration_timestamp_secs = int(time.time()) + options.timeout_secs
        builder = (
            TransactionBuilder(payload, expiration_timestamp_secs, chain_id)
            .max_gas_amount(options.max_gas_amount)
            .gas_unit_price(options.gas_unit_price)
        )
        return local_account.sign_with_transaction_builder(builder)

    #
    # Faucet
    #

    async def create_account_by_faucet(self, address: AccountAddress):
        await self.faucet_client.create_account(address)

    async def fund_by_faucet(self, address: AccountAddress, amount: int):
        await self.faucet_client.fund_account(address, amount)
