# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .account_address import AccountAddress
from .config import DEFAULT_ACCOUNT_RESOURCE_TYPE, Config
from .errors import (
    AccountNotFound,
    ApiError,
    NetworkError,
    SubmissionRejected,
    TransactionExpired,
    TransactionFailed,
)
from .metadata import Metadata
from .transactions import SignedTransaction

log = logging.getLogger(__name__)

BCS_CONTENT_TYPE = "application/x.aptos.signed_transaction+bcs"


@dataclass(frozen=True)
class PendingTransaction:
    """A transaction the node accepted into its mempool but has not yet committed."""

    hash: str
    sender: AccountAddress
    sequence_number: int
    expiration_timestamp_secs: int

    @staticmethod
    def from_json(data: Dict[str, Any]) -> PendingTransaction:
        return PendingTransaction(
            hash=data["hash"],
            sender=AccountAddress.from_str(data["sender"]),
            sequence_number=int(data["sequence_number"]),
            expiration_timestamp_secs=int(data["expiration_timestamp_secs"]),
        )


def normalize_base_url(base_url: str) -> str:
    """The REST API lives under /v1; accept node URLs with or without it."""
    base_url = base_url.rstrip("/")
    if not base_url.endswith("/v1"):
        base_url = f"{base_url}/v1"
    return base_url


def _error_message(response: httpx.Response) -> str:
    """Errors come back as {message, error_code, vm_error_code}; fall back to the raw body."""
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict) and "message" in data:
        return str(data["message"])
    return response.text


class RestClient:
    """A wrapper around the chain's REST API"""

    client: httpx.AsyncClient
    config: Config
    base_url: str

    def __init__(
        self,
        base_url: str,
        config: Config = Config(),
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = normalize_base_url(base_url)
        # Default limits
        limits = httpx.Limits()
        # Do not set a pool timeout, since the idea is that jobs will wait as long as progress is
        # being made.
        timeout = httpx.Timeout(config.http_timeout_secs, pool=None)
        # Default headers
        headers = {Metadata.CLIENT_HEADER: Metadata.get_client_header_val()}
        self.client = httpx.AsyncClient(
            limits=limits,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )
        self.config = config

    async def close(self):
        await self.client.aclose()

    async def info(self) -> Dict[str, Any]:
        response = await self._get(endpoint="", operation="get ledger info")
        if response.status_code >= 400:
            raise ApiError(_error_message(response), response.status_code)
        return response.json()

    async def chain_id(self) -> int:
        info = await self.info()
        return int(info["chain_id"])

    #
    # Account accessors
    #

    async def account_resource(
        self,
        account_address: AccountAddress,
        resource_type: str = DEFAULT_ACCOUNT_RESOURCE_TYPE,
    ) -> Dict[str, Any]:
        """
        Retrieves an individual resource from a given account.

        :param account_address: Address of the account.
        :param resource_type: Name of struct to retrieve e.g. 0x1::account::Account.
        :return: The resource document, {type, data}.
        """
        response = await self._get(
            endpoint=f"accounts/{account_address}/resource/{resource_type}",
            operation=f"get resource {resource_type} of {account_address}",
        )
        if response.status_code == 404:
            raise AccountNotFound(
                f"Account {account_address} or its resource {resource_type} was not found",
                account_address,
            )
        if response.status_code >= 400:
            raise ApiError(
                f"{_error_message(response)} - {account_address}",
                response.status_code,
            )
        return response.json()

    async def account_sequence_number(self, account_address: AccountAddress) -> int:
        resource = await self.account_resource(
            account_address, DEFAULT_ACCOUNT_RESOURCE_TYPE
        )
        return int(resource["data"]["sequence_number"])

    async def account_balance(
        self, account_address: AccountAddress, coin_type: str
    ) -> int:
        response = await self._get(
            endpoint=f"accounts/{account_address}/balance/{coin_type}",
            operation=f"get {coin_type} balance of {account_address}",
        )
        if response.status_code == 404:
            raise AccountNotFound(
                f"Account {account_address} was not found", account_address
            )
        if response.status_code >= 400:
            raise ApiError(
                f"{_error_message(response)} - {account_address}",
                response.status_code,
            )
        # Balances are u64s, which the API may render as strings.
        return int(response.json())

    #
    # Transactions
    #

    async def submit_bcs_transaction(
        self, signed_transaction: SignedTransaction
    ) -> PendingTransaction:
        headers = {"Content-Type": BCS_CONTENT_TYPE}
        try:
            response = await self.client.post(
                f"{self.base_url}/transactions",
                headers=headers,
                content=signed_transaction.bytes(),
            )
        except httpx.TransportError as error:
            raise NetworkError(
                f"submit transaction failed: {error}", "submit transaction"
            ) from error
        if response.status_code >= 400:
            raise SubmissionRejected(_error_message(response), response.status_code)

        pending = PendingTransaction.from_json(response.json())
        log.info(
            f"Submitted transaction {pending.hash} from {pending.sender} "
            f"with sequence number {pending.sequence_number}"
        )
        return pending

    async def transaction_by_hash(self, txn_hash: str) -> Optional[Dict[str, Any]]:
        """Returns None while the node does not know the hash yet."""
        response = await self._get(
            endpoint=f"transactions/by_hash/{txn_hash}",
            operation=f"get transaction {txn_hash}",
        )
        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise ApiError(
                f"{_error_message(response)} - {txn_hash}", response.status_code
            )
        return response.json()

    async def wait_for_transaction(
        self, txn_hash: str, expiration_timestamp_secs: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Polls until the transaction is committed and returns it. Raises TransactionFailed when it
        was committed but aborted, and TransactionExpired once the local clock passes its
        expiration plus the configured grace period without a commit.

        Without a known expiration, the one reported by the node while the transaction is
        pending is used, and until then polling gives up after the HTTP timeout.

        Unreachable nodes and 5xx answers are retried until that deadline; other errors are
        raised.
        """
        started = time.time()
        while True:
            try:
                transaction = await self.transaction_by_hash(txn_hash)
            except NetworkError as error:
                log.debug(f"Polling {txn_hash} failed, retrying: {error}")
                transaction = None
            except ApiError as error:
                if error.status_code < 500:
                    raise
                log.debug(f"Polling {txn_hash} failed, retrying: {error}")
                transaction = None

            if transaction is None:
                log.debug(f"Transaction {txn_hash} not found yet")
            elif transaction["type"] == "pending_transaction":
                log.debug(f"Transaction {txn_hash} is pending")
                if expiration_timestamp_secs is None:
                    expiration_timestamp_secs = int(
                        transaction["expiration_timestamp_secs"]
                    )
            elif transaction.get("success"):
                log.info(f"Transaction {txn_hash} committed")
                return transaction
            else:
                vm_status = transaction.get("vm_status")
                log.info(f"Transaction {txn_hash} failed: {vm_status}")
                raise TransactionFailed(txn_hash, vm_status)

            now = time.time()
            if expiration_timestamp_secs is None:
                if now - started > self.config.http_timeout_secs:
                    log.info(f"Giving up on transaction {txn_hash}")
                    raise TransactionExpired(txn_hash, None)
            elif now > expiration_timestamp_secs + self.config.expiration_grace_secs:
                log.info(f"Transaction {txn_hash} expired")
                raise TransactionExpired(txn_hash, expiration_timestamp_secs)
            await asyncio.sleep(self.config.poll_interval_secs)

    async def view(
        self,
        function: str,
        type_arguments: List[str],
        arguments: List[Any],
    ) -> List[Any]:
        """
        Execute a view Move function with the given parameters and return its execution result.

        :param function: Entry function id is string representation of a function defined on-chain.
        :param type_arguments: Type arguments of the function.
        :param arguments: JSON encoded arguments of the function.
        :returns: Execution result, one entry per return value.
        """
        response = await self._post(
            endpoint="view",
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            data={
                "function": function,
                "type_arguments": type_arguments,
                "arguments": arguments,
            },
            operation=f"view {function}",
        )
        if response.status_code >= 400:
            raise ApiError(
                f"{_error_message(response)} - {function}", response.status_code
            )

        return response.json()

    async def _post(
        self,
        endpoint: str,
        operation: str,
        headers: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        try:
            return await self.client.post(
                url=f"{self.base_url}/{endpoint}",
                headers=headers,
                json=data,
            )
        except httpx.TransportError as error:
            raise NetworkError(f"{operation} failed: {error}", operation) from error

    async def _get(
        self,
        endpoint: str,
        operation: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        # format params:
        params = {} if params is None else params
        params = {key: val for key, val in params.items() if val is not None}
        url = f"{self.base_url}/{endpoint}" if endpoint else self.base_url
        try:
            return await self.client.get(
                url=url,
                params=params,
            )
        except httpx.TransportError as error:
            raise NetworkError(f"{operation} failed: {error}", operation) from error


class FaucetClient:
    """Faucet creates and funds accounts. This is a thin wrapper around that."""

    base_url: str
    rest_client: RestClient

    def __init__(self, base_url: str, rest_client: RestClient):
        self.base_url = base_url.rstrip("/")
        self.rest_client = rest_client

    async def mint(self, address: AccountAddress, amount: int) -> List[str]:
        """Asks the faucet to mint, returning the hashes of the transactions it submitted."""
        request = f"{self.base_url}/mint?amount={amount}&address={address}"
        operation = f"mint {amount} to {address}"
        try:
            response = await self.rest_client.client.post(request)
        except httpx.TransportError as error:
            raise NetworkError(f"{operation} failed: {error}", operation) from error
        if response.status_code >= 400:
            raise ApiError(
                f"{_error_message(response)} - {address}", response.status_code
            )
        return response.json()

    async def fund_account(self, address: AccountAddress, amount: int):
        """This creates an account if it does not exist and mints the specified amount of
        coins into that account."""
        for txn_hash in await self.mint(address, amount):
            await self.rest_client.wait_for_transaction(txn_hash)

    async def create_account(self, address: AccountAddress):
        await self.fund_account(address, 0)
