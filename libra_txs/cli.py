# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from . import applogging
from .account import AccountKey, LocalAccount
from .account_address import AccountAddress
from .client import Client
from .config import (
    DEFAULT_GAS_UNIT_PRICE,
    DEFAULT_MAX_GAS_AMOUNT,
    Config,
    TransactionOptions,
    TransferOptions,
)
from .ed25519 import DEFAULT_DERIVATION_PATH
from .errors import TxsError
from .transactions import SignedTransaction

log = logging.getLogger(__name__)

ClientFactory = Callable[[Config], Client]

DEMO_FUNDING = 100_000_000
DEMO_TRANSFER = 1_000


def generate_local_account(parsed_args: argparse.Namespace) -> str:
    if parsed_args.private_key:
        key = AccountKey.from_private_key(parsed_args.private_key)
    elif parsed_args.mnemonic:
        key = AccountKey.from_mnemonic(
            parsed_args.mnemonic, parsed_args.derivation_path
        )
    else:
        key = AccountKey.generate()

    output = "\n".join(
        [
            "====================================",
            f"Private key: {key.private_key.to_bytes().hex()}",
            f"Public key: {key.public_key()}",
            f"Authentication key: {key.authentication_key()}",
            f"Account address: {key.address()}",
        ]
    )

    if parsed_args.output_dir:
        output_dir = Path(parsed_args.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        path = output_dir / f"{key.address()}.json"
        key.store(str(path))
        output += f"\nKey file: {path}"
    return output


async def demo(client: Client):
    """Funds two fresh accounts, then has the first send coins to the second twice."""
    alice = LocalAccount(AccountKey.generate())
    bob = AccountKey.generate()

    print("\n=== Addresses ===")
    print(f"Alice: {alice.address()}")
    print(f"Bob: {bob.address()}")

    await client.fund_by_faucet(alice.address(), DEMO_FUNDING)
    await client.create_account_by_faucet(bob.address())

    async def print_balances(title: str):
        print(f"\n=== {title} ===")
        print(f"Alice: {await client.get_account_balance(alice.address())}")
        print(f"Bob: {await client.get_account_balance(bob.address())}")

    await print_balances("Initial Balances")
    for title in ["Intermediate Balances", "Final Balances"]:
        pending = await client.transfer(alice, bob.address(), DEMO_TRANSFER)
        await client.wait_for_transaction(pending)
        await print_balances(title)


async def run_command(parsed_args: argparse.Namespace, client: Client):
    command = parsed_args.command

    if command == "create-account":
        address = AccountAddress.from_str(parsed_args.account_address)
        if parsed_args.coins == 0:
            await client.create_account_by_faucet(address)
        else:
            await client.fund_by_faucet(address, parsed_args.coins)
        print("Success!")

    elif command == "get-account-balance":
        address = AccountAddress.from_str(parsed_args.account_address)
        balance = await client.get_account_balance(address)
        print(f"Account balance: {balance} coins")

    elif command == "get-account-resource":
        address = AccountAddress.from_str(parsed_args.account_address)
        resource = await client.get_account_resource(address, parsed_args.resource_type)
        print(json.dumps(resource, indent=2))

    elif command == "transfer-coins":
        to = AccountAddress.from_str(parsed_args.to_account)
        account = LocalAccount(AccountKey.from_private_key(parsed_args.private_key))
        options = TransferOptions(
            max_gas_amount=parsed_args.max_gas,
            gas_unit_price=parsed_args.gas_unit_price,
        )
        pending = await client.transfer(account, to, parsed_args.amount, options)
        await client.wait_for_transaction(pending)
        print("Success!")

    elif command == "generate-transaction":
        account = LocalAccount(AccountKey.from_private_key(parsed_args.private_key))
        options = TransactionOptions(
            max_gas_amount=parsed_args.max_gas,
            gas_unit_price=parsed_args.gas_unit_price,
        )
        signed_transaction = await client.generate_transaction(
            account,
            parsed_args.function_id,
            parsed_args.type_args,
            parsed_args.args,
            options,
        )
        print(signed_transaction.hex())
        if parsed_args.submit:
            await submit_and_wait(client, signed_transaction)

    elif command == "submit-transaction":
        signed_transaction = SignedTransaction.from_hex(parsed_args.signed_transaction)
        if not signed_transaction.verify():
            raise TxsError("The signed transaction's signature does not verify")
        await submit_and_wait(client, signed_transaction)

    elif command == "view":
        result = await client.view(
            parsed_args.function_id, parsed_args.type_args, parsed_args.args
        )
        print("\n=======OUTPUT=======")
        print(f"[{', '.join(json.dumps(value) for value in result)}]")

    elif command == "demo":
        await demo(client)


async def submit_and_wait(client: Client, signed_transaction: SignedTransaction):
    pending = await client.submit_transaction(signed_transaction)
    await client.wait_for_transaction(pending)
    print(f"Success! Transaction hash: {pending.hash}")


def parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="txs", description="Transactions for 0L accounts"
    )
    parser.add_argument("--node-url", help="REST endpoint of the node", type=str)
    parser.add_argument("--faucet-url", help="Endpoint of the faucet", type=str)
    parser.add_argument(
        "--config", help="Path to a 0L.toml with profile.upstream_nodes", type=Path
    )
    parser.add_argument(
        "-d", "--debug", help="Log debug output and tracebacks", action="store_true"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate = subparsers.add_parser(
        "generate-local-account", help="Generate keys and account address locally"
    )
    source = generate.add_mutually_exclusive_group()
    source.add_argument(
        "--private-key", help="Generate account from the given private key"
    )
    source.add_argument("--mnemonic", help="Derive the account from a BIP-39 phrase")
    generate.add_argument(
        "--derivation-path",
        default=DEFAULT_DERIVATION_PATH,
        help="Path used with --mnemonic",
    )
    generate.add_argument("--output-dir", help="Write a key file into this directory")

    create = subparsers.add_parser(
        "create-account", help="Create onchain account by using the faucet"
    )
    create.add_argument("--account-address", "-a", required=True)
    create.add_argument(
        "--coins",
        "-c",
        type=int,
        default=0,
        help="The amount of coins to fund the new account",
    )

    balance = subparsers.add_parser("get-account-balance", help="Get account balance")
    balance.add_argument("--account-address", "-a", required=True)

    resource = subparsers.add_parser(
        "get-account-resource", help="Get account resource"
    )
    resource.add_argument("--account-address", "-a", required=True)
    resource.add_argument(
        "--resource-type", "-r", help="Type of the resource to get from account"
    )

    transfer = subparsers.add_parser(
        "transfer-coins", help="Transfer coins between accounts"
    )
    transfer.add_argument("--to-account", "-t", required=True)
    transfer.add_argument("--amount", type=int, required=True)
    transfer.add_argument(
        "--private-key",
        "-p",
        required=True,
        help="Private key of the account to withdraw money from",
    )
    add_gas_arguments(transfer)

    generate_transaction = subparsers.add_parser(
        "generate-transaction", help="Sign an entry function call and print it"
    )
    add_function_arguments(generate_transaction)
    generate_transaction.add_argument("--private-key", "-p", required=True)
    add_gas_arguments(generate_transaction)
    generate_transaction.add_argument(
        "--submit", action="store_true", help="Also submit and wait for it"
    )

    submit = subparsers.add_parser(
        "submit-transaction", help="Submit a signed transaction in hex and wait for it"
    )
    submit.add_argument("--signed-transaction", "-s", required=True)

    view = subparsers.add_parser("view", help="Call a view function")
    add_function_arguments(view)

    subparsers.add_parser("demo", help="Demo transfer coin example for local testnet")
    return parser


def add_function_arguments(subparser: argparse.ArgumentParser):
    subparser.add_argument(
        "--function-id", "-f", required=True, help="e.g., 0x1::coin::transfer"
    )
    subparser.add_argument(
        "--type-args", "-t", help="Comma separated types, e.g., 0x1::coin::Coin<u8>"
    )
    subparser.add_argument(
        "--args", "-a", help='Comma separated values, e.g., 0x1, 5000, b"memo"'
    )


def add_gas_arguments(subparser: argparse.ArgumentParser):
    subparser.add_argument(
        "--max-gas", "-g", type=int, default=DEFAULT_MAX_GAS_AMOUNT
    )
    subparser.add_argument(
        "--gas-unit-price",
        type=int,
        default=DEFAULT_GAS_UNIT_PRICE,
        help="The amount of coins to pay for 1 gas unit. The higher the price is, "
        "the higher priority your transaction will be executed with",
    )


def load_config(
    parsed_args: argparse.Namespace, environ: Mapping[str, str]
) -> Config:
    config = Config.load(parsed_args.config, environ)
    if parsed_args.node_url:
        config = dataclasses.replace(config, node_url=parsed_args.node_url)
    if parsed_args.faucet_url:
        config = dataclasses.replace(config, faucet_url=parsed_args.faucet_url)
    return config


def report(error: TxsError):
    print(f"error: {error}", file=sys.stderr)
    cause = error.__cause__
    while cause is not None:
        print(f"  caused by: {cause}", file=sys.stderr)
        cause = cause.__cause__


async def main(
    args: List[str],
    environ: Mapping[str, str] = os.environ,
    client_factory: Optional[ClientFactory] = None,
) -> int:
    parsed_args = parser().parse_args(args)

    logger = logging.getLogger("libra_txs")
    handler = applogging.init_logging(
        logger,
        logging.DEBUG if parsed_args.debug else logging.INFO,
        print_metadata=parsed_args.debug,
    )
    try:
        if parsed_args.command == "generate-local-account":
            print(generate_local_account(parsed_args))
            return 0

        config = load_config(parsed_args, environ)
        log.debug(f"Using node {config.node_url} and faucet {config.faucet_url}")
        async with (client_factory or Client)(config) as client:
            await run_command(parsed_args, client)
        return 0
    except TxsError as error:
        if parsed_args.debug:
            log.exception(error)
        report(error)
        return 1
    finally:
        logger.removeHandler(handler)


def entry():
    sys.exit(asyncio.run(main(sys.argv[1:])))


if __name__ == "__main__":
    entry()
