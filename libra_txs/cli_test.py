# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import contextlib
import io
import os
import tempfile
import unittest
from typing import List, Tuple

from .account import AccountKey
from .account_test import ADDRESS, PRIVATE_KEY, PUBLIC_KEY
from .async_client import RestClient
from .cli import main
from .client import Client
from .client_test import FakeNode
from .config import Config
from .transactions import SignedTransaction
from .transactions_test import RECEIVER_KEY, SENDER_KEY


class CliTest(unittest.IsolatedAsyncioTestCase):
    node: FakeNode
    configs: List[Config]

    def setUp(self):
        self.node = FakeNode()
        self.configs = []

    def client_factory(self, config: Config) -> Client:
        self.configs.append(config)
        rest_client = RestClient(
            config.node_url, config, transport=self.node.transport()
        )
        return Client(config, rest_client=rest_client)

    async def run_cli(self, *args: str) -> Tuple[int, str, str]:
        stdout = io.StringIO()
        stderr = io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            code = await main(
                list(args),
                environ={"NODE_URL": "http://node.test:8080"},
                client_factory=self.client_factory,
            )
        return code, stdout.getvalue(), stderr.getvalue()

    async def test_generate_local_account_from_private_key(self):
        code, out, _ = await self.run_cli(
            "generate-local-account", "--private-key", PRIVATE_KEY
        )
        self.assertEqual(code, 0)
        self.assertEqual(
            out.splitlines()[1:5],
            [
                f"Private key: {PRIVATE_KEY}",
                f"Public key: {PUBLIC_KEY}",
                f"Authentication key: {ADDRESS[2:]}",
                f"Account address: {ADDRESS}",
            ],
        )
        self.assertEqual(self.node.requests, [])

    async def test_generate_local_account_output_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            code, out, _ = await self.run_cli(
                "generate-local-account", "--output-dir", tmpdir
            )
            self.assertEqual(code, 0)
            address = out.splitlines()[4].replace("Account address: ", "")
            key = AccountKey.load(os.path.join(tmpdir, f"{address}.json"))
            self.assertEqual(str(key.address()), address)

    async def test_invalid_private_key(self):
        code, out, err = await self.run_cli(
            "generate-local-account", "--private-key", "xyz"
        )
        self.assertEqual(code, 1)
        self.assertEqual(out, "")
        self.assertTrue(err.startswith("error: Unable to decode the private key"))
        self.assertIn("caused by:", err)

    async def test_get_account_balance(self):
        code, out, _ = await self.run_cli(
            "get-account-balance", "--account-address", ADDRESS
        )
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "Account balance: 1000 coins")

    async def test_invalid_address(self):
        code, _, err = await self.run_cli(
            "get-account-balance", "--account-address", "0xnothex"
        )
        self.assertEqual(code, 1)
        self.assertTrue(err.startswith("error: Invalid address 0xnothex"))
        self.assertEqual(self.node.requests, [])

    async def test_node_url_flag_overrides_environment(self):
        await self.run_cli(
            "--node-url", "http://flag.test", "get-account-balance", "-a", ADDRESS
        )
        self.assertEqual(self.configs[0].node_url, "http://flag.test")

    async def test_generate_then_submit_transaction(self):
        receiver = AccountKey.from_private_key(RECEIVER_KEY).address()
        code, out, _ = await self.run_cli(
            "generate-transaction",
            "--function-id",
            "0x1::coin::transfer",
            "--type-args",
            "0x1::aptos_coin::AptosCoin",
            "--args",
            f"{receiver}, 5000",
            "--private-key",
            SENDER_KEY,
        )
        self.assertEqual(code, 0)
        signed = SignedTransaction.from_hex(out.strip())
        self.assertTrue(signed.verify())
        self.assertEqual(signed.transaction.sequence_number, 11)
        self.assertEqual(self.node.submitted, [])

        code, out, _ = await self.run_cli(
            "submit-transaction", "--signed-transaction", signed.hex()
        )
        self.assertEqual(code, 0)
        self.assertTrue(out.startswith("Success!"))
        self.assertEqual(self.node.submitted, [signed])

    async def test_transfer_with_zero_gas_fails_before_network(self):
        code, _, err = await self.run_cli(
            "transfer-coins",
            "--to-account",
            ADDRESS,
            "--amount",
            "10",
            "--private-key",
            SENDER_KEY,
            "--max-gas",
            "0",
        )
        self.assertEqual(code, 1)
        self.assertIn("error: max_gas_amount must be positive", err)
        self.assertEqual(self.node.requests, [])

    async def test_transfer(self):
        code, out, _ = await self.run_cli(
            "transfer-coins", "-t", ADDRESS, "--amount", "10", "-p", SENDER_KEY
        )
        self.assertEqual(code, 0)
        self.assertEqual(out.strip(), "Success!")
        self.assertEqual(len(self.node.submitted), 1)

    async def test_view(self):
        code, out, _ = await self.run_cli(
            "view", "--function-id", "0x1::coin::balance", "--args", ADDRESS
        )
        self.assertEqual(code, 0)
        self.assertEqual(out.strip().splitlines()[-1], '["100"]')

    async def test_missing_command(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as context:
                await main([], environ={})
        self.assertEqual(context.exception.code, 2)


if __name__ == "__main__":
    unittest.main()
