# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Connection settings and transaction policy defaults.

Node and faucet URLs resolve in this order: the NODE_URL and APTOS_FAUCET_URL environment
variables, then a random entry of `profile.upstream_nodes` in the 0L config file
(~/.0L/0L.toml), then the local defaults. The faucet is only read from the environment, where
FAUCET_URL is also accepted.
"""

from __future__ import annotations

import logging
import os
import random
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

log = logging.getLogger(__name__)

DEFAULT_NODE_URL = "http://0.0.0.0:8080/"
DEFAULT_FAUCET_URL = "http://0.0.0.0:8081"
DEFAULT_CONFIG_PATH = Path.home() / ".0L" / "0L.toml"

# Gas units a transaction may consume before it is aborted.
DEFAULT_MAX_GAS_AMOUNT = 5000
# Price per gas unit, in the smallest coin denomination.
DEFAULT_GAS_UNIT_PRICE = 100
# Seconds from signing until the transaction expires.
DEFAULT_TIMEOUT_SECS = 10
DEFAULT_COIN_TYPE = "0x1::aptos_coin::AptosCoin"
DEFAULT_ACCOUNT_RESOURCE_TYPE = "0x1::account::Account"


@dataclass(frozen=True)
class Config:
    node_url: str = DEFAULT_NODE_URL
    faucet_url: str = DEFAULT_FAUCET_URL
    poll_interval_secs: float = 0.5
    # Polling stops this long after a transaction's expiration has passed.
    expiration_grace_secs: int = 5
    http_timeout_secs: float = 60.0

    @staticmethod
    def load(
        toml_path: Optional[Path] = None,
        environ: Mapping[str, str] = os.environ,
    ) -> Config:
        node_url = environ.get("NODE_URL")
        if not node_url:
            node_url = _upstream_node(toml_path or DEFAULT_CONFIG_PATH)
        faucet_url = (
            environ.get("APTOS_FAUCET_URL")
            or environ.get("FAUCET_URL")
            or DEFAULT_FAUCET_URL
        )
        return Config(node_url=node_url or DEFAULT_NODE_URL, faucet_url=faucet_url)


@dataclass(frozen=True)
class TransactionOptions:
    max_gas_amount: int = DEFAULT_MAX_GAS_AMOUNT
    gas_unit_price: int = DEFAULT_GAS_UNIT_PRICE
    timeout_secs: int = DEFAULT_TIMEOUT_SECS


@dataclass(frozen=True)
class TransferOptions(TransactionOptions):
    coin_type: str = DEFAULT_COIN_TYPE


def _upstream_node(path: Path) -> Optional[str]:
    if not path.exists():
        log.debug(f"No config file at {path}")
        return None

    try:
        with open(path, "rb") as file:
            data: Any = tomllib.load(file)
    except (OSError, tomllib.TOMLDecodeError) as error:
        log.warning(f"Ignoring unreadable config file {path}: {error}")
        return None

    profile = data.get("profile")
    nodes = profile.get("upstream_nodes") if isinstance(profile, dict) else None
    if not isinstance(nodes, list) or len(nodes) == 0:
        log.warning(f"No profile.upstream_nodes in {path}")
        return None

    node = random.choice(nodes)
    log.debug(f"Using upstream node {node} from {path}")
    return str(node)
