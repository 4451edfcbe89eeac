# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

"""
Errors raised by the transaction client. Everything derives from TxsError so that command
handlers can report any failure uniformly.
"""

from __future__ import annotations

from typing import Optional


class TxsError(Exception):
    """Base class for every error raised by libra_txs"""


class InvalidKeyEncoding(TxsError):
    """A private or public key had the wrong length or was not valid hex"""


class InvalidMnemonic(TxsError):
    """The mnemonic phrase failed BIP-39 validation"""


class InvalidPath(TxsError):
    """The derivation path is not a hardened m/44'/637'/x'/y'/z' path"""


class MalformedFunctionId(TxsError):
    """A function id was not of the form <address>::<module>::<function>"""


class InvalidTypeArgument(TxsError):
    """A type argument could not be parsed into a TypeTag"""


class InvalidArgumentLiteral(TxsError):
    """A value argument did not match the literal grammar"""

    literal: str

    def __init__(self, message: str, literal: str):
        super().__init__(message)
        self.literal = literal


class IncompleteTransaction(TxsError):
    """A transaction builder was asked to build before all fields were set"""

    missing: list

    def __init__(self, missing: list):
        super().__init__(f"Transaction is missing fields: {', '.join(missing)}")
        self.missing = missing


class InvalidGasParameters(TxsError):
    """Gas amount or gas price was not positive"""


class AccountNotFound(TxsError):
    """The account was not found"""

    account: object

    def __init__(self, message: str, account: object):
        # Call the base class constructor with the parameters it needs
        super().__init__(message)
        self.account = account


class NetworkError(TxsError):
    """The node or faucet could not be reached"""

    operation: str

    def __init__(self, message: str, operation: str):
        super().__init__(message)
        self.operation = operation


class ApiError(TxsError):
    """The API returned a non-success status code, e.g., >= 400"""

    status_code: int

    def __init__(self, message: str, status_code: int):
        # Call the base class constructor with the parameters it needs
        super().__init__(message)
        self.status_code = status_code


class SubmissionRejected(ApiError):
    """The node refused a transaction, e.g., bad sequence number or insufficient balance"""

    reason: str

    def __init__(self, reason: str, status_code: int):
        super().__init__(f"Transaction rejected: {reason}", status_code)
        self.reason = reason


class TransactionExpired(TxsError):
    """The transaction was not committed before its expiration time"""

    txn_hash: str
    expiration_timestamp_secs: Optional[int]

    def __init__(self, txn_hash: str, expiration_timestamp_secs: Optional[int]):
        if expiration_timestamp_secs is None:
            message = (
                f"Transaction {txn_hash} was not committed before polling gave up, "
                "and the node never reported its expiration"
            )
        else:
            message = (
                f"Transaction {txn_hash} expired at {expiration_timestamp_secs} "
                "without being committed"
            )
        super().__init__(message)
        self.txn_hash = txn_hash
        self.expiration_timestamp_secs = expiration_timestamp_secs


class TransactionFailed(TxsError):
    """The transaction was committed but aborted during execution"""

    txn_hash: str
    vm_status: Optional[str]

    def __init__(self, txn_hash: str, vm_status: Optional[str]):
        super().__init__(f"Transaction {txn_hash} failed: {vm_status}")
        self.txn_hash = txn_hash
        self.vm_status = vm_status
