# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import importlib.metadata as metadata

# constants
PACKAGE_NAME = "libra-txs"


class Metadata:
    CLIENT_HEADER = "x-libra-client"

    @staticmethod
    def get_version() -> str:
        try:
            return metadata.version(PACKAGE_NAME)
        except metadata.PackageNotFoundError:
            # Running from a source checkout that was never installed.
            return "0.0.0"

    @staticmethod
    def get_client_header_val():
        return f"libra-txs-python/{Metadata.get_version()}"
