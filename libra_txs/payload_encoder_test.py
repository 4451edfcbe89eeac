# Copyright © Aptos Foundation
# SPDX-License-Identifier: Apache-2.0

import unittest

from .account_address import AccountAddress
from .bcs import Deserializer
from .errors import InvalidArgumentLiteral, InvalidTypeArgument, MalformedFunctionId
from .payload_encoder import (
    AddressLiteral,
    BoolLiteral,
    BytesLiteral,
    U8Literal,
    U64Literal,
    U128Literal,
    U256Literal,
    encode_entry_function,
    parse_argument_literals,
    parse_function_id,
    parse_type_arguments,
    parse_value_arguments,
)
from .type_tag import StructTag, TypeTag

RECEIVER = "0x2d133ddd281bb6205558357cc6ac75661817e9aaeac3afebc32842759cbf7fa9"


class ParseFunctionIdTest(unittest.TestCase):
    def test_valid(self):
        address, module, function = parse_function_id("0x1::coin::transfer")
        self.assertEqual(address, AccountAddress.from_str("0x1"))
        self.assertEqual(module, "coin")
        self.assertEqual(function, "transfer")

    def test_malformed(self):
        for value in [
            "bad",
            "0x1::coin",
            "0x1::coin::transfer::extra",
            "0xzz::coin::transfer",
            "0x1::coin::",
            "0x1::9coin::transfer",
        ]:
            with self.assertRaises(MalformedFunctionId, msg=value):
                parse_function_id(value)


class ParseArgumentsTest(unittest.TestCase):
    def test_literal_grammar(self):
        literals = parse_argument_literals(
            f'5000, 7u8, 340282366920938463463374607431768211455u128, 1u256, true, false, @{RECEIVER}, 0x1, x"00ff", b"hi, there"'
        )
        self.assertEqual(
            literals,
            [
                U64Literal(5000),
                U8Literal(7),
                U128Literal(2**128 - 1),
                U256Literal(1),
                BoolLiteral(True),
                BoolLiteral(False),
                AddressLiteral(AccountAddress.from_str(RECEIVER)),
                AddressLiteral(AccountAddress.from_str("0x1")),
                BytesLiteral(b"\x00\xff"),
                BytesLiteral(b"hi, there"),
            ],
        )

    def test_digit_separators(self):
        self.assertEqual(
            parse_argument_literals("1_000, 2_5u8"), [U64Literal(1000), U8Literal(25)]
        )

    def test_unsuffixed_integer_is_u64(self):
        self.assertNotEqual(parse_argument_literals("7"), [U8Literal(7)])
        self.assertEqual(
            parse_value_arguments("5000"), [bytes.fromhex("8813000000000000")]
        )

    def test_encoded_values_decode_to_typed_values(self):
        encoded = parse_value_arguments(f'{RECEIVER}, 5000, 255u8, true, x"0102"')
        self.assertEqual(
            Deserializer(encoded[0]).fixed_bytes(32),
            AccountAddress.from_str(RECEIVER).address,
        )
        self.assertEqual(Deserializer(encoded[1]).u64(), 5000)
        self.assertEqual(Deserializer(encoded[2]).u8(), 255)
        self.assertTrue(Deserializer(encoded[3]).bool())
        self.assertEqual(Deserializer(encoded[4]).to_bytes(), b"\x01\x02")

    def test_to_json(self):
        literals = parse_argument_literals('1u8, 2, true, 0x1, x"ab"')
        self.assertEqual(
            [literal.to_json() for literal in literals],
            [1, "2", True, "0x" + "0" * 63 + "1", "0xab"],
        )

    def test_blank(self):
        self.assertEqual(parse_value_arguments(None), [])
        self.assertEqual(parse_value_arguments("  "), [])

    def test_invalid_literals(self):
        for value in [
            "256u8",
            "18446744073709551616",
            "-1",
            "1u7",
            "hello",
            "@1",
            "0xzz",
            'x"0g"',
            'b"open',
            "1,,2",
            "1,",
            "1_",
            "1__0",
            "5_u8",
            "_1",
        ]:
            with self.assertRaises(InvalidArgumentLiteral, msg=value):
                parse_value_arguments(value)

    def test_error_names_the_token(self):
        with self.assertRaises(InvalidArgumentLiteral) as context:
            parse_value_arguments("1, 300u8, 2")
        self.assertEqual(context.exception.literal.strip(), "300u8")


class EncodeEntryFunctionTest(unittest.TestCase):
    def test_transfer(self):
        payload = encode_entry_function(
            "0x1::coin::transfer",
            "0x1::aptos_coin::AptosCoin",
            f"{RECEIVER}, 5000",
        )
        self.assertEqual(str(payload.module.address), "0x" + "0" * 63 + "1")
        self.assertEqual(payload.module.name, "coin")
        self.assertEqual(payload.function, "transfer")
        self.assertEqual(
            payload.ty_args,
            [TypeTag(StructTag.from_str("0x1::aptos_coin::AptosCoin"))],
        )
        self.assertEqual(
            payload.args,
            [
                AccountAddress.from_str(RECEIVER).address,
                bytes.fromhex("8813000000000000"),
            ],
        )

    def test_type_arguments(self):
        self.assertEqual(parse_type_arguments(None), [])
        with self.assertRaises(InvalidTypeArgument):
            encode_entry_function("0x1::coin::transfer", "NotAType", "1")


if __name__ == "__main__":
    unittest.main()
