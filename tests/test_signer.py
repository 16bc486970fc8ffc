"""
Tests for EIP-712 order signing.

All tests use REAL cryptographic signatures. The digest check rebuilds the
domain separator and struct hash by hand so a schema or field-order mistake
in the typed data would be caught even though signing and recovery agree.
"""

from dataclasses import replace

import pytest
from eth_abi import encode
from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_utils import keccak

from opinion_trade.constants import EXCHANGE_ADDRESS, ORDER_STRUCTURE_HASH
from opinion_trade.errors import SigningError, ValidationError
from opinion_trade.order_builder import build_order
from opinion_trade.signer import (
    ExchangeDomain,
    OrderSigner,
    build_typed_data,
    encode_gnosis_safe_signature,
    recover_order_signer,
    sign_order,
)

from tests.conftest import TEST_MAKER_ADDRESS, TEST_PRIVATE_KEY, TEST_TOKEN_ID


@pytest.fixture
def order(order_signer, fixed_salt):
    return build_order(
        maker=TEST_MAKER_ADDRESS,
        signer=order_signer.address,
        token_id=TEST_TOKEN_ID,
        maker_amount="9900000000000000000",
        taker_amount="10000000000000000000",
        side=1,
        salt_generator=fixed_salt,
    )


class TestExchangeDomain:
    def test_defaults(self, domain):
        assert domain.to_dict() == {
            "name": "OPINION CTF Exchange",
            "version": "1",
            "chainId": 56,
            "verifyingContract": EXCHANGE_ADDRESS.lower(),
        }

    def test_rejects_bad_contract(self):
        with pytest.raises(ValidationError):
            ExchangeDomain(verifying_contract="0x123")

    def test_rejects_bad_contract_checksum(self):
        body = EXCHANGE_ADDRESS[2:]
        i = next(i for i, c in enumerate(body) if c.isalpha())
        bad_checksum = "0x" + body[:i] + body[i].swapcase() + body[i + 1 :]
        with pytest.raises(ValidationError) as exc_info:
            ExchangeDomain(verifying_contract=bad_checksum)
        assert exc_info.value.field == "verifying_contract"

    def test_accepts_lowercase_contract(self):
        domain = ExchangeDomain(verifying_contract=EXCHANGE_ADDRESS.lower())
        assert domain.verifying_contract == EXCHANGE_ADDRESS.lower()


class TestTypedData:
    def test_order_schema(self, order, domain):
        typed = build_typed_data(order, domain)

        assert typed["primaryType"] == "Order"
        fields = ",".join(f"{f['type']} {f['name']}" for f in typed["types"]["Order"])
        assert f"Order({fields})" == ORDER_STRUCTURE_HASH

    def test_message_values_are_integers(self, order, domain):
        message = build_typed_data(order, domain)["message"]
        assert message["tokenId"] == int(TEST_TOKEN_ID)
        assert message["salt"] == 1700000000400
        assert message["side"] == 1
        assert message["signatureType"] == 2

    def test_digest_matches_manual_encoding(self, order, domain):
        domain_type = "EIP712Domain(string name,string version,uint256 chainId,address verifyingContract)"
        domain_separator = keccak(
            encode(
                ["bytes32", "bytes32", "bytes32", "uint256", "address"],
                [
                    keccak(text=domain_type),
                    keccak(text="OPINION CTF Exchange"),
                    keccak(text="1"),
                    56,
                    EXCHANGE_ADDRESS.lower(),
                ],
            )
        )
        struct_hash = keccak(
            encode(
                [
                    "bytes32", "uint256", "address", "address", "address", "uint256",
                    "uint256", "uint256", "uint256", "uint256", "uint256", "uint8", "uint8",
                ],
                [
                    keccak(text=ORDER_STRUCTURE_HASH),
                    int(order.salt),
                    order.maker,
                    order.signer,
                    order.taker,
                    int(order.token_id),
                    int(order.maker_amount),
                    int(order.taker_amount),
                    int(order.expiration),
                    int(order.nonce),
                    int(order.fee_rate_bps),
                    order.side,
                    order.signature_type,
                ],
            )
        )

        signable = encode_typed_data(full_message=build_typed_data(order, domain))

        assert signable.header == domain_separator
        assert signable.body == struct_hash


class TestOrderSigner:
    def test_signature_format(self, order, order_signer, domain):
        signed = order_signer.sign(order, domain)

        assert signed.signature.startswith("0x")
        assert len(signed.signature) == 132
        assert signed.signature[-2:] in ("1b", "1c")

    def test_signature_recovers_signer(self, order, order_signer, domain, test_account):
        signed = order_signer.sign(order, domain)

        signable = encode_typed_data(full_message=build_typed_data(order, domain))
        recovered = Account.recover_message(signable, signature=signed.signature)

        assert recovered == test_account.address
        assert recover_order_signer(signed, domain) == test_account.address

    def test_signed_order_keeps_order_fields(self, order, order_signer, domain):
        signed = order_signer.sign(order, domain)
        assert signed.order == order
        assert signed.to_dict()["signature"] == signed.signature
        assert signed.to_dict()["tokenId"] == TEST_TOKEN_ID

    def test_signing_is_deterministic(self, order, order_signer, domain):
        assert order_signer.sign(order, domain).signature == order_signer.sign(order, domain).signature

    def test_different_salt_different_signature(self, order, order_signer, domain):
        other = replace(order, salt="1700000000401")
        assert order_signer.sign(order, domain).signature != order_signer.sign(other, domain).signature

    def test_domain_is_part_of_digest(self, order, order_signer, domain):
        other_chain = ExchangeDomain(chain_id=97)
        assert order_signer.sign(order, domain).signature != order_signer.sign(order, other_chain).signature

    def test_key_without_prefix(self, order, domain):
        signer = OrderSigner(TEST_PRIVATE_KEY[2:])
        assert signer.sign(order, domain).signature == sign_order(TEST_PRIVATE_KEY, order, domain).signature

    def test_cannot_resign(self, order, order_signer, domain):
        signed = order_signer.sign(order, domain)
        with pytest.raises(SigningError, match="already signed"):
            order_signer.sign(signed, domain)

    def test_rejects_foreign_signer(self, order, domain):
        other = OrderSigner("0x" + "3" * 64)
        with pytest.raises(SigningError, match="does not match"):
            other.sign(order, domain)

    def test_invalid_key(self):
        with pytest.raises(SigningError):
            OrderSigner("0x1234")

    @pytest.mark.parametrize("key", [None, 1234, b"\x11" * 32])
    def test_non_string_key(self, key):
        with pytest.raises(SigningError, match="Invalid private key"):
            OrderSigner(key)

    def test_malformed_order_wraps_cause(self, order, order_signer, domain):
        broken = replace(order, token_id="not-a-number")
        with pytest.raises(SigningError) as exc_info:
            order_signer.sign(broken, domain)
        assert exc_info.value.__cause__ is not None


class TestGnosisSafeEncoding:
    def test_packs_signer_and_signature(self):
        signer = "0xAbCdEf0000000000000000000000000000000001"
        signature = "0x" + "ab" * 65

        packed = encode_gnosis_safe_signature(signer, signature)

        assert packed == "0x" + signer[2:].lower() + "ab" * 65
        assert len(packed) == 2 + 40 + 130

    def test_accepts_unprefixed_input(self):
        assert encode_gnosis_safe_signature("ab" * 20, "cd" * 65) == "0x" + "ab" * 20 + "cd" * 65
