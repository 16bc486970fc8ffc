"""EIP-712 typed-data signing of orders."""

from dataclasses import asdict, dataclass
from typing import Any

import structlog
from eth_account import Account
from eth_account.messages import encode_typed_data
from eth_account.signers.local import LocalAccount

from opinion_trade.constants import (
    DEFAULT_CHAIN_ID,
    DOMAIN_NAME,
    DOMAIN_VERSION,
    EIP712_DOMAIN_TYPE,
    EXCHANGE_ADDRESS,
    ORDER_TYPE,
    OpinionConfig,
)
from opinion_trade.errors import SigningError
from opinion_trade.types import Order, SignedOrder, normalize_address

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ExchangeDomain:
    """EIP-712 domain separator of the exchange contract."""

    chain_id: int = DEFAULT_CHAIN_ID
    verifying_contract: str = EXCHANGE_ADDRESS
    name: str = DOMAIN_NAME
    version: str = DOMAIN_VERSION

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "verifying_contract",
            normalize_address(self.verifying_contract, "verifying_contract"),
        )
        object.__setattr__(self, "chain_id", int(self.chain_id))

    @classmethod
    def from_config(cls, config: OpinionConfig) -> "ExchangeDomain":
        return cls(chain_id=config.chain_id, verifying_contract=config.exchange_address)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }


def build_typed_data(order: Order, domain: ExchangeDomain) -> dict[str, Any]:
    """Build the full EIP-712 message for an order."""
    return {
        "types": {
            "EIP712Domain": EIP712_DOMAIN_TYPE,
            "Order": ORDER_TYPE,
        },
        "primaryType": "Order",
        "domain": domain.to_dict(),
        "message": order.to_message(),
    }


class OrderSigner:
    """
    Holds the Safe owner's key and signs orders with it.

    The key lives only inside this object; nothing else in the package keeps
    a reference to it.
    """

    def __init__(self, private_key: str):
        """
        Initialize order signer.

        Args:
            private_key: Private key (hex string with or without 0x prefix)

        Raises:
            SigningError: If the key is malformed
        """
        try:
            if not private_key.startswith("0x"):
                private_key = f"0x{private_key}"
            self._account: LocalAccount = Account.from_key(private_key)
        except (AttributeError, ValueError, TypeError) as e:
            raise SigningError("Invalid private key") from e

    @property
    def address(self) -> str:
        """Checksummed signer address."""
        return self._account.address

    @property
    def account(self) -> LocalAccount:
        return self._account

    def sign(self, order: Order, domain: ExchangeDomain) -> SignedOrder:
        """
        Sign an order.

        Returns the raw 65-byte signature (r, s, v) as 0x-prefixed hex; the
        Safe relationship is conveyed by the order's signatureType.

        Raises:
            SigningError: If the order is already signed, names a different
                signer, or signing fails
        """
        if isinstance(order, SignedOrder):
            raise SigningError(f"Order with salt {order.salt} is already signed")
        if order.signer.lower() != self.address.lower():
            raise SigningError(
                f"Order signer {order.signer} does not match key address {self.address}"
            )

        try:
            signed_message = self._account.sign_typed_data(
                full_message=build_typed_data(order, domain)
            )
        except Exception as e:
            raise SigningError(f"Failed to sign order: {e}") from e

        signature = f"0x{bytes(signed_message.signature).hex()}"
        log.info("order_signed", salt=order.salt, signer=order.signer, side=order.side)

        return SignedOrder(**asdict(order), signature=signature)


def sign_order(private_key: str, order: Order, domain: ExchangeDomain) -> SignedOrder:
    """Sign an order with a one-off signer."""
    return OrderSigner(private_key).sign(order, domain)


def recover_order_signer(signed_order: SignedOrder, domain: ExchangeDomain) -> str:
    """Recover the address that produced an order signature."""
    signable = encode_typed_data(
        full_message=build_typed_data(signed_order.order, domain)
    )
    return Account.recover_message(signable, signature=signed_order.signature)


def encode_gnosis_safe_signature(signer: str, signature: str) -> str:
    """
    Pack a signature as signer address followed by the raw signature.

    Not used for order submission: the order API takes the raw signature
    together with signatureType.
    """
    clean_signature = signature[2:] if signature.startswith("0x") else signature
    clean_signer = signer[2:] if signer.lower().startswith("0x") else signer
    return "0x" + clean_signer.lower() + clean_signature
