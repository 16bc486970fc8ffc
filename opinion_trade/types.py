"""Type definitions for Opinion Trade."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional, Union

from eth_utils import is_address, is_checksum_address, is_checksum_formatted_address

from opinion_trade.errors import ValidationError


class OrderSide(IntEnum):
    """Order side, encoded as uint8 in the signed order."""

    BUY = 0
    SELL = 1

    @classmethod
    def parse(cls, value: Union["OrderSide", int, str]) -> "OrderSide":
        """Accept an OrderSide, its integer code, or its name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValidationError(
                    "side", f"{value!r}. Must be BUY or SELL"
                ) from None
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        raise ValidationError(
            "side", f"{value!r}. Must be {cls.BUY.value} (BUY) or {cls.SELL.value} (SELL)"
        )


class VolumeMode(str, Enum):
    """How the order size is expressed by the user."""

    SHARES = "Shares"
    AMOUNT = "Amount"


class SignatureType(IntEnum):
    """Signature scheme variant tag."""

    EOA = 0
    POLY_PROXY = 1
    POLY_GNOSIS_SAFE = 2


class TradingMethod(IntEnum):
    """Trading method code used by the order API."""

    MARKET = 1
    LIMIT = 2


class Position(str, Enum):
    """Outcome token of a binary market."""

    YES = "YES"
    NO = "NO"


class OrderQueryType(IntEnum):
    """Order history filter."""

    OPEN = 1
    CLOSED = 2


def require_uint_text(name: str, value: str) -> str:
    text = str(value).strip()
    if not re.fullmatch(r"[0-9]+", text):
        raise ValidationError(name, f"{value!r}. Must be a non-negative integer")
    return text


def normalize_address(address: str, field: str = "address") -> str:
    """
    Validate a 20-byte hex address and return it lower-cased.

    Mixed-case input must carry a valid EIP-55 checksum.
    """
    if (
        not isinstance(address, str)
        or not is_address(address)
        or (is_checksum_formatted_address(address) and not is_checksum_address(address))
    ):
        raise ValidationError(field, f"{address!r} is not a valid address")
    return address.lower()


@dataclass(frozen=True)
class OrderOptions:
    """
    Optional order settings.

    Args:
        volume_mode: Whether `shares` or `buy_input_value` sizes the currency leg
        buy_input_value: Currency amount, required when volume_mode is AMOUNT
        is_stable_collateral: Whether the collateral is the stable reference asset
        expiration: Unix seconds after which the order is invalid ("0" = never)
        fee_rate_bps: Fee in basis points (None = the order builder's default)
        safe_rate: Safe rate forwarded to the order API
    """

    volume_mode: VolumeMode = VolumeMode.SHARES
    buy_input_value: Optional[str] = None
    is_stable_collateral: bool = True
    expiration: str = "0"
    fee_rate_bps: Optional[str] = None
    safe_rate: str = "0"

    def __post_init__(self) -> None:
        try:
            mode = VolumeMode(self.volume_mode)
        except ValueError:
            raise ValidationError(
                "volume_mode", f"{self.volume_mode!r}. Must be 'Shares' or 'Amount'"
            ) from None
        object.__setattr__(self, "volume_mode", mode)
        object.__setattr__(
            self, "expiration", require_uint_text("expiration", self.expiration)
        )
        if self.fee_rate_bps is not None:
            object.__setattr__(
                self, "fee_rate_bps", require_uint_text("fee_rate_bps", self.fee_rate_bps)
            )
        if self.buy_input_value is not None:
            object.__setattr__(self, "buy_input_value", str(self.buy_input_value).strip())
        object.__setattr__(self, "safe_rate", str(self.safe_rate))


@dataclass(frozen=True)
class Order:
    """Canonical signable order. Integer fields are kept as decimal text."""

    salt: str
    maker: str
    signer: str
    taker: str
    token_id: str
    maker_amount: str
    taker_amount: str
    expiration: str
    nonce: str
    fee_rate_bps: str
    side: int
    signature_type: int

    def to_message(self) -> dict[str, Any]:
        """Convert to the EIP-712 message with integer-typed values."""
        return {
            "salt": int(self.salt),
            "maker": self.maker,
            "signer": self.signer,
            "taker": self.taker,
            "tokenId": int(self.token_id),
            "makerAmount": int(self.maker_amount),
            "takerAmount": int(self.taker_amount),
            "expiration": int(self.expiration),
            "nonce": int(self.nonce),
            "feeRateBps": int(self.fee_rate_bps),
            "side": int(self.side),
            "signatureType": int(self.signature_type),
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire form."""
        return {
            "salt": self.salt,
            "maker": self.maker,
            "signer": self.signer,
            "taker": self.taker,
            "tokenId": self.token_id,
            "makerAmount": self.maker_amount,
            "takerAmount": self.taker_amount,
            "expiration": self.expiration,
            "nonce": self.nonce,
            "feeRateBps": self.fee_rate_bps,
            "side": self.side,  # Keep as int (uint8)
            "signatureType": self.signature_type,  # Keep as int
        }


@dataclass(frozen=True)
class SignedOrder(Order):
    """Order plus its raw 65-byte EIP-712 signature (0x-prefixed hex)."""

    signature: str

    @property
    def order(self) -> Order:
        """The unsigned order this signature covers."""
        values = asdict(self)
        values.pop("signature")
        return Order(**values)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["signature"] = self.signature
        return data


@dataclass(frozen=True)
class ApiPayload:
    """Wire-ready order submission body."""

    topic_id: int
    contract_address: str
    price: str
    trading_method: int
    salt: str
    maker: str
    signer: str
    taker: str
    token_id: str
    maker_amount: str
    taker_amount: str
    expiration: str
    nonce: str
    fee_rate_bps: str
    side: str
    signature_type: str
    signature: str
    timestamp: int
    sign: str
    safe_rate: str
    order_exp_time: str
    currency_address: str
    chain_id: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON body expected by the order API."""
        return {
            "topicId": self.topic_id,
            "contractAddress": self.contract_address,
            "price": self.price,
            "tradingMethod": self.trading_method,
            "salt": self.salt,
            "maker": self.maker,
            "signer": self.signer,
            "taker": self.taker,
            "tokenId": self.token_id,
            "makerAmount": self.maker_amount,
            "takerAmount": self.taker_amount,
            "expiration": self.expiration,
            "nonce": self.nonce,
            "feeRateBps": self.fee_rate_bps,
            "side": self.side,
            "signatureType": self.signature_type,
            "signature": self.signature,
            "timestamp": self.timestamp,
            "sign": self.sign,
            "safeRate": self.safe_rate,
            "orderExpTime": self.order_exp_time,
            "currencyAddress": self.currency_address,
            "chainId": self.chain_id,
        }


@dataclass
class TopicInfo:
    """Market (topic) metadata."""

    topic_id: str
    title: Optional[str]
    yes_token: Optional[str]
    no_token: Optional[str]
    status: Optional[Any] = None
    chain_id: Optional[Any] = None
    question_id: Optional[str] = None
    yes_price: Optional[str] = None
    no_price: Optional[str] = None
    volume: Optional[str] = None
    total_price: Optional[str] = None
    cutoff_time: Optional[Any] = None
    raw: dict[str, Any] = field(default_factory=dict)

    def token_for(self, position: Union[Position, str]) -> Optional[str]:
        """Return the token ID for YES or NO."""
        return self.yes_token if Position(position) == Position.YES else self.no_token

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TopicInfo":
        return cls(**data)


@dataclass
class OrderPage:
    """One page of order history."""

    orders: list[dict[str, Any]]
    total: int
