"""Order builder for Opinion Trade."""

import threading
import time
from typing import Callable, Optional, Union

import structlog

from opinion_trade.amount_calculator import AmountCalculator
from opinion_trade.constants import ZERO_ADDRESS
from opinion_trade.fixed_point import DecimalLike
from opinion_trade.signer import ExchangeDomain, OrderSigner
from opinion_trade.types import (
    Order,
    OrderOptions,
    OrderSide,
    SignatureType,
    SignedOrder,
    normalize_address,
    require_uint_text,
)

log = structlog.get_logger(__name__)

Clock = Callable[[], float]
SaltGenerator = Callable[[], str]


def generate_salt(clock: Clock = time.time) -> str:
    """Return the current time in milliseconds as decimal text."""
    return str(int(clock() * 1000))


class MonotonicSaltGenerator:
    """
    Millisecond salts that never repeat within a process.

    If two calls land in the same millisecond the second salt is bumped past
    the previous one, so concurrent signers cannot collide.
    """

    def __init__(self, clock: Clock = time.time):
        self._clock = clock
        self._lock = threading.Lock()
        self._last = -1

    def __call__(self) -> str:
        with self._lock:
            salt = max(int(self._clock() * 1000), self._last + 1)
            self._last = salt
        return str(salt)


def build_order(
    maker: str,
    signer: str,
    token_id: str,
    maker_amount: str,
    taker_amount: str,
    side: Union[OrderSide, int, str],
    expiration: str = "0",
    fee_rate_bps: str = "0",
    salt_generator: SaltGenerator = generate_salt,
) -> Order:
    """
    Assemble the canonical order record.

    The taker is always the zero address (anyone may fill), the nonce is
    always "0" and the signature type is always POLY_GNOSIS_SAFE: the signer
    is an owner of the maker Safe.

    Args:
        maker: Maker address (Gnosis Safe)
        signer: Signer address (Safe owner)
        token_id: Outcome token ID
        maker_amount: Base units the maker provides
        taker_amount: Base units the maker receives
        side: BUY or SELL
        expiration: Unix seconds, "0" for no expiration
        fee_rate_bps: Fee rate in basis points
        salt_generator: Source of the uniqueness salt

    Returns:
        Unsigned order
    """
    return Order(
        salt=salt_generator(),
        maker=normalize_address(maker, "maker"),
        signer=normalize_address(signer, "signer"),
        taker=ZERO_ADDRESS,
        token_id=require_uint_text("token_id", token_id),
        maker_amount=require_uint_text("maker_amount", maker_amount),
        taker_amount=require_uint_text("taker_amount", taker_amount),
        expiration=require_uint_text("expiration", expiration),
        nonce="0",
        fee_rate_bps=require_uint_text("fee_rate_bps", fee_rate_bps),
        side=int(OrderSide.parse(side)),
        signature_type=int(SignatureType.POLY_GNOSIS_SAFE),
    )


def build_order_params(
    maker: str,
    signer: str,
    token_id: str,
    limit_price: DecimalLike,
    shares: DecimalLike,
    side: Union[OrderSide, int, str],
    options: Optional[OrderOptions] = None,
    fee_rate_bps: str = "0",
    salt_generator: SaltGenerator = generate_salt,
) -> Order:
    """
    Validate the user inputs, calculate amounts and assemble an unsigned order.

    Args:
        maker: Maker address (Gnosis Safe)
        signer: Signer address (Safe owner)
        token_id: Outcome token ID
        limit_price: Limit price (0-100)
        shares: Number of shares
        side: BUY or SELL
        options: Order options
        fee_rate_bps: Fee rate used when `options` leaves it unset
        salt_generator: Source of the uniqueness salt

    Raises:
        ValidationError: If any input is malformed or out of range
        FixedPointError: If an amount cannot be represented in base units
    """
    options = options or OrderOptions()
    order_side = OrderSide.parse(side)

    amounts = AmountCalculator().calculate_amounts(
        side=order_side,
        shares=shares,
        limit_price=limit_price,
        volume_mode=options.volume_mode,
        buy_input_value=options.buy_input_value,
        is_stable_collateral=options.is_stable_collateral,
    )

    order = build_order(
        maker=maker,
        signer=signer,
        token_id=token_id,
        maker_amount=amounts.maker_amount,
        taker_amount=amounts.taker_amount,
        side=order_side,
        expiration=options.expiration,
        fee_rate_bps=(
            options.fee_rate_bps if options.fee_rate_bps is not None else fee_rate_bps
        ),
        salt_generator=salt_generator,
    )
    log.debug(
        "order_built",
        salt=order.salt,
        side=order_side.name,
        token_id=order.token_id,
        maker_amount=order.maker_amount,
        taker_amount=order.taker_amount,
    )
    return order


def build_signed_order(
    order_signer: OrderSigner,
    domain: ExchangeDomain,
    maker: str,
    token_id: str,
    limit_price: DecimalLike,
    shares: DecimalLike,
    side: Union[OrderSide, int, str],
    options: Optional[OrderOptions] = None,
    fee_rate_bps: str = "0",
    salt_generator: SaltGenerator = generate_salt,
) -> SignedOrder:
    """
    Calculate amounts, assemble and sign an order.

    Raises:
        ValidationError: If any input is malformed or out of range
        FixedPointError: If an amount cannot be represented in base units
        SigningError: If signing fails
    """
    order = build_order_params(
        maker=maker,
        signer=order_signer.address,
        token_id=token_id,
        limit_price=limit_price,
        shares=shares,
        side=side,
        options=options,
        fee_rate_bps=fee_rate_bps,
        salt_generator=salt_generator,
    )
    return order_signer.sign(order, domain)


class OrderBuilder:
    """Builder for creating and signing orders for one maker Safe."""

    def __init__(
        self,
        order_signer: OrderSigner,
        maker: str,
        domain: ExchangeDomain,
        salt_generator: Optional[SaltGenerator] = None,
        fee_rate_bps: Union[str, int] = "0",
    ):
        """
        Initialize order builder.

        Args:
            order_signer: Signer holding the Safe owner's key
            maker: Maker address (Gnosis Safe)
            domain: EIP-712 domain of the exchange
            salt_generator: Salt source (default: process-wide monotonic salts)
            fee_rate_bps: Default fee rate, overridden per order by OrderOptions
        """
        self.order_signer = order_signer
        self.maker = normalize_address(maker, "maker")
        self.domain = domain
        self.salt_generator = salt_generator or MonotonicSaltGenerator()
        self.fee_rate_bps = require_uint_text("fee_rate_bps", fee_rate_bps)

    def build_and_sign_order(
        self,
        token_id: str,
        limit_price: DecimalLike,
        shares: DecimalLike,
        side: Union[OrderSide, int, str],
        options: Optional[OrderOptions] = None,
    ) -> SignedOrder:
        """Build and sign an order for this builder's maker."""
        return build_signed_order(
            order_signer=self.order_signer,
            domain=self.domain,
            maker=self.maker,
            token_id=token_id,
            limit_price=limit_price,
            shares=shares,
            side=side,
            options=options,
            fee_rate_bps=self.fee_rate_bps,
            salt_generator=self.salt_generator,
        )
