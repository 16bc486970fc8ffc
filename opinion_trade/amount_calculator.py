"""Amount calculator for order placement."""

from dataclasses import dataclass
from typing import Optional, Union

from opinion_trade.constants import NON_STABLE_PRICE_MULTIPLIER
from opinion_trade.errors import FixedPointError, ValidationError
from opinion_trade.fixed_point import (
    DecimalLike,
    amount_from_shares_and_price,
    format_scaled,
    scale_price,
    scale_to_integer,
    to_base_units,
)
from opinion_trade.types import OrderSide, VolumeMode


@dataclass(frozen=True)
class OrderAmounts:
    """Structured output for order amounts"""

    maker_amount: str
    taker_amount: str
    amount: str

    def __repr__(self):
        return (
            f"OrderAmounts(maker_amount={self.maker_amount}, "
            f"taker_amount={self.taker_amount}, "
            f"amount={self.amount})"
        )


def _parse_field(name: str, value: Optional[DecimalLike]) -> tuple[int, int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(name, "value is required")
    try:
        return scale_to_integer(value)
    except FixedPointError as e:
        raise ValidationError(name, str(e)) from e


def validate_limit_price(limit_price: DecimalLike) -> None:
    """Check that a 0-100 limit price is numeric and in range."""
    value, places = _parse_field("limit_price", limit_price)
    if value > 100 * 10**places:
        raise ValidationError(
            "limit_price", f"{limit_price!r}. Must be between 0 and 100"
        )


class AmountCalculator:
    """Calculates makerAmount and takerAmount in base units for order placement"""

    PRICE_MULTIPLIER = NON_STABLE_PRICE_MULTIPLIER

    def calculate_amounts(
        self,
        side: Union[OrderSide, int, str],
        shares: DecimalLike,
        limit_price: DecimalLike,
        volume_mode: VolumeMode = VolumeMode.SHARES,
        buy_input_value: Optional[DecimalLike] = None,
        is_stable_collateral: bool = True,
    ) -> OrderAmounts:
        """
        Calculates maker/taker amounts in base units.

        A buyer offers currency and receives shares; a seller offers shares
        and receives currency.

        :param side: BUY or SELL
        :param shares: Number of shares (e.g. "10.5")
        :param limit_price: Limit price on the 0-100 scale (e.g. "99.1")
        :param volume_mode: SHARES derives the currency amount from shares and
            price, AMOUNT takes it from buy_input_value as-is
        :param buy_input_value: Currency amount, required for AMOUNT
        :param is_stable_collateral: False if the collateral quotes price on
            the non-stable scale
        :return: OrderAmounts struct
        """
        order_side = OrderSide.parse(side)
        validate_limit_price(limit_price)

        try:
            mode = VolumeMode(volume_mode)
        except ValueError:
            raise ValidationError(
                "volume_mode", f"{volume_mode!r}. Must be 'Shares' or 'Amount'"
            ) from None

        shares_value, _ = _parse_field("shares", shares)

        price = limit_price
        if not is_stable_collateral:
            price = scale_price(limit_price, self.PRICE_MULTIPLIER)

        if mode == VolumeMode.SHARES:
            if shares_value <= 0:
                raise ValidationError("shares", f"{shares!r}. Must be greater than 0")
            amount = amount_from_shares_and_price(shares, price)
        else:
            value, places = _parse_field("buy_input_value", buy_input_value)
            amount = format_scaled(value, places, trim=False)

        if order_side == OrderSide.BUY:
            maker_amount = to_base_units(amount)
            taker_amount = to_base_units(shares)
        else:
            maker_amount = to_base_units(shares)
            taker_amount = to_base_units(amount)

        return OrderAmounts(
            maker_amount=maker_amount,
            taker_amount=taker_amount,
            amount=amount,
        )


def calculate_order_amounts(
    side: Union[OrderSide, int, str],
    shares: DecimalLike,
    limit_price: DecimalLike,
    volume_mode: VolumeMode = VolumeMode.SHARES,
    buy_input_value: Optional[DecimalLike] = None,
    is_stable_collateral: bool = True,
) -> OrderAmounts:
    """Shortcut for `AmountCalculator().calculate_amounts(...)`."""
    return AmountCalculator().calculate_amounts(
        side=side,
        shares=shares,
        limit_price=limit_price,
        volume_mode=volume_mode,
        buy_input_value=buy_input_value,
        is_stable_collateral=is_stable_collateral,
    )
