"""Order API payload formatting."""

import time
from typing import Callable, Optional, Union

from opinion_trade.fixed_point import DecimalLike, price_to_market_fraction
from opinion_trade.types import (
    ApiPayload,
    OrderOptions,
    SignedOrder,
    TradingMethod,
    require_uint_text,
)


def build_api_payload(
    signed_order: SignedOrder,
    market_id: Union[str, int],
    limit_price: DecimalLike,
    collateral_address: str,
    chain_id: int,
    options: Optional[OrderOptions] = None,
    clock: Callable[[], float] = time.time,
) -> ApiPayload:
    """
    Map a signed order and its market context to the order API body.

    Args:
        signed_order: Signed order
        market_id: Topic ID of the prediction market
        limit_price: Limit price on the 0-100 scale
        collateral_address: Collateral token address
        chain_id: Chain ID
        options: Order options (is_stable_collateral, safe_rate)
        clock: Time source for the submission timestamp

    Returns:
        ApiPayload

    Raises:
        ValidationError: If the market ID is not a non-negative integer
    """
    options = options or OrderOptions()
    topic_id = int(require_uint_text("market_id", market_id))

    # Stable collateral is quoted on the API as a 0-1 fraction
    if options.is_stable_collateral:
        price = price_to_market_fraction(limit_price)
    else:
        price = str(limit_price)

    return ApiPayload(
        topic_id=topic_id,
        contract_address="",
        price=price,
        trading_method=int(TradingMethod.LIMIT),
        salt=str(signed_order.salt),
        maker=signed_order.maker,
        signer=signed_order.signer,
        taker=signed_order.taker,
        token_id=str(signed_order.token_id),
        maker_amount=str(signed_order.maker_amount),
        taker_amount=str(signed_order.taker_amount),
        expiration=str(signed_order.expiration),
        nonce=str(signed_order.nonce),
        fee_rate_bps=str(signed_order.fee_rate_bps),
        side=str(int(signed_order.side)),
        signature_type=str(int(signed_order.signature_type)),
        signature=signed_order.signature,
        timestamp=int(round(clock())),
        sign=signed_order.signature,
        safe_rate=options.safe_rate,
        order_exp_time=str(signed_order.expiration),
        currency_address=collateral_address,
        chain_id=int(chain_id),
    )
