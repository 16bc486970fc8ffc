"""Opinion Trade - limit order signing and pricing for Opinion prediction markets."""

from opinion_trade.amount_calculator import (
    AmountCalculator,
    OrderAmounts,
    calculate_order_amounts,
)
from opinion_trade.api import ApiClient
from opinion_trade.client import OpinionClient
from opinion_trade.constants import (
    COLLATERAL_TOKEN_ADDRESS,
    DEFAULT_CONFIG,
    EXCHANGE_ADDRESS,
    OpinionConfig,
    get_config_with_env_overrides,
)
from opinion_trade.errors import (
    ApiError,
    FixedPointError,
    OpinionTradeError,
    SigningError,
    TopicLookupError,
    ValidationError,
)
from opinion_trade.fixed_point import (
    amount_from_shares_and_price,
    from_base_units,
    price_to_market_fraction,
    scale_to_integer,
    to_base_units,
)
from opinion_trade.logging_config import configure_logging
from opinion_trade.order_builder import (
    MonotonicSaltGenerator,
    OrderBuilder,
    build_order,
    build_order_params,
    build_signed_order,
    generate_salt,
)
from opinion_trade.payload import build_api_payload
from opinion_trade.signer import (
    ExchangeDomain,
    OrderSigner,
    encode_gnosis_safe_signature,
    recover_order_signer,
    sign_order,
)
from opinion_trade.topics import TopicCache
from opinion_trade.types import (
    ApiPayload,
    Order,
    OrderOptions,
    OrderPage,
    OrderQueryType,
    OrderSide,
    Position,
    SignatureType,
    SignedOrder,
    TopicInfo,
    TradingMethod,
    VolumeMode,
    normalize_address,
)

__version__ = "0.1.0"
__all__ = [
    "AmountCalculator",
    "ApiClient",
    "ApiError",
    "ApiPayload",
    "COLLATERAL_TOKEN_ADDRESS",
    "DEFAULT_CONFIG",
    "EXCHANGE_ADDRESS",
    "ExchangeDomain",
    "FixedPointError",
    "MonotonicSaltGenerator",
    "OpinionClient",
    "OpinionConfig",
    "OpinionTradeError",
    "Order",
    "OrderAmounts",
    "OrderBuilder",
    "OrderOptions",
    "OrderPage",
    "OrderQueryType",
    "OrderSide",
    "OrderSigner",
    "Position",
    "SignatureType",
    "SignedOrder",
    "SigningError",
    "TopicCache",
    "TopicInfo",
    "TopicLookupError",
    "TradingMethod",
    "ValidationError",
    "VolumeMode",
    "amount_from_shares_and_price",
    "build_api_payload",
    "build_order",
    "build_order_params",
    "build_signed_order",
    "calculate_order_amounts",
    "configure_logging",
    "encode_gnosis_safe_signature",
    "from_base_units",
    "generate_salt",
    "get_config_with_env_overrides",
    "normalize_address",
    "price_to_market_fraction",
    "recover_order_signer",
    "scale_to_integer",
    "sign_order",
    "to_base_units",
]
