"""Constants for Opinion Trade.

Protocol constants (EIP-712 domain, order schema) are fixed.
Deployment settings are resolved into an `OpinionConfig`; individual fields
can be overridden via environment variables:
- `OPINION_API_URL`
- `OPINION_TOPIC_API_URL`
- `OPINION_CHAIN_ID`
- `OPINION_EXCHANGE_ADDRESS`
- `OPINION_COLLATERAL_TOKEN_ADDRESS`
- `OPINION_FEE_RATE_BPS`
- `OPINION_CACHE_DIR`
- `OPINION_REQUEST_TIMEOUT`
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path


@dataclass(frozen=True, slots=True)
class OpinionConfig:
    api_url: str
    topic_api_url: str
    chain_id: int
    exchange_address: str
    collateral_token_address: str
    fee_rate_bps: int
    request_timeout: int
    cache_dir: str
    cache_ttl_seconds: int
    verify_tls: bool = True


# -------- Deployment config --------
DEFAULT_CONFIG = OpinionConfig(
    api_url="https://proxy.opinion.trade:8443/api/bsc/api",
    topic_api_url="https://proxy.opinion.trade:8443/api/bsc/api/v2/topic",
    chain_id=56,
    exchange_address="0x5F45344126D6488025B0b84A3A8189F2487a7246",
    collateral_token_address="0x55d398326f99059fF775485246999027B3197955",  # USDT
    fee_rate_bps=0,
    request_timeout=30,
    cache_dir=str(Path.home() / ".cache" / "opinion_trade" / "topics"),
    cache_ttl_seconds=24 * 60 * 60,
)


def _parse_int_env(var_name: str) -> int | None:
    raw = os.getenv(var_name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"Invalid {var_name}: expected an integer") from e


def _parse_str_env(var_name: str) -> str | None:
    raw = os.getenv(var_name)
    if raw is None or raw == "":
        return None
    return raw


def get_config_with_env_overrides(base: OpinionConfig = DEFAULT_CONFIG) -> OpinionConfig:
    """Return `base` with `OPINION_*` overrides applied where present."""
    api_url = _parse_str_env("OPINION_API_URL")
    topic_api_url = _parse_str_env("OPINION_TOPIC_API_URL")
    chain_id = _parse_int_env("OPINION_CHAIN_ID")
    exchange_address = _parse_str_env("OPINION_EXCHANGE_ADDRESS")
    collateral_token_address = _parse_str_env("OPINION_COLLATERAL_TOKEN_ADDRESS")
    fee_rate_bps = _parse_int_env("OPINION_FEE_RATE_BPS")
    cache_dir = _parse_str_env("OPINION_CACHE_DIR")
    request_timeout = _parse_int_env("OPINION_REQUEST_TIMEOUT")

    return replace(
        base,
        api_url=api_url if api_url is not None else base.api_url,
        topic_api_url=topic_api_url if topic_api_url is not None else base.topic_api_url,
        chain_id=chain_id if chain_id is not None else base.chain_id,
        exchange_address=(
            exchange_address if exchange_address is not None else base.exchange_address
        ),
        collateral_token_address=(
            collateral_token_address
            if collateral_token_address is not None
            else base.collateral_token_address
        ),
        fee_rate_bps=fee_rate_bps if fee_rate_bps is not None else base.fee_rate_bps,
        cache_dir=cache_dir if cache_dir is not None else base.cache_dir,
        request_timeout=(
            request_timeout if request_timeout is not None else base.request_timeout
        ),
    )


# Default values
DEFAULT_CHAIN_ID = DEFAULT_CONFIG.chain_id
EXCHANGE_ADDRESS = DEFAULT_CONFIG.exchange_address
COLLATERAL_TOKEN_ADDRESS = DEFAULT_CONFIG.collateral_token_address

# Collateral and outcome shares share the same base-unit scale
COLLATERAL_TOKEN_DECIMALS = 18

# EIP-712 Domain
DOMAIN_NAME = "OPINION CTF Exchange"
DOMAIN_VERSION = "1"

# Order constants
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ORDER_STRUCTURE_HASH = "Order(uint256 salt,address maker,address signer,address taker,uint256 tokenId,uint256 makerAmount,uint256 takerAmount,uint256 expiration,uint256 nonce,uint256 feeRateBps,uint8 side,uint8 signatureType)"

EIP712_DOMAIN_TYPE = [
    {"name": "name", "type": "string"},
    {"name": "version", "type": "string"},
    {"name": "chainId", "type": "uint256"},
    {"name": "verifyingContract", "type": "address"},
]

ORDER_TYPE = [
    {"name": "salt", "type": "uint256"},
    {"name": "maker", "type": "address"},
    {"name": "signer", "type": "address"},
    {"name": "taker", "type": "address"},
    {"name": "tokenId", "type": "uint256"},
    {"name": "makerAmount", "type": "uint256"},
    {"name": "takerAmount", "type": "uint256"},
    {"name": "expiration", "type": "uint256"},
    {"name": "nonce", "type": "uint256"},
    {"name": "feeRateBps", "type": "uint256"},
    {"name": "side", "type": "uint8"},
    {"name": "signatureType", "type": "uint8"},
]

# Non-stable collateral quotes price on a scale 100x smaller
NON_STABLE_PRICE_MULTIPLIER = 100

# Wire price precision (decimal places)
MARKET_PRICE_DECIMALS = 3

# API endpoints
SUBMIT_ORDER_PATH = "/v2/order"
QUERY_ORDERS_PATH = "/v2/order"
