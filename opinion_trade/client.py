"""Main client for Opinion Trade."""

from typing import Any, Optional, Union

import structlog

from opinion_trade.api import ApiClient
from opinion_trade.constants import OpinionConfig, get_config_with_env_overrides
from opinion_trade.fixed_point import DecimalLike
from opinion_trade.order_builder import OrderBuilder
from opinion_trade.payload import build_api_payload
from opinion_trade.signer import ExchangeDomain, OrderSigner
from opinion_trade.topics import TopicCache
from opinion_trade.types import (
    ApiPayload,
    OrderOptions,
    OrderPage,
    OrderQueryType,
    OrderSide,
    Position,
    SignedOrder,
    TopicInfo,
    normalize_address,
)

log = structlog.get_logger(__name__)


class OpinionClient:
    """Client for placing limit orders on Opinion Trade prediction markets."""

    def __init__(
        self,
        private_key: str,
        maker_address: str,
        authorization_token: Optional[str] = None,
        config: Optional[OpinionConfig] = None,
        api: Optional[ApiClient] = None,
        topics: Optional[TopicCache] = None,
    ):
        """
        Initialize Opinion Trade client.

        Args:
            private_key: Private key of the signer (owner of the Gnosis Safe)
            maker_address: Maker address (Gnosis Safe)
            authorization_token: Bearer token for the order API
            config: Deployment config (default: environment-resolved)
            api: Order API client (default: built from config)
            topics: Topic cache (default: built from config)
        """
        self.config = config or get_config_with_env_overrides()
        self.domain = ExchangeDomain.from_config(self.config)
        self.collateral_token_address = self.config.collateral_token_address.lower()

        self.api = api or ApiClient(
            api_url=self.config.api_url,
            topic_api_url=self.config.topic_api_url,
            authorization_token=authorization_token,
            timeout=self.config.request_timeout,
            verify_tls=self.config.verify_tls,
        )
        self.topics = topics or TopicCache(
            api=self.api,
            cache_dir=self.config.cache_dir,
            ttl_seconds=self.config.cache_ttl_seconds,
        )

        self.order_builder = OrderBuilder(
            order_signer=OrderSigner(private_key),
            maker=maker_address,
            domain=self.domain,
            fee_rate_bps=self.config.fee_rate_bps,
        )

    @property
    def signer_address(self) -> str:
        """Get signer (Safe owner) address."""
        return self.order_builder.order_signer.address

    @property
    def maker_address(self) -> str:
        """Get maker (Safe) address."""
        return self.order_builder.maker

    def build_signed_order(
        self,
        token_id: str,
        limit_price: DecimalLike,
        shares: DecimalLike,
        side: Union[OrderSide, int, str],
        options: Optional[OrderOptions] = None,
    ) -> SignedOrder:
        """Build and sign an order for the client's maker."""
        return self.order_builder.build_and_sign_order(
            token_id=token_id,
            limit_price=limit_price,
            shares=shares,
            side=side,
            options=options,
        )

    def build_api_payload(
        self,
        signed_order: SignedOrder,
        topic_id: Union[str, int],
        limit_price: DecimalLike,
        options: Optional[OrderOptions] = None,
    ) -> ApiPayload:
        """Format a signed order for submission using the client's config."""
        return build_api_payload(
            signed_order=signed_order,
            market_id=topic_id,
            limit_price=limit_price,
            collateral_address=self.collateral_token_address,
            chain_id=self.config.chain_id,
            options=options,
        )

    def submit_order(self, payload: ApiPayload) -> dict[str, Any]:
        """Submit a formatted order."""
        return self.api.submit_order(payload)

    def create_limit_order(
        self,
        topic_id: Union[str, int],
        token_id: str,
        limit_price: DecimalLike,
        shares: DecimalLike,
        side: Union[OrderSide, int, str],
        options: Optional[OrderOptions] = None,
    ) -> dict[str, Any]:
        """
        Create, sign, and submit a limit order in one step.

        Args:
            topic_id: Topic ID of the prediction market
            token_id: Token ID (YES or NO position)
            limit_price: Limit price (0-100)
            shares: Number of shares
            side: BUY or SELL
            options: Order options

        Returns:
            API response data

        Raises:
            ValidationError: If any input is invalid
            SigningError: If signing fails
            ApiError: If submission fails
        """
        options = options or OrderOptions()
        order_side = OrderSide.parse(side)
        log.info(
            "limit_order_creating",
            topic_id=str(topic_id),
            token_id=str(token_id),
            limit_price=str(limit_price),
            shares=str(shares),
            side=order_side.name,
            volume_mode=options.volume_mode.value,
        )

        signed_order = self.build_signed_order(
            token_id=token_id,
            limit_price=limit_price,
            shares=shares,
            side=order_side,
            options=options,
        )
        payload = self.build_api_payload(signed_order, topic_id, limit_price, options)
        log.debug(
            "api_payload_built",
            topic_id=payload.topic_id,
            price=payload.price,
            side=payload.side,
            maker_amount=payload.maker_amount,
            taker_amount=payload.taker_amount,
        )
        return self.submit_order(payload)

    def buy(self, topic_id, token_id, limit_price, shares, options=None) -> dict[str, Any]:
        """Create a BUY limit order."""
        return self.create_limit_order(
            topic_id, token_id, limit_price, shares, OrderSide.BUY, options
        )

    def sell(self, topic_id, token_id, limit_price, shares, options=None) -> dict[str, Any]:
        """Create a SELL limit order."""
        return self.create_limit_order(
            topic_id, token_id, limit_price, shares, OrderSide.SELL, options
        )

    def get_topic_info(
        self, topic_id: Union[str, int], force_refresh: bool = False
    ) -> TopicInfo:
        """Get topic information (with caching)."""
        return self.topics.get_topic_info(topic_id, force_refresh=force_refresh)

    def create_order_by_topic(
        self,
        topic_id: Union[str, int],
        position: Union[Position, str],
        limit_price: DecimalLike,
        shares: DecimalLike,
        side: Union[OrderSide, int, str],
        options: Optional[OrderOptions] = None,
    ) -> dict[str, Any]:
        """
        Create a limit order, resolving the token ID from the topic.

        Args:
            topic_id: Topic ID
            position: "YES" or "NO"
            limit_price: Limit price (0-100)
            shares: Number of shares
            side: BUY or SELL
            options: Order options

        Raises:
            TopicLookupError: If the position's token can't be resolved
        """
        token_id = self.topics.get_token_id(topic_id, position)
        log.info(
            "topic_token_resolved",
            topic_id=str(topic_id),
            position=(
                position.value
                if isinstance(position, Position)
                else str(position).strip().upper()
            ),
            token_id=token_id,
        )
        return self.create_limit_order(
            topic_id, token_id, limit_price, shares, side, options
        )

    def buy_by_topic(self, topic_id, position, limit_price, shares, options=None) -> dict[str, Any]:
        """Buy by topic (auto-fetch token IDs)."""
        return self.create_order_by_topic(
            topic_id, position, limit_price, shares, OrderSide.BUY, options
        )

    def sell_by_topic(self, topic_id, position, limit_price, shares, options=None) -> dict[str, Any]:
        """Sell by topic (auto-fetch token IDs)."""
        return self.create_order_by_topic(
            topic_id, position, limit_price, shares, OrderSide.SELL, options
        )

    def clear_topic_cache(self, topic_id: Optional[Union[str, int]] = None) -> None:
        """Clear one topic's cache entry, or all of them if topic_id is None."""
        if topic_id is not None:
            self.topics.clear_cache(topic_id)
        else:
            self.topics.clear_all_cache()

    def list_cached_topics(self) -> list[dict[str, Any]]:
        """List all cached topics."""
        return self.topics.list_cached_topics()

    def query_orders(
        self,
        query_type: Union[OrderQueryType, int],
        wallet_address: Optional[str] = None,
        topic_id: Optional[Union[str, int]] = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPage:
        """Query orders; the wallet defaults to the maker address."""
        wallet = (
            normalize_address(wallet_address, "wallet_address")
            if wallet_address
            else self.maker_address
        )
        return self.api.query_orders(
            wallet_address=wallet,
            query_type=query_type,
            topic_id=topic_id,
            page=page,
            limit=limit,
        )

    def get_open_orders(self, wallet_address=None, topic_id=None, page=1, limit=10) -> OrderPage:
        """Get open orders."""
        return self.query_orders(OrderQueryType.OPEN, wallet_address, topic_id, page, limit)

    def get_closed_orders(self, wallet_address=None, topic_id=None, page=1, limit=10) -> OrderPage:
        """Get filled or cancelled orders."""
        return self.query_orders(OrderQueryType.CLOSED, wallet_address, topic_id, page, limit)
