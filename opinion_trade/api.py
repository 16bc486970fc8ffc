"""HTTP client for the Opinion Trade order API."""

import json
from typing import Any, Optional, Union

import requests
import structlog

from opinion_trade.constants import QUERY_ORDERS_PATH, SUBMIT_ORDER_PATH
from opinion_trade.errors import ApiError, ValidationError
from opinion_trade.types import ApiPayload, OrderPage, OrderQueryType

log = structlog.get_logger(__name__)


class ApiClient:
    """Client for making order API requests."""

    def __init__(
        self,
        api_url: str,
        topic_api_url: Optional[str] = None,
        authorization_token: Optional[str] = None,
        timeout: int = 30,
        verify_tls: bool = True,
    ):
        """
        Initialize API client.

        Args:
            api_url: Order API base URL
            topic_api_url: Topic API base URL (default: {api_url}/v2/topic)
            authorization_token: Bearer token for authenticated endpoints
            timeout: Request timeout in seconds
            verify_tls: Verify TLS certificates
        """
        self.api_url = api_url.rstrip("/")
        self.topic_api_url = (topic_api_url or f"{self.api_url}/v2/topic").rstrip("/")
        self.authorization_token = authorization_token
        self.timeout = timeout
        self.verify_tls = verify_tls

    def _get_headers(self) -> dict[str, str]:
        """Get headers for requests, including the bearer token if set."""
        headers = {"Content-Type": "application/json"}
        if self.authorization_token:
            token = self.authorization_token
            if not token.startswith("Bearer "):
                token = f"Bearer {token}"
            headers["Authorization"] = token
        return headers

    def _request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
        body: Optional[dict[str, Any]] = None,
    ) -> Any:
        try:
            if method == "POST":
                response = requests.post(
                    url,
                    json=body,
                    headers=self._get_headers(),
                    timeout=self.timeout,
                    verify=self.verify_tls,
                )
            else:
                response = requests.get(
                    url,
                    params=params,
                    headers=self._get_headers(),
                    timeout=self.timeout,
                    verify=self.verify_tls,
                )
        except requests.exceptions.RequestException as e:
            raise ApiError(f"Request failed: {e}") from e

        if not response.ok:
            raise ApiError(f"HTTP {response.status_code}: {response.text}")

        try:
            return response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise ApiError(f"Failed to parse response: {e}") from e

    @staticmethod
    def _check_errno(result: Any, required: bool) -> dict[str, Any]:
        if not isinstance(result, dict):
            raise ApiError("Unexpected response shape: expected a JSON object")
        errno = result.get("errno")
        if errno is None and not required:
            return result
        if errno != 0:
            errmsg = result.get("errmsg") or "Unknown error"
            raise ApiError(
                f"API error (errno: {errno}): {errmsg}", errno=errno, errmsg=errmsg
            )
        return result

    def submit_order(self, payload: Union[ApiPayload, dict[str, Any]]) -> dict[str, Any]:
        """
        Submit a signed order.

        Args:
            payload: Order API payload

        Returns:
            API response data

        Raises:
            ApiError: If the request fails or the API reports an error
        """
        body = payload.to_dict() if isinstance(payload, ApiPayload) else payload
        url = f"{self.api_url}{SUBMIT_ORDER_PATH}"
        if not self.authorization_token:
            log.warning("no_authorization_token", url=url)

        log.info("order_submitting", url=url, topic_id=body.get("topicId"), salt=body.get("salt"))
        result = self._check_errno(self._request("POST", url, body=body), required=True)
        log.info("order_submitted", topic_id=body.get("topicId"), salt=body.get("salt"))
        return result

    def query_orders(
        self,
        wallet_address: str,
        query_type: Union[OrderQueryType, int],
        topic_id: Optional[Union[str, int]] = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPage:
        """
        Query a wallet's order history.

        Args:
            wallet_address: Wallet address to query
            query_type: OPEN (1) or CLOSED (2)
            topic_id: Restrict to one topic (None for all topics)
            page: Page number
            limit: Items per page

        Returns:
            OrderPage with the raw order list and total count

        Raises:
            ValidationError: If wallet_address or query_type is invalid
            ApiError: If the request fails or the response can't be parsed
        """
        if not wallet_address:
            raise ValidationError("wallet_address", "value is required")
        try:
            query_type = OrderQueryType(query_type)
        except ValueError:
            raise ValidationError(
                "query_type", f"{query_type!r}. Must be 1 (OPEN) or 2 (CLOSED)"
            ) from None

        params: dict[str, Any] = {
            "page": page,
            "limit": limit,
            "walletAddress": wallet_address,
            "queryType": int(query_type),
        }
        if topic_id:
            params["topicId"] = topic_id

        url = f"{self.api_url}{QUERY_ORDERS_PATH}"
        result = self._check_errno(self._request("GET", url, params=params), required=False)

        try:
            data = result["result"]
            page_result = OrderPage(orders=list(data["list"] or []), total=int(data["total"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ApiError(f"Failed to parse orders from response: {e}") from e

        log.info(
            "orders_queried",
            total=page_result.total,
            returned=len(page_result.orders),
            query_type=query_type.name,
        )
        return page_result

    def get_topic(self, topic_id: Union[str, int]) -> dict[str, Any]:
        """
        Fetch raw topic (market) details.

        Raises:
            ApiError: If the request fails or the body is not JSON
        """
        url = f"{self.topic_api_url}/{topic_id}"
        log.debug("topic_fetching", topic_id=str(topic_id), url=url)
        result = self._request("GET", url)
        if not isinstance(result, dict):
            raise ApiError("Unexpected topic response shape: expected a JSON object")
        return result
