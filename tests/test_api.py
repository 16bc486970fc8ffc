"""Tests for the order API transport. HTTP is stubbed; no network access."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from opinion_trade.api import ApiClient
from opinion_trade.errors import ApiError, ValidationError
from opinion_trade.types import OrderQueryType

API_URL = "https://api.example.test/api"


def _response(json_data=None, ok=True, status_code=200, text=""):
    response = MagicMock()
    response.ok = ok
    response.status_code = status_code
    response.text = text
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
    else:
        response.json.return_value = json_data
    return response


class TestSubmitOrder:
    def test_posts_payload_with_bearer_token(self):
        client = ApiClient(API_URL, authorization_token="secret")
        with patch("opinion_trade.api.requests.post") as post:
            post.return_value = _response({"errno": 0, "result": {"orderId": "abc"}})
            result = client.submit_order({"topicId": 1, "salt": "1"})

        assert result["result"]["orderId"] == "abc"
        args, kwargs = post.call_args
        assert args[0] == f"{API_URL}/v2/order"
        assert kwargs["json"] == {"topicId": 1, "salt": "1"}
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["timeout"] == 30

    def test_existing_bearer_prefix_kept(self):
        client = ApiClient(API_URL, authorization_token="Bearer secret")
        assert client._get_headers()["Authorization"] == "Bearer secret"

    def test_no_token_no_header(self):
        assert "Authorization" not in ApiClient(API_URL)._get_headers()

    def test_errno_raises(self):
        client = ApiClient(API_URL, authorization_token="t")
        with patch("opinion_trade.api.requests.post") as post:
            post.return_value = _response({"errno": 10403, "errmsg": "bad signature"})
            with pytest.raises(ApiError) as exc_info:
                client.submit_order({})

        assert exc_info.value.errno == 10403
        assert exc_info.value.errmsg == "bad signature"

    def test_missing_errno_raises(self):
        client = ApiClient(API_URL)
        with patch("opinion_trade.api.requests.post") as post:
            post.return_value = _response({"result": {}})
            with pytest.raises(ApiError):
                client.submit_order({})

    def test_http_error(self):
        client = ApiClient(API_URL)
        with patch("opinion_trade.api.requests.post") as post:
            post.return_value = _response(ok=False, status_code=502, text="bad gateway")
            with pytest.raises(ApiError, match="HTTP 502"):
                client.submit_order({})

    def test_transport_error_wrapped(self):
        client = ApiClient(API_URL)
        with patch("opinion_trade.api.requests.post") as post:
            post.side_effect = requests.exceptions.ConnectionError("refused")
            with pytest.raises(ApiError) as exc_info:
                client.submit_order({})
        assert isinstance(exc_info.value.__cause__, requests.exceptions.ConnectionError)

    def test_non_json_body(self):
        client = ApiClient(API_URL)
        with patch("opinion_trade.api.requests.post") as post:
            post.return_value = _response(ValueError("no json"))
            with pytest.raises(ApiError, match="parse"):
                client.submit_order({})


class TestQueryOrders:
    def test_query_parameters(self):
        client = ApiClient(API_URL, authorization_token="t")
        with patch("opinion_trade.api.requests.get") as get:
            get.return_value = _response(
                {"errno": 0, "result": {"list": [{"orderId": "1"}], "total": 7}}
            )
            page = client.query_orders("0xabc", OrderQueryType.OPEN, topic_id=55, page=2, limit=5)

        assert page.total == 7
        assert page.orders == [{"orderId": "1"}]
        _, kwargs = get.call_args
        assert kwargs["params"] == {
            "page": 2,
            "limit": 5,
            "walletAddress": "0xabc",
            "queryType": 1,
            "topicId": 55,
        }

    def test_topic_omitted_when_absent(self):
        client = ApiClient(API_URL)
        with patch("opinion_trade.api.requests.get") as get:
            get.return_value = _response({"result": {"list": [], "total": 0}})
            client.query_orders("0xabc", 2)
        assert "topicId" not in get.call_args.kwargs["params"]

    @pytest.mark.parametrize("query_type", [0, 3, "open"])
    def test_invalid_query_type(self, query_type):
        with pytest.raises(ValidationError) as exc_info:
            ApiClient(API_URL).query_orders("0xabc", query_type)
        assert exc_info.value.field == "query_type"

    def test_wallet_required(self):
        with pytest.raises(ValidationError):
            ApiClient(API_URL).query_orders("", OrderQueryType.OPEN)

    def test_malformed_result(self):
        client = ApiClient(API_URL)
        with patch("opinion_trade.api.requests.get") as get:
            get.return_value = _response({"errno": 0, "result": None})
            with pytest.raises(ApiError):
                client.query_orders("0xabc", OrderQueryType.CLOSED)


class TestGetTopic:
    def test_fetches_topic_url(self):
        client = ApiClient(API_URL)
        with patch("opinion_trade.api.requests.get") as get:
            get.return_value = _response({"result": {"data": {"topicId": 9}}})
            data = client.get_topic(9)

        assert data["result"]["data"]["topicId"] == 9
        assert get.call_args.args[0] == f"{API_URL}/v2/topic/9"

    def test_non_object_response(self):
        client = ApiClient(API_URL, topic_api_url="https://topics.example.test/")
        with patch("opinion_trade.api.requests.get") as get:
            get.return_value = _response([1, 2])
            with pytest.raises(ApiError):
                client.get_topic(9)
        assert get.call_args.args[0] == "https://topics.example.test/9"
