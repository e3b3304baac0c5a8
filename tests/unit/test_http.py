"""Unit tests for the JSON HTTP client."""

import io
import json
import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from wallet_assets.adapters.http import JsonHttpClient, build_url
from wallet_assets.adapters.providers import RetryConfig


def test_build_url_joins_slashes():
    assert build_url("https://node.example/", "/assets/details/X") == (
        "https://node.example/assets/details/X"
    )


def test_build_url_repeats_sequences_and_drops_none():
    """Test list parameters repeat the key and None parameters vanish."""
    url = build_url("https://node.example", "assets/balance/3P", {"id": ["A", "B"], "x": None})

    assert url == "https://node.example/assets/balance/3P?id=A&id=B"


def test_build_url_without_effective_params():
    assert build_url("https://node.example", "x", {"id": None}) == "https://node.example/x"
    assert build_url("https://node.example", "x", {"limit": 10}) == (
        "https://node.example/x?limit=10"
    )


def _response(payload):
    response = MagicMock()
    response.__enter__.return_value = io.BytesIO(json.dumps(payload).encode())
    response.__exit__.return_value = False
    return response


@pytest.mark.anyio
async def test_get_json_decodes_response():
    client = JsonHttpClient("https://node.example", name="node", timeout_seconds=3)

    with patch(
        "wallet_assets.adapters.http.urllib.request.urlopen",
        return_value=_response({"balance": 42}),
    ) as mock_urlopen:
        result = await client.get_json("/addresses/balance/3P")

    assert result == {"balance": 42}
    request = mock_urlopen.call_args.args[0]
    assert request.full_url == "https://node.example/addresses/balance/3P"
    assert request.get_header("Accept") == "application/json"
    assert mock_urlopen.call_args.kwargs["timeout"] == 3


@pytest.mark.anyio
async def test_get_json_retries_transient_errors():
    """Test network errors are retried before giving up."""
    client = JsonHttpClient(
        "https://node.example",
        name="node",
        retry_config=RetryConfig(max_attempts=2, initial_delay_seconds=0.0),
    )

    with patch(
        "wallet_assets.adapters.http.urllib.request.urlopen",
        side_effect=[OSError("connection reset"), _response([])],
    ) as mock_urlopen:
        result = await client.get_json("/trades/A/B/5")

    assert result == []
    assert mock_urlopen.call_count == 2


@pytest.mark.anyio
async def test_get_json_raises_after_retries():
    client = JsonHttpClient(
        "https://node.example",
        name="node",
        retry_config=RetryConfig(max_attempts=2, initial_delay_seconds=0.0),
    )

    with patch(
        "wallet_assets.adapters.http.urllib.request.urlopen",
        side_effect=OSError("unreachable"),
    ):
        with pytest.raises(OSError, match="unreachable"):
            await client.get_json("/x")

    assert client.caller.circuit_breaker.failure_count == 1


def _http_error(status, reason):
    return urllib.error.HTTPError("https://node.example/x", status, reason, hdrs=None, fp=None)


@pytest.mark.anyio
async def test_get_json_raises_client_error_without_retrying():
    """Test a 404 for an unknown asset is raised after a single request."""
    client = JsonHttpClient(
        "https://node.example",
        name="node",
        retry_config=RetryConfig(max_attempts=3, initial_delay_seconds=0.0),
    )

    with patch(
        "wallet_assets.adapters.http.urllib.request.urlopen",
        side_effect=_http_error(404, "Not Found"),
    ) as mock_urlopen:
        with pytest.raises(urllib.error.HTTPError) as exc_info:
            await client.get_json("/assets/details/unknown")

    assert exc_info.value.code == 404
    assert mock_urlopen.call_count == 1
    assert client.caller.circuit_breaker.failure_count == 0


@pytest.mark.anyio
async def test_bad_asset_ids_keep_circuit_closed():
    """Test repeated unknown ids do not lock out later requests."""
    client = JsonHttpClient(
        "https://node.example",
        name="node",
        retry_config=RetryConfig(max_attempts=3, initial_delay_seconds=0.0),
    )
    breaker = client.caller.circuit_breaker
    answers = [_http_error(404, "Not Found") for _ in range(breaker.failure_threshold)]

    with patch(
        "wallet_assets.adapters.http.urllib.request.urlopen",
        side_effect=[*answers, _response({"balance": 7})],
    ):
        for n in range(breaker.failure_threshold):
            with pytest.raises(urllib.error.HTTPError):
                await client.get_json(f"/assets/details/bad{n}")

        result = await client.get_json("/addresses/balance/3P")

    assert result == {"balance": 7}
    assert client.caller.get_health_status()["circuit_state"] == "closed"


@pytest.mark.anyio
async def test_get_json_retries_server_errors():
    client = JsonHttpClient(
        "https://node.example",
        name="node",
        retry_config=RetryConfig(max_attempts=3, initial_delay_seconds=0.0),
    )

    with patch(
        "wallet_assets.adapters.http.urllib.request.urlopen",
        side_effect=[_http_error(503, "Service Unavailable"), _response([1])],
    ) as mock_urlopen:
        result = await client.get_json("/x")

    assert result == [1]
    assert mock_urlopen.call_count == 2
    assert client.caller.circuit_breaker.failure_count == 0
