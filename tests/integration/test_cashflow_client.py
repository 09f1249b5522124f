"""Integration tests for the cashflow API client against a mock transport"""

import httpx
import json
import pytest
from cashflow_insights.domain.exceptions import CashflowAPIError
from cashflow_insights.domain.models import SimulationSelection
from cashflow_insights.infrastructure.clients.cashflow_api import CashflowAPIClient

BASE_URL = "http://cashflow.test/api"


def _client(handler, token: str | None = "secret") -> CashflowAPIClient:
    return CashflowAPIClient(base_url=BASE_URL, timeout=1.0, token=token, transport=httpx.MockTransport(handler))


async def test_fetch_forecast_request_and_parse():
    """Test forecast query parameters, auth header and parsing"""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(
            200,
            json={
                "accountCode": "JHB01",
                "startingBalance": 100000,
                "horizonDays": 21,
                "modelDescription": "ARIMA",
                "points": [{"date": "2024-03-02", "projectedBalance": 101000, "confidenceLow": 99000, "confidenceHigh": 103000}],
            },
        )

    series = await _client(handler).fetch_forecast("JHB01", 21)

    assert seen["path"] == "/api/forecast"
    assert seen["params"] == {"accountCode": "JHB01", "horizonDays": "21"}
    assert seen["auth"] == "Bearer secret"
    assert series.horizon_days == 21
    assert series.points[0].high == 103000.0


async def test_fetch_transactions_paging():
    """Test transaction paging parameters"""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json={"items": [], "pageNumber": 1, "pageSize": 25, "totalCount": 0})

    page = await _client(handler, token=None).fetch_transactions("DBN01", 25)

    assert seen["params"] == {"pageSize": "25", "pageNumber": "1", "accountCode": "DBN01"}
    assert page.items == []


async def test_fetch_insights_path():
    """Test insights are requested per branch"""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/insights/CPT01"
        return httpx.Response(200, json={"accountCode": "CPT01", "cards": [], "nextBestActions": [], "warnings": []})

    feed = await _client(handler).fetch_insights("CPT01")

    assert feed.account_code == "CPT01"


async def test_run_simulation_posts_payload():
    """Test the what-if simulation posts camelCase fields"""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json=[{"adjustedInflow": 1.06, "adjustedOutflow": 1.02, "projectedBalance": 120000, "narrative": "Up"}],
        )

    results = await _client(handler).run_what_if_simulation(
        SimulationSelection(account_code="JHB01", inflow_adjustment_percent=6, outflow_adjustment_percent=2, horizon_days=14)
    )

    assert seen["method"] == "POST"
    assert seen["body"] == {
        "accountCode": "JHB01",
        "inflowAdjustmentPercent": 6,
        "outflowAdjustmentPercent": 2,
        "horizonDays": 14,
    }
    assert results[0].narrative == "Up"


async def test_http_error_raises_api_error():
    """Test error statuses surface as CashflowAPIError"""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503)

    with pytest.raises(CashflowAPIError, match="503"):
        await _client(handler).fetch_daily_summary("JHB01")


async def test_timeout_raises_api_error():
    """Test timeouts surface as CashflowAPIError"""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(CashflowAPIError, match="timeout"):
        await _client(handler).fetch_forecast("JHB01", 14)


async def test_malformed_payload_raises_api_error():
    """Test records missing required fields surface as CashflowAPIError"""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[{"date": "2024-03-01"}])

    with pytest.raises(CashflowAPIError, match="Invalid daily summary"):
        await _client(handler).fetch_daily_summary("JHB01")


@pytest.mark.parametrize(
    "call, message",
    [
        (lambda client: client.fetch_forecast("JHB01", 14), "Invalid forecast data"),
        (lambda client: client.fetch_transactions("JHB01", 50), "Invalid transaction data"),
        (lambda client: client.run_what_if_simulation(
            SimulationSelection(account_code="JHB01", inflow_adjustment_percent=6, outflow_adjustment_percent=2, horizon_days=14)
        ), "Invalid simulation data"),
    ],
)
async def test_wrong_body_shape_raises_api_error(call, message):
    """Test a 200 whose JSON body has the wrong shape surfaces as CashflowAPIError"""

    def handler(request: httpx.Request) -> httpx.Response:
        # A list where an object is expected, or a list of non-objects
        return httpx.Response(200, json=[] if request.method == "GET" else ["oops"])

    with pytest.raises(CashflowAPIError, match=message):
        await call(_client(handler))
