"""Cashflow API HTTP client for transactions, forecasts, insights and simulations"""

import httpx
from typing import Any, Dict, List
from cashflow_insights.config import settings
from cashflow_insights.domain.exceptions import CashflowAPIError
from cashflow_insights.domain.feed import insight_feed_from_payload
from cashflow_insights.domain.models import (
    DailySummary,
    ForecastSeries,
    InsightFeed,
    PagedTransactions,
    SimulationResult,
    SimulationSelection,
)
from cashflow_insights.domain.series import (
    daily_summaries_from_payload,
    forecast_from_payload,
    paged_transactions_from_payload,
    simulation_results_from_payload,
)
from cashflow_insights.infrastructure.observability.metrics import fetch_latency_histogram


class CashflowAPIClient:
    """Client for the cashflow forecasting API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.cashflow_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.token = token if token is not None else settings.api_token
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _request(self, call: str, method: str, path: str, **kwargs: Any) -> Any:
        """
        Issue one request and return the decoded JSON body.

        Raises:
            CashflowAPIError: On timeout, transport failure or HTTP error status
        """
        async with httpx.AsyncClient(
            timeout=self.timeout, headers=self._headers(), transport=self.transport
        ) as client:
            try:
                with fetch_latency_histogram.labels(call=call).time():
                    response = await client.request(method, f"{self.base_url}{path}", **kwargs)
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                raise CashflowAPIError(f"Cashflow API timeout after {self.timeout}s ({call})") from e
            except httpx.HTTPStatusError as e:
                raise CashflowAPIError(f"Cashflow API error: {e.response.status_code} ({call})") from e
            except httpx.RequestError as e:
                raise CashflowAPIError(f"Cashflow API unreachable ({call}): {e}") from e
            except ValueError as e:
                raise CashflowAPIError(f"Cashflow API returned invalid JSON ({call})") from e

    async def fetch_transactions(self, account_code: str, page_size: int | None = None) -> PagedTransactions:
        """Fetch the first page of transactions for a branch, most recent first"""
        params: Dict[str, Any] = {"pageSize": page_size or settings.transactions_page_size, "pageNumber": 1}
        if account_code:
            params["accountCode"] = account_code

        data = await self._request("transactions", "GET", "/transactions", params=params)
        try:
            return paged_transactions_from_payload(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise CashflowAPIError(f"Invalid transaction data: {e}") from e

    async def fetch_daily_summary(self, account_code: str) -> List[DailySummary]:
        params = {"accountCode": account_code} if account_code else None
        data = await self._request("daily_summary", "GET", "/transactions/daily-summary", params=params)
        try:
            return daily_summaries_from_payload(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise CashflowAPIError(f"Invalid daily summary data: {e}") from e

    async def fetch_forecast(self, account_code: str, horizon_days: int) -> ForecastSeries:
        params = {"accountCode": account_code or "ALL", "horizonDays": horizon_days}
        data = await self._request("forecast", "GET", "/forecast", params=params)
        try:
            return forecast_from_payload(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise CashflowAPIError(f"Invalid forecast data: {e}") from e

    async def fetch_insights(self, account_code: str) -> InsightFeed:
        data = await self._request("insights", "GET", f"/insights/{account_code}")
        try:
            return insight_feed_from_payload(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise CashflowAPIError(f"Invalid insights data: {e}") from e

    async def run_what_if_simulation(self, selection: SimulationSelection) -> List[SimulationResult]:
        """Run a what-if simulation with adjusted inflow/outflow percentages"""
        payload = {
            "accountCode": selection.account_code,
            "inflowAdjustmentPercent": selection.inflow_adjustment_percent,
            "outflowAdjustmentPercent": selection.outflow_adjustment_percent,
            "horizonDays": selection.horizon_days,
        }
        data = await self._request("simulation", "POST", "/insights/what-if", json=payload)
        try:
            return simulation_results_from_payload(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise CashflowAPIError(f"Invalid simulation data: {e}") from e
