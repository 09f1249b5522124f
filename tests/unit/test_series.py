"""Unit tests for API record parsing and insight feed mapping"""

import pytest
from datetime import date
from cashflow_insights.domain.feed import (
    insight_feed_from_payload,
    map_confidence,
    map_impact,
    map_priority,
    map_severity,
)
from cashflow_insights.domain.series import (
    daily_summaries_from_payload,
    forecast_from_payload,
    paged_transactions_from_payload,
    parse_date,
    simulation_results_from_payload,
)


def test_parse_date_accepts_datetimes():
    """Test ISO datetimes are truncated to their date"""
    assert parse_date("2024-03-01T00:00:00") == date(2024, 3, 1)
    assert parse_date("2024-03-01") == date(2024, 3, 1)
    assert parse_date(date(2024, 3, 1)) == date(2024, 3, 1)


def test_forecast_points_sorted_ascending():
    """Test forecast points are ordered by date whatever the wire order"""
    payload = {
        "accountCode": "JHB01",
        "forecastStart": "2024-03-01",
        "startingBalance": 100000,
        "horizonDays": 14,
        "modelDescription": "Holt-Winters",
        "points": [
            {"date": "2024-03-03", "projectedBalance": 103, "confidenceLow": 100, "confidenceHigh": 106},
            {"date": "2024-03-02", "projectedBalance": 102, "confidenceLow": 99, "confidenceHigh": 105},
        ],
    }

    series = forecast_from_payload(payload)

    assert series.account_code == "JHB01"
    assert series.starting_balance == 100000.0
    assert series.forecast_start == date(2024, 3, 1)
    assert [p.date for p in series.points] == [date(2024, 3, 2), date(2024, 3, 3)]
    assert series.points[0].projected == 102.0


def test_forecast_without_points():
    """Test an empty forecast is valid"""
    series = forecast_from_payload({"accountCode": "JHB01", "startingBalance": None, "horizonDays": 7, "points": []})

    assert series.points == []
    assert series.starting_balance == 0.0
    assert series.model_description == ""


def test_forecast_missing_field_raises():
    """Test malformed records raise for the client to wrap"""
    with pytest.raises(KeyError):
        forecast_from_payload({"accountCode": "JHB01", "points": []})


def test_transactions_prefer_reporting_currency():
    """Test ZAR amounts win over foreign-currency amounts"""
    payload = {
        "items": [
            {
                "transactionId": 1,
                "txnDate": "2024-03-10T00:00:00",
                "accountCode": "JHB01",
                "creditFc": 50.0,
                "creditZar": 900.0,
                "balanceFc": 10.0,
                "currency": "USD",
                "category": "",
            },
            {
                "transactionId": 2,
                "txnDate": "2024-03-09",
                "accountCode": "JHB01",
                "debitFc": 25.0,
                "currency": "USD",
                "category": "Payroll",
            },
        ],
        "pageNumber": 1,
        "pageSize": 50,
        "totalCount": 120,
    }

    page = paged_transactions_from_payload(payload)

    first, second = page.items
    assert first.credit_amount == 900.0
    assert first.balance == 10.0
    assert first.category is None
    assert second.debit_amount == 25.0
    assert second.credit_amount is None
    assert page.total_count == 120


def test_daily_summaries_and_simulations():
    """Test daily summary and simulation records map field by field"""
    summaries = daily_summaries_from_payload(
        [{"date": "2024-03-10", "accountCode": "JHB01", "totalCredits": 10, "totalDebits": 4, "netFlow": 6}]
    )
    results = simulation_results_from_payload(
        [{"adjustedInflow": 1.5, "adjustedOutflow": 2.5, "projectedBalance": 300, "narrative": "Stable"}]
    )

    assert summaries[0].net_flow == 6.0
    assert results[0].projected_balance == 300.0
    assert results[0].narrative == "Stable"


@pytest.mark.parametrize(
    "mapper,value,expected",
    [
        (map_impact, "High risk", "Risk"),
        (map_impact, "neutral", "Neutral"),
        (map_impact, None, "Positive"),
        (map_confidence, "LOW", "Low"),
        (map_confidence, "medium", "Medium"),
        (map_confidence, "", "High"),
        (map_priority, "High", "High"),
        (map_priority, "Medium", "Medium"),
        (map_priority, "whenever", "Low"),
        (map_severity, "Critical", "critical"),
        (map_severity, "high", "critical"),
        (map_severity, "Warning", "warning"),
        (map_severity, "medium", "warning"),
        (map_severity, "fyi", "info"),
    ],
)
def test_feed_label_mapping(mapper, value, expected):
    """Test keyword mapping of free-text feed labels"""
    assert mapper(value) == expected


def test_insight_feed_from_payload():
    """Test cards, actions and warnings are mapped for display"""
    feed = insight_feed_from_payload(
        {
            "accountCode": "JHB01",
            "cards": [{"title": "Cash buffer", "summary": "Healthy", "impact": "positive", "confidence": "medium"}],
            "nextBestActions": [
                {"actionType": "Collect", "description": "Chase invoices", "priority": "high", "suggestedBy": "Model"}
            ],
            "warnings": [{"severity": "critical", "message": "Dip ahead", "expectedDate": "2024-03-20"}],
        }
    )

    assert feed.cards[0].detail == "Healthy"
    assert feed.cards[0].confidence == "Medium"
    assert feed.next_best_actions[0].priority == "High"
    assert feed.next_best_actions[0].owner == "Model"
    assert feed.warnings[0].severity == "critical"
    assert feed.warnings[0].date == "2024-03-20"
