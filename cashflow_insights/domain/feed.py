"""Mapping of the server insight feed into display categories

The feed carries free-text impact/confidence/priority/severity labels.
Each mapper matches on keywords and falls back to a fixed default.
"""

from typing import Any, Dict

from cashflow_insights.domain.models import EarlyWarning, FeedInsight, InsightFeed, NextBestAction


def _normalize(value: Any) -> str:
    return str(value or "").lower()


def map_impact(value: Any) -> str:
    normalized = _normalize(value)
    if "risk" in normalized:
        return "Risk"
    if "neutral" in normalized:
        return "Neutral"
    return "Positive"


def map_confidence(value: Any) -> str:
    normalized = _normalize(value)
    if "low" in normalized:
        return "Low"
    if "medium" in normalized:
        return "Medium"
    return "High"


def map_priority(value: Any) -> str:
    normalized = _normalize(value)
    if "high" in normalized:
        return "High"
    if "medium" in normalized:
        return "Medium"
    return "Low"


def map_severity(value: Any) -> str:
    normalized = _normalize(value)
    if "high" in normalized or "critical" in normalized:
        return "critical"
    if "medium" in normalized or "warn" in normalized:
        return "warning"
    return "info"


def insight_feed_from_payload(payload: Dict[str, Any]) -> InsightFeed:
    """Map a raw insights response into display-ready feed entries"""
    return InsightFeed(
        account_code=payload.get("accountCode") or "",
        cards=[
            FeedInsight(
                title=card["title"],
                detail=card.get("summary") or "",
                impact=map_impact(card.get("impact")),
                confidence=map_confidence(card.get("confidence")),
            )
            for card in payload.get("cards") or []
        ],
        next_best_actions=[
            NextBestAction(
                title=action["actionType"],
                description=action.get("description") or "",
                priority=map_priority(action.get("priority")),
                owner=action.get("suggestedBy") or "",
            )
            for action in payload.get("nextBestActions") or []
        ],
        warnings=[
            EarlyWarning(
                severity=map_severity(warning.get("severity")),
                message=warning["message"],
                date=warning.get("expectedDate") or None,
            )
            for warning in payload.get("warnings") or []
        ],
    )
