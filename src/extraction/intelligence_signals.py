# src/extraction/intelligence_signals.py - v1
"""Counters and alert detectors applied to research-provider facet text.

Same contract as the structured extractor: pure functions, no exceptions,
empty results when nothing matches.
"""

from __future__ import annotations

import re

from sproutintel.core.models import PriceAlert, TradeOpportunity, WeatherAlert

MAX_OPPORTUNITY_COUNT = 20
MAX_TRADE_OPPORTUNITIES = 10

_NUMBERED_ITEM = re.compile(r"\d+\.")
_NUMBER_PREFIX = re.compile(r"^\s*\d+\.\s*")
_WEATHER_REPORT = re.compile(r"forecast|outlook|prediction|warning", re.IGNORECASE)
_OPPORTUNITY = re.compile(r"opportunit(?:y|ies)|market|export|trade", re.IGNORECASE)

WEATHER_ALERT_RULES: tuple[tuple[re.Pattern[str], str, str], ...] = (
    (re.compile(r"drought|dry", re.IGNORECASE), "drought_risk", "medium"),
    (re.compile(r"flood|heavy.rain", re.IGNORECASE), "flood_risk", "high"),
    (re.compile(r"storm|cyclone", re.IGNORECASE), "storm_warning", "high"),
    (re.compile(r"extreme.temperature", re.IGNORECASE), "temperature_extreme", "medium"),
    (re.compile(r"pest.outbreak", re.IGNORECASE), "pest_risk", "medium"),
)

PRICE_ALERT_RULES: tuple[tuple[re.Pattern[str], str, str], ...] = (
    (re.compile(r"price.increase|rising.price", re.IGNORECASE), "price_increase", "bullish"),
    (re.compile(r"price.decrease|falling.price", re.IGNORECASE), "price_decrease", "bearish"),
    (re.compile(r"volatil(?:e|ity)", re.IGNORECASE), "high_volatility", "unstable"),
    (re.compile(r"shortage|scarcity", re.IGNORECASE), "supply_shortage", "bullish"),
    (re.compile(r"surplus|oversupply", re.IGNORECASE), "supply_surplus", "bearish"),
)


def count_insights(text: str | None) -> int:
    """Number of numbered items ("1.", "2.", ...) in a market answer."""
    return len(_NUMBERED_ITEM.findall(text or ""))


def count_weather_reports(text: str | None) -> int:
    return len(_WEATHER_REPORT.findall(text or ""))


def extract_weather_alerts(text: str | None) -> list[WeatherAlert]:
    """One alert per weather risk mentioned, in rule order."""
    text = text or ""
    return [
        WeatherAlert(type=alert_type, severity=severity)
        for pattern, alert_type, severity in WEATHER_ALERT_RULES
        if pattern.search(text)
    ]


def extract_price_alerts(text: str | None) -> list[PriceAlert]:
    """One alert per price signal mentioned, in rule order."""
    text = text or ""
    return [
        PriceAlert(type=alert_type, trend=trend)
        for pattern, alert_type, trend in PRICE_ALERT_RULES
        if pattern.search(text)
    ]


def count_opportunities(text: str | None) -> int:
    """Opportunity keyword mentions, capped at MAX_OPPORTUNITY_COUNT."""
    return min(len(_OPPORTUNITY.findall(text or "")), MAX_OPPORTUNITY_COUNT)


def extract_trade_opportunities(text: str | None) -> list[TradeOpportunity]:
    """Numbered lines of a trade answer, number prefix stripped, top 10."""
    opportunities: list[TradeOpportunity] = []
    for line in (text or "").splitlines():
        if not _NUMBERED_ITEM.search(line):
            continue
        description = _NUMBER_PREFIX.sub("", line).strip()
        if description:
            opportunities.append(TradeOpportunity(description=description))
        if len(opportunities) == MAX_TRADE_OPPORTUNITIES:
            break
    return opportunities
