# src/extraction/structured_extractor.py - v1
"""Pattern-based extraction of typed crop-analysis fields from free text.

Every rule is pure and total: a rule that does not match yields its
default. The extractor is a reduction over the rules and always returns a
fully populated StructuredAnalysis, whatever the provider wrote.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sproutintel.core.models import StructuredAnalysis

MAX_RECOMMENDATIONS = 5


def _clean(value: str) -> str:
    return value.strip().strip("*_:-").strip()


def _to_float(value: str) -> float:
    return float(value)


@dataclass(frozen=True)
class ExtractionRule:
    """Labeled matcher for one StructuredAnalysis field."""

    field: str
    pattern: re.Pattern[str]
    default: Any = None
    convert: Callable[[str], Any] = _clean

    def apply(self, text: str) -> tuple[Any, bool]:
        """Return (value, matched) for the first match in text."""
        match = self.pattern.search(text)
        if match is None:
            return self.default, False
        try:
            value = self.convert(match.group(1))
        except ValueError:
            return self.default, False
        if value is None or value == "":
            return self.default, False
        return value, True


LABELED_RULES: tuple[ExtractionRule, ...] = (
    ExtractionRule(
        "health_status",
        re.compile(r"\bhealth\b(?:\s+status)?[:\s]*([^.\n]+)", re.IGNORECASE),
        default="assessment needed",
    ),
    ExtractionRule(
        "quality_assessment",
        re.compile(r"\bquality\b(?:\s+assessment)?[:\s]*([^.\n]+)", re.IGNORECASE),
    ),
    ExtractionRule(
        "quality_score",
        re.compile(r"\bscore\b[:\s]*(?:of\s+)?(\d+(?:\.\d+)?)", re.IGNORECASE),
        convert=_to_float,
    ),
    ExtractionRule(
        "market_grade",
        re.compile(r"\bgrade\b[:\s]*([A-C])\b", re.IGNORECASE),
        convert=str.upper,
    ),
)

ISSUE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bpests?\b[:\s]*([^.\n]+)", re.IGNORECASE),
    re.compile(r"\bdiseases?\b[:\s]*([^.\n]+)", re.IGNORECASE),
    re.compile(r"\bdeficienc(?:y|ies)\b[:\s]*([^.\n]+)", re.IGNORECASE),
    re.compile(r"\bdamage\b[:\s]*([^.\n]+)", re.IGNORECASE),
)

GROWTH_STAGES: tuple[str, ...] = (
    "seedling", "vegetative", "flowering", "fruiting", "mature", "harvest",
)
_STAGE_PATTERNS = tuple(
    (stage, re.compile(rf"\b{stage}", re.IGNORECASE)) for stage in GROWTH_STAGES
)

ACTION_VERBS: tuple[str, ...] = (
    "apply", "use", "spray", "water", "fertilize", "prune", "harvest", "treat",
    "monitor", "ensure",
)
_ACTION_PATTERN = re.compile(
    r"\b(?:apply|use|spray|water|fertili[sz]e|prune|harvest|treat|monitor|ensure)",
    re.IGNORECASE,
)
_SENTENCE_SPLIT = re.compile(r"[.!?]+")

_ALL_FIELDS: tuple[str, ...] = (
    "health_status",
    "quality_assessment",
    "quality_score",
    "market_grade",
    "issues_detected",
    "growth_stage",
    "recommendations",
)

# Fields an analysis sub-type is expected to yield; drives confidence_score.
RELEVANT_FIELDS: dict[str, tuple[str, ...]] = {
    "general": _ALL_FIELDS,
    "health": ("health_status", "issues_detected", "growth_stage", "recommendations"),
    "quality": ("quality_assessment", "quality_score", "market_grade", "recommendations"),
    "pest": ("issues_detected", "health_status", "recommendations"),
    "disease": ("issues_detected", "health_status", "recommendations"),
    "maturity": ("growth_stage", "quality_assessment", "recommendations"),
    "market_research": ("quality_assessment", "market_grade", "recommendations"),
}


def extract_issues(text: str) -> list[str]:
    """Collect at most one issue per domain pattern, in pattern order."""
    issues: list[str] = []
    for pattern in ISSUE_PATTERNS:
        match = pattern.search(text)
        if match:
            issue = _clean(match.group(1))
            if issue:
                issues.append(issue)
    return issues


def extract_growth_stage(text: str) -> str:
    """First growth-stage keyword present in text, else 'undetermined'."""
    for stage, pattern in _STAGE_PATTERNS:
        if pattern.search(text):
            return stage
    return "undetermined"


def extract_recommendations(text: str, limit: int = MAX_RECOMMENDATIONS) -> list[str]:
    """Sentences containing an action verb, in source order, capped at limit."""
    recommendations: list[str] = []
    for sentence in _SENTENCE_SPLIT.split(text):
        sentence = sentence.strip()
        if sentence and _ACTION_PATTERN.search(sentence):
            recommendations.append(sentence)
            if len(recommendations) == limit:
                break
    return recommendations


def extract_structured(text: str | None, analysis_type: str = "general") -> StructuredAnalysis:
    """Convert a free-text provider answer into a StructuredAnalysis.

    Args:
        text: Provider answer; None or empty yields all defaults.
        analysis_type: Analysis sub-type; unknown types are treated as general.

    Returns:
        Fully populated StructuredAnalysis; never raises.
    """
    text = text if isinstance(text, str) else ""

    values: dict[str, Any] = {}
    matched: set[str] = set()
    for rule in LABELED_RULES:
        value, ok = rule.apply(text)
        values[rule.field] = value
        if ok:
            matched.add(rule.field)

    issues = extract_issues(text)
    stage = extract_growth_stage(text)
    recommendations = extract_recommendations(text)
    if issues:
        matched.add("issues_detected")
    if stage != "undetermined":
        matched.add("growth_stage")
    if recommendations:
        matched.add("recommendations")

    relevant = RELEVANT_FIELDS.get(analysis_type, _ALL_FIELDS)
    confidence = sum(1 for f in relevant if f in matched) / len(relevant)

    return StructuredAnalysis(
        **values,
        issues_detected=issues,
        growth_stage=stage,
        recommendations=recommendations,
        confidence_score=round(confidence, 2),
    )
