"""顾问回复的严格解析。 / Strict parsing of advisor replies into core types.

顾问的输出不可信：任何形状不符都抛出 ValueError，由 DecisionAdvisor
转换为 "AI unavailable" 回复，核心逻辑不会看到半成品数据。
/ Advisor output is untrusted: any shape mismatch raises ValueError, which
DecisionAdvisor converts into an "AI unavailable" reply.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from decisionlab.primitives.models import LEVELS
from decisionlab.utils.json_parser import parse_json_from_llm


@dataclass(frozen=True)
class AlternativeSuggestions:
    suggestions: Tuple[str, ...]
    rationale: str = ""


@dataclass(frozen=True)
class RiskSuggestion:
    """顾问建议的风险。category 仅供展示，主题由本地分类器判定。
    / Advisor-proposed risk. category is informational; the theme comes from the local classifier.
    """

    description: str
    category: str = ""
    likelihood: Optional[str] = None
    impact: Optional[str] = None


def _level(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    level = value.strip().lower()
    return level if level in LEVELS else None


def parse_alternative_suggestions(raw: str) -> AlternativeSuggestions:
    data = parse_json_from_llm(raw, expect="object")
    suggestions = data.get("suggestions")
    if not isinstance(suggestions, list):
        raise ValueError("Advisor reply has no 'suggestions' list")
    names = tuple(s.strip() for s in suggestions if isinstance(s, str) and s.strip())
    if not names:
        raise ValueError("Advisor reply has no usable suggestions")
    rationale = data.get("rationale")
    return AlternativeSuggestions(
        suggestions=names,
        rationale=rationale.strip() if isinstance(rationale, str) else "",
    )


def parse_risk_suggestions(raw: str) -> List[RiskSuggestion]:
    """解析风险建议；接受 {"risks": [...]} 或裸数组。
    / Parse risk suggestions from {"risks": [...]} or a bare array.
    """
    data = parse_json_from_llm(raw, expect="any")
    items = data.get("risks") if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ValueError("Advisor reply has no 'risks' list")

    risks: List[RiskSuggestion] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        description = item.get("description")
        if not isinstance(description, str) or not description.strip():
            continue
        category = item.get("category")
        risks.append(
            RiskSuggestion(
                description=description.strip(),
                category=category.strip() if isinstance(category, str) else "",
                likelihood=_level(item.get("suggestedLikelihood", item.get("likelihood"))),
                impact=_level(item.get("suggestedImpact", item.get("impact"))),
            )
        )
    if not risks:
        raise ValueError("Advisor reply has no usable risks")
    return risks


def parse_text(raw: Any) -> str:
    """纯文本回复：去除首尾空白，空内容视为失败。 / Plain text reply; blank counts as failure."""
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError("Empty advisor reply")
    return raw.strip()
