# advisor/__init__.py
# =============================================================================
# 外部 AI 顾问边界: 提示词、回复解析、超时与失败隔离。
# / External AI advisor boundary: prompts, reply parsing, timeouts and failure isolation.
# =============================================================================

from decisionlab.advisor.payloads import AlternativeSuggestions, RiskSuggestion
from decisionlab.advisor.service import (
    AdvisorBusyError,
    AdvisorReply,
    AdvisorStats,
    DecisionAdvisor,
)

__all__ = [
    "AdvisorBusyError",
    "AdvisorReply",
    "AdvisorStats",
    "AlternativeSuggestions",
    "DecisionAdvisor",
    "RiskSuggestion",
]
