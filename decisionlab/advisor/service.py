# service.py
# =============================================================================
# 外部 AI 顾问服务边界 / External AI advisor boundary
#
# 职责 / Responsibilities:
#   - 由向导记录构建四类提示词 / Build the four advisor prompts from the record
#   - 通过注入的 async llm_caller 调用外部服务，每次调用有独立超时
#     / Call the external service through an injected async llm_caller, each with its own timeout
#   - 超时、异常、格式错误一律转换为 "AI unavailable" 回复，绝不抛入核心
#     / Timeouts, exceptions and malformed replies become "AI unavailable" replies, never raised
#   - 统计调用尝试/成功/失败，便于审计 / Count attempts, successes and failures for audit
#
# 不重试：一次失败即把控制权交还用户。 / No retries: one failure hands control back to the user.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Generic, List, Mapping, Optional, Sequence, TypeVar

from decisionlab.advisor import prompts
from decisionlab.advisor.payloads import (
    AlternativeSuggestions,
    RiskSuggestion,
    parse_alternative_suggestions,
    parse_risk_suggestions,
    parse_text,
)
from decisionlab.config import AdvisorSettings
from decisionlab.primitives.models import DecisionRecord, RankedAlternative
from decisionlab.wizard.stages import threshold_label

logger = logging.getLogger(__name__)

T = TypeVar("T")

LLMCaller = Callable[..., Awaitable[str]]

UNAVAILABLE_PREFIX = "AI unavailable"

# 调用类型 / Call kinds
KIND_ALTERNATIVES = "alternatives"
KIND_SCORING_INSIGHT = "scoring_insight"
KIND_RISKS = "risks"
KIND_MEMO = "memo"


class AdvisorBusyError(RuntimeError):
    """同一阶段已有进行中的顾问调用。 / An advisor call is already in flight for this stage."""
    pass


# =============================================================================
# 调用结果与统计 / Replies and accounting
# =============================================================================


@dataclass(frozen=True)
class AdvisorReply(Generic[T]):
    """一次顾问调用的结果。

    - 成功: value 有值，error 为 None
    - 失败: value 为 None，error 以 "AI unavailable" 开头
    - 过期: discarded=True，结果到达时会话已离开发起阶段，不得使用
    """

    value: Optional[T] = None
    error: Optional[str] = None
    discarded: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.discarded and self.value is not None


@dataclass
class AdvisorStats:
    """顾问调用计数。

    attempts 在发起请求前累加（失败也计入），successes 仅在解析成功后累加。
    """

    attempts: int = 0
    successes: int = 0
    failures: int = 0
    attempts_by_kind: Dict[str, int] = field(default_factory=dict)
    failures_by_kind: Dict[str, int] = field(default_factory=dict)

    def record_attempt(self, kind: str) -> None:
        self.attempts += 1
        self.attempts_by_kind[kind] = self.attempts_by_kind.get(kind, 0) + 1

    def record_success(self, kind: str) -> None:
        self.successes += 1

    def record_failure(self, kind: str) -> None:
        self.failures += 1
        self.failures_by_kind[kind] = self.failures_by_kind.get(kind, 0) + 1

    def to_dict(self) -> dict:
        """序列化为字典，便于审计。"""
        return {
            "attempts": self.attempts,
            "successes": self.successes,
            "failures": self.failures,
            "attempts_by_kind": dict(self.attempts_by_kind),
            "failures_by_kind": dict(self.failures_by_kind),
        }


# =============================================================================
# 提示词构建 / Prompt builders
# =============================================================================


def build_alternatives_prompt(record: DecisionRecord) -> str:
    return prompts.ALTERNATIVES_BRAINSTORM.format(
        statement=record.statement,
        objectives=record.objectives,
        alternatives=", ".join(f'"{a.name}"' for a in record.alternatives) or "none yet",
        threshold_label=threshold_label(record.meta.threshold),
        reversibility_label=record.meta.reversibility_label,
    )


def build_scoring_insight_prompt(
    record: DecisionRecord,
    scores: Mapping[str, Mapping[str, int]],
    rankings: Sequence[RankedAlternative],
) -> str:
    lines = []
    for r in rankings:
        row = scores.get(r.id) or {}
        details = ", ".join(
            f"{c.name}: {row.get(c.id, '-')}/10 (weight: {c.weight * 100:.0f}%)"
            for c in record.criteria
        )
        lines.append(prompts.SCORING_INSIGHT_LINE.format(name=r.name, score=r.score, details=details))

    top = rankings[0]
    runner_up = rankings[1] if len(rankings) > 1 else None
    return prompts.SCORING_INSIGHT.format(
        ranked_details="\n".join(lines),
        top_name=top.name,
        top_score=top.score,
        runner_up_name=runner_up.name if runner_up else "N/A",
        runner_up_score=runner_up.score if runner_up else 0.0,
        gap=top.score - (runner_up.score if runner_up else 0.0),
    )


def build_risk_prompt(record: DecisionRecord) -> str:
    top_name = record.top_choice.name if record.top_choice else "N/A"
    return prompts.RISK_BRAINSTORM.format(
        top_name=top_name,
        statement=record.statement,
        threshold_label=threshold_label(record.meta.threshold),
        reversibility_label=record.meta.reversibility_label,
        objectives=record.objectives,
    )


def build_memo_prompt(raw_text: str) -> str:
    return prompts.MEMO_REFINEMENT.format(memo=raw_text)


# =============================================================================
# 顾问服务 / Advisor service
# =============================================================================


class DecisionAdvisor:
    """外部 AI 顾问的封装。核心逻辑不依赖其正确性。

    llm_caller 签名与引擎中的 LLM 调用一致：
    ``await llm_caller(system_prompt=..., user_prompt=...) -> str``。
    """

    def __init__(
        self,
        llm_caller: Optional[LLMCaller] = None,
        settings: Optional[AdvisorSettings] = None,
    ) -> None:
        self._llm_caller = llm_caller
        self._settings = settings or AdvisorSettings()
        self.stats = AdvisorStats()

    @property
    def available(self) -> bool:
        return self._llm_caller is not None and self._settings.enabled

    async def suggest_alternatives(
        self, record: DecisionRecord
    ) -> AdvisorReply[AlternativeSuggestions]:
        return await self._call(
            KIND_ALTERNATIVES,
            build_alternatives_prompt(record),
            parse_alternative_suggestions,
            self._settings.timeout,
        )

    async def scoring_insight(
        self,
        record: DecisionRecord,
        scores: Mapping[str, Mapping[str, int]],
        rankings: Sequence[RankedAlternative],
    ) -> AdvisorReply[str]:
        if not rankings:
            return AdvisorReply(error=f"{UNAVAILABLE_PREFIX}: no rankings to analyze")
        return await self._call(
            KIND_SCORING_INSIGHT,
            build_scoring_insight_prompt(record, scores, rankings),
            parse_text,
            self._settings.timeout,
        )

    async def suggest_risks(
        self, record: DecisionRecord
    ) -> AdvisorReply[List[RiskSuggestion]]:
        return await self._call(
            KIND_RISKS,
            build_risk_prompt(record),
            parse_risk_suggestions,
            self._settings.timeout,
        )

    async def refine_memo(self, raw_text: str) -> AdvisorReply[str]:
        return await self._call(
            KIND_MEMO,
            build_memo_prompt(raw_text),
            parse_text,
            self._settings.memo_timeout,
        )

    async def _call(
        self,
        kind: str,
        user_prompt: str,
        parse: Callable[[Any], T],
        timeout: float,
    ) -> AdvisorReply[T]:
        if self._llm_caller is None:
            return AdvisorReply(error=f"{UNAVAILABLE_PREFIX}: no advisor configured")
        if not self._settings.enabled:
            return AdvisorReply(error=f"{UNAVAILABLE_PREFIX}: advisor disabled")

        self.stats.record_attempt(kind)
        try:
            raw = await asyncio.wait_for(
                self._llm_caller(
                    system_prompt=prompts.ADVISOR_SYSTEM,
                    user_prompt=user_prompt,
                ),
                timeout=timeout,
            )
            value = parse(raw)
        except asyncio.TimeoutError:
            self.stats.record_failure(kind)
            logger.warning(f"顾问调用超时: kind={kind}, timeout={timeout}s")
            return AdvisorReply(error=f"{UNAVAILABLE_PREFIX}: Request timed out")
        except Exception as e:
            self.stats.record_failure(kind)
            logger.warning(f"顾问调用失败: kind={kind}, error={e}")
            return AdvisorReply(error=f"{UNAVAILABLE_PREFIX}: {e}")

        self.stats.record_success(kind)
        return AdvisorReply(value=value)
