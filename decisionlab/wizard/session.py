# session.py
# =============================================================================
# 异步向导会话 / Async wizard session
#
# 职责 / Responsibilities:
#   - 包装 WizardStateMachine，为展示层提供 async 接口并发出 WizardEvent
#     / Wrap WizardStateMachine with an async surface and emit WizardEvents
#   - 顾问调用：每阶段最多一个进行中；结果到达时阶段已变化则丢弃
#     / Advisor calls: at most one in flight per stage; dropped if the stage moved on
#   - Monte Carlo 在线程中运行，后提交者胜出，过期结果丢弃不排队
#     / Monte Carlo runs in a thread, last submitted wins, stale results are dropped
#
# 会话纪元 (epoch) 在每次阶段变化或重置时递增；后台任务开始时记录纪元，
# 完成时纪元不同即视为过期。
# / The session epoch bumps on every stage change or reset; background work
#   records it when starting and is stale if it differs on completion.
# =============================================================================

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import dataclass, replace
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from decisionlab.advisor.payloads import AlternativeSuggestions, RiskSuggestion
from decisionlab.advisor.service import (
    UNAVAILABLE_PREFIX,
    AdvisorBusyError,
    AdvisorReply,
    DecisionAdvisor,
)
from decisionlab.analysis.patterns import detect_patterns
from decisionlab.analysis.ranking import rank
from decisionlab.config import WizardSettings
from decisionlab.primitives.events import WizardEvent
from decisionlab.primitives.models import (
    Alternative,
    DecisionRecord,
    Insight,
    RankedAlternative,
    ScoreMatrix,
    SimulationResult,
    generate_id,
)
from decisionlab.wizard import errors
from decisionlab.wizard.errors import StageValidationError
from decisionlab.wizard.machine import StageInput, TransitionResult, WizardStateMachine
from decisionlab.wizard.stages import Stage
from decisionlab.wizard.synthesis import SynthesisSummary, build_synthesis
from decisionlab.wizard.transitions import (
    UncertaintyInput,
    fill_score_matrix,
    parse_outcome_triple,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

EventCallback = Callable[[WizardEvent], Any]


@dataclass(frozen=True)
class ForecastOutcome:
    """一次后台模拟的结果。

    superseded=True 表示已有更新的输入或阶段已变化，结果未写入记录。
    """

    result: Optional[SimulationResult] = None
    error: Optional[StageValidationError] = None
    superseded: bool = False

    @property
    def applied(self) -> bool:
        return self.result is not None and self.error is None and not self.superseded


@dataclass(frozen=True)
class ScoringPreview:
    rankings: Tuple[RankedAlternative, ...]
    insights: Tuple[Insight, ...]


class WizardSession:
    """单用户决策向导会话。DecisionRecord 由本会话独占。"""

    def __init__(
        self,
        machine: Optional[WizardStateMachine] = None,
        advisor: Optional[DecisionAdvisor] = None,
        settings: Optional[WizardSettings] = None,
        on_event: Optional[EventCallback] = None,
        session_id: Optional[str] = None,
    ) -> None:
        """初始化会话。

        Args:
            machine: 状态机，默认按 settings 新建。
            advisor: 顾问服务，默认是未配置 llm_caller 的顾问（所有调用返回 AI unavailable）。
            settings: 向导配置。
            on_event: 事件回调，支持同步或异步函数。
            session_id: 会话标识，默认自动生成。
        """
        if machine is not None:
            self._settings = settings or machine.settings
            self._machine = machine
        else:
            self._settings = settings or WizardSettings()
            self._machine = WizardStateMachine(settings=self._settings)
        self._advisor = advisor or DecisionAdvisor(settings=self._settings.advisor)
        self._on_event = on_event
        self.session_id = session_id or generate_id("session")

        self._epoch = 0
        self._forecast_seq = 0
        # 阶段 → 发起调用时的纪元 / stage → epoch at which its advisor call started
        self._pending_advice: Dict[Stage, int] = {}

    @property
    def machine(self) -> WizardStateMachine:
        return self._machine

    @property
    def advisor(self) -> DecisionAdvisor:
        return self._advisor

    @property
    def stage(self) -> Stage:
        return self._machine.stage

    @property
    def record(self) -> DecisionRecord:
        return self._machine.record

    @property
    def epoch(self) -> int:
        return self._epoch

    def advice_pending(self, stage: Optional[Stage] = None) -> bool:
        """该阶段是否有进行中的顾问调用（展示层据此禁用按钮）。"""
        stage = stage or self.stage
        return self._pending_advice.get(stage) == self._epoch

    # =========================================================================
    # 阶段迁移 / Stage transitions
    # =========================================================================

    async def submit(self, stage_input: StageInput) -> TransitionResult:
        result = self._machine.submit(stage_input)
        await self._after_transition(result)
        return result

    async def back(self) -> TransitionResult:
        result = self._machine.back()
        await self._after_transition(result)
        return result

    async def reset(self) -> TransitionResult:
        result = self._machine.reset()
        self._epoch += 1
        await self._emit("reset", {"from": result.previous_stage.value})
        return result

    async def _after_transition(self, result: TransitionResult) -> None:
        if not result.accepted:
            await self._emit("transition_rejected", result.error.to_dict())
            return
        if result.stage_changed:
            self._epoch += 1
            await self._emit("stage_entered", {"from": result.previous_stage.value})

    # =========================================================================
    # 评分预览与备忘录 / Scoring preview and memo
    # =========================================================================

    def preview_scores(self, scores: ScoreMatrix) -> ScoringPreview:
        """对草稿评分实时计算排名与洞察，不修改记录。
        / Live rankings and insights for draft scores; the record is untouched.
        """
        record = self.record
        matrix = fill_score_matrix(record.alternatives, record.criteria, scores)
        rankings = rank(record.alternatives, record.criteria, matrix)
        insights = detect_patterns(rankings, record.alternatives, record.criteria, matrix)
        return ScoringPreview(rankings=tuple(rankings), insights=tuple(insights))

    def synthesis(self) -> SynthesisSummary:
        return build_synthesis(self.record)

    # =========================================================================
    # Monte Carlo
    # =========================================================================

    async def forecast(self, inputs: UncertaintyInput) -> ForecastOutcome:
        """在后台线程运行模拟；只有最后一次提交的结果会被应用。
        / Run the simulation in a worker thread; only the last submitted result is applied.
        """
        if self.stage != Stage.UNCERTAINTY:
            error = StageValidationError(
                errors.WRONG_STAGE,
                f"Forecasts run in the uncertainty stage, not {self.stage.value}.",
            )
            await self._emit("transition_rejected", error.to_dict())
            return ForecastOutcome(error=error)
        try:
            best, likely, worst = parse_outcome_triple(inputs)
        except StageValidationError as e:
            await self._emit("transition_rejected", e.to_dict())
            return ForecastOutcome(error=e)

        self._forecast_seq += 1
        seq = self._forecast_seq
        epoch = self._epoch
        # 每次运行独占一个生成器，并发线程不会交错抽样
        # / Each run owns its generator so concurrent threads never interleave draws
        rng = self._machine.fork_rng()
        result = await asyncio.to_thread(self._machine.simulate, worst, likely, best, rng)

        if seq != self._forecast_seq or epoch != self._epoch:
            logger.info(f"丢弃过期的模拟结果 (seq={seq}, latest={self._forecast_seq})")
            await self._emit("forecast_discarded", {"seq": seq})
            return ForecastOutcome(superseded=True)

        transition = self._machine.forecast(inputs, result=result)
        if not transition.accepted:
            await self._emit("transition_rejected", transition.error.to_dict())
            return ForecastOutcome(error=transition.error)
        await self._emit("forecast_applied", result.to_dict())
        return ForecastOutcome(result=result)

    # =========================================================================
    # 顾问调用 / Advisor calls
    # =========================================================================

    async def suggest_alternatives(
        self, alternatives: Optional[Sequence[Alternative]] = None
    ) -> AdvisorReply[AlternativeSuggestions]:
        """请顾问补充方案。alternatives 为尚未提交的草稿列表。"""
        record = self.record
        if alternatives is not None:
            record = replace(record, alternatives=tuple(alternatives))
        return await self._advise(
            Stage.ALTERNATIVES, lambda: self._advisor.suggest_alternatives(record)
        )

    async def scoring_insight(self, scores: ScoreMatrix) -> AdvisorReply[str]:
        record = self.record
        matrix = fill_score_matrix(record.alternatives, record.criteria, scores)
        rankings = rank(record.alternatives, record.criteria, matrix)
        return await self._advise(
            Stage.SCORING,
            lambda: self._advisor.scoring_insight(record, matrix, rankings),
        )

    async def suggest_risks(self) -> AdvisorReply[List[RiskSuggestion]]:
        record = self.record
        return await self._advise(
            Stage.PREMORTEM, lambda: self._advisor.suggest_risks(record)
        )

    async def refine_memo(self, raw_text: str) -> AdvisorReply[str]:
        """润色展示层生成的备忘录纯文本。"""
        return await self._advise(
            Stage.SYNTHESIS, lambda: self._advisor.refine_memo(raw_text)
        )

    async def _advise(
        self,
        stage: Stage,
        call: Callable[[], Awaitable[AdvisorReply[T]]],
    ) -> AdvisorReply[T]:
        if self.stage != stage:
            return AdvisorReply(
                error=f"{UNAVAILABLE_PREFIX}: not offered in the {self.stage.value} stage"
            )
        if self.advice_pending(stage):
            raise AdvisorBusyError(f"顾问调用进行中: stage={stage.value}")

        epoch = self._epoch
        self._pending_advice[stage] = epoch
        try:
            reply = await call()
        finally:
            if self._pending_advice.get(stage) == epoch:
                del self._pending_advice[stage]

        if epoch != self._epoch:
            logger.info(f"丢弃过期的顾问结果 (stage={stage.value})")
            await self._emit("advisor_discarded", {"stage": stage.value})
            return AdvisorReply(discarded=True)
        if reply.error:
            await self._emit("advisor_failed", {"stage": stage.value, "error": reply.error})
        return reply

    # =========================================================================
    # 事件 / Events
    # =========================================================================

    async def _emit(self, event_type: str, detail: Optional[Dict[str, Any]] = None) -> None:
        """触发事件回调（支持同步和异步回调）。 / Emit event callback (sync and async)."""
        if self._on_event is None:
            return
        result = self._on_event(
            WizardEvent(
                type=event_type,
                stage=self.stage.value,
                session_id=self.session_id,
                detail=detail,
            )
        )
        if inspect.isawaitable(result):
            await result
