# machine.py
# =============================================================================
# 决策向导有限状态机 / Decision wizard finite-state machine
#
# 职责 / Responsibilities:
#   - 维护当前阶段与 DecisionRecord / Hold the current stage and DecisionRecord
#   - 将阶段输入分派给 transitions 中的纯 reducer，校验通过才前进
#     / Dispatch stage inputs to the pure reducers; advance only when they pass
#   - 经济门槛不超过阈值时，前进与后退都跳过风险阶段
#     / Skip the risk stage both ways when the threshold is at or below the cutoff
#   - 后退不丢弃后续阶段已收集的数据；重置从任意阶段回到初始状态
#     / Going back keeps data collected further ahead; reset returns to the start from anywhere
#   - 记录全部命令，支持重放 / Record every command so a session can be replayed
#
# 不负责：异步顾问调用、过期结果丢弃（见 session.py）。
# / Not responsible for: async advisor calls and stale-result handling (see session.py).
# =============================================================================

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from decisionlab.analysis.monte_carlo import simulate
from decisionlab.config import WizardSettings
from decisionlab.primitives.models import DecisionRecord, SimulationResult
from decisionlab.wizard import errors
from decisionlab.wizard.errors import StageValidationError
from decisionlab.wizard.stages import STAGE_ORDER, Stage
from decisionlab.wizard.transitions import (
    AlternativesInput,
    CriteriaInput,
    FramingInput,
    RisksInput,
    ScoresInput,
    UncertaintyInput,
    apply_forecast,
    complete_alternatives,
    complete_criteria,
    complete_framing,
    complete_risks,
    complete_scoring,
    has_forecast_for,
    parse_outcome_triple,
)

logger = logging.getLogger(__name__)


# =============================================================================
# 命令 / Commands
# =============================================================================


@dataclass(frozen=True)
class Back:
    """回到上一个可见阶段。 / Return to the previous visible stage."""


@dataclass(frozen=True)
class Reset:
    """清空记录并回到 Framing。 / Clear the record and return to Framing."""


@dataclass(frozen=True)
class Forecast:
    """在不确定性阶段运行（或应用已算好的）模拟，不离开该阶段。
    / Run (or apply a precomputed) simulation in the uncertainty stage without leaving it.
    """

    inputs: UncertaintyInput
    result: Optional[SimulationResult] = None


StageInput = Union[
    FramingInput, AlternativesInput, CriteriaInput, ScoresInput, UncertaintyInput, RisksInput,
]
Command = Union[StageInput, Forecast, Back, Reset]


@dataclass(frozen=True)
class TransitionResult:
    """一次命令分派的结果。 / Outcome of one dispatched command."""

    accepted: bool
    stage: Stage
    previous_stage: Stage
    record: DecisionRecord
    error: Optional[StageValidationError] = None

    @property
    def stage_changed(self) -> bool:
        return self.stage != self.previous_stage


# =============================================================================
# 状态机 / State machine
# =============================================================================


class WizardStateMachine:
    """决策向导状态机。 / Decision wizard state machine.

    Framing → Alternatives → Criteria → Scoring → Uncertainty → Risks(有条件) → Synthesis
    """

    _STAGE_INPUTS = {
        FramingInput: Stage.FRAMING,
        AlternativesInput: Stage.ALTERNATIVES,
        CriteriaInput: Stage.CRITERIA,
        ScoresInput: Stage.SCORING,
        UncertaintyInput: Stage.UNCERTAINTY,
        RisksInput: Stage.PREMORTEM,
    }

    def __init__(
        self,
        settings: Optional[WizardSettings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """初始化状态机。

        Args:
            settings: 向导配置，默认使用内置默认值。
            rng: Monte Carlo 随机源。不传时按 settings.random_seed 新建，
                传入固定种子的 random.Random 可使重放完全一致。
        """
        self._settings = settings or WizardSettings()
        self._rng = rng if rng is not None else random.Random(self._settings.random_seed)
        self._stage = Stage.FRAMING
        self._record = DecisionRecord()
        self.history: List[Command] = []

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def record(self) -> DecisionRecord:
        return self._record

    @property
    def settings(self) -> WizardSettings:
        return self._settings

    @property
    def risk_stage_enabled(self) -> bool:
        """经济门槛超过阈值时才进入风险阶段。 / Risk stage only above the cutoff."""
        return self._record.meta.threshold > self._settings.risk_stage_cutoff

    def visible_stages(self) -> List[Stage]:
        return [s for s in STAGE_ORDER if s != Stage.PREMORTEM or self.risk_stage_enabled]

    def next_stage(self, stage: Stage) -> Stage:
        stages = self.visible_stages()
        index = stages.index(stage) if stage in stages else STAGE_ORDER.index(stage)
        return stages[min(index + 1, len(stages) - 1)]

    def previous_stage(self, stage: Stage) -> Stage:
        stages = self.visible_stages()
        if stage not in stages:
            # 风险阶段被隐藏后停留其中：回到不确定性阶段
            # / Sitting in a now-hidden risk stage: fall back to uncertainty
            return Stage.UNCERTAINTY
        return stages[max(stages.index(stage) - 1, 0)]

    # =========================================================================
    # 模拟 / Simulation
    # =========================================================================

    def simulate(
        self,
        worst: float,
        likely: float,
        best: float,
        rng: Optional[random.Random] = None,
    ) -> SimulationResult:
        """用注入的随机源与配置的抽样次数运行模拟。
        / Run a simulation with the injected random source and configured trial count.

        Args:
            rng: 单次运行专用的随机源，默认使用状态机自身的随机源。
                / Random source for this run only; defaults to the machine's own.
        """
        return simulate(
            worst, likely, best, trials=self._settings.trials,
            rng=rng if rng is not None else self._rng,
        )

    def fork_rng(self) -> random.Random:
        """从状态机随机源派生一个独立生成器，供工作线程独占使用。
        / Derive an independent generator from the machine's source for one worker thread.
        """
        return random.Random(self._rng.getrandbits(64))

    # =========================================================================
    # 命令分派 / Command dispatch
    # =========================================================================

    def dispatch(self, command: Command) -> TransitionResult:
        """分派一条命令。校验失败时阶段与记录均不变。
        / Dispatch one command. On validation failure stage and record stay untouched.

        Raises:
            TypeError: 未知命令类型（调用方编程错误）。 / Unknown command type (caller bug).
        """
        if isinstance(command, Reset):
            self.history.append(command)
            return self._reset()
        if isinstance(command, Back):
            self.history.append(command)
            return self._back()
        if isinstance(command, Forecast):
            return self._forecast(command)

        expected = self._STAGE_INPUTS.get(type(command))
        if expected is None:
            raise TypeError(f"未知的向导命令类型: {type(command).__name__}")

        if self._stage != expected:
            self.history.append(command)
            return self._reject(
                StageValidationError(
                    errors.WRONG_STAGE,
                    f"{type(command).__name__} belongs to the {expected.value} stage, "
                    f"not {self._stage.value}.",
                )
            )

        try:
            record = self._reduce(command)
        except StageValidationError as e:
            self.history.append(command)
            return self._reject(e)

        self.history.append(command)
        previous = self._stage
        self._record = record
        self._stage = self.next_stage(previous)
        logger.info("阶段迁移: %s → %s", previous.value, self._stage.value)
        return TransitionResult(
            accepted=True, stage=self._stage, previous_stage=previous, record=record,
        )

    def submit(self, stage_input: StageInput) -> TransitionResult:
        return self.dispatch(stage_input)

    def forecast(
        self, inputs: UncertaintyInput, result: Optional[SimulationResult] = None
    ) -> TransitionResult:
        return self.dispatch(Forecast(inputs=inputs, result=result))

    def back(self) -> TransitionResult:
        return self.dispatch(Back())

    def reset(self) -> TransitionResult:
        return self.dispatch(Reset())

    @classmethod
    def replay(
        cls,
        commands: Iterable[Command],
        settings: Optional[WizardSettings] = None,
        rng: Optional[random.Random] = None,
    ) -> WizardStateMachine:
        """按顺序重放命令，重建状态机。 / Rebuild a machine by re-dispatching commands in order.

        history 中的模拟结果均以带 result 的 Forecast 记录，重放不会再抽样。
        / Simulations sit in history as Forecast entries carrying their result,
        so a replay never samples again.
        """
        machine = cls(settings=settings, rng=rng)
        for command in commands:
            machine.dispatch(command)
        return machine

    # =========================================================================
    # 内部实现 / Internals
    # =========================================================================

    def _reduce(self, command: StageInput) -> DecisionRecord:
        record = self._record
        if isinstance(command, FramingInput):
            return complete_framing(
                record, command, risk_stage_cutoff=self._settings.risk_stage_cutoff
            )
        if isinstance(command, AlternativesInput):
            return complete_alternatives(record, command)
        if isinstance(command, CriteriaInput):
            return complete_criteria(record, command)
        if isinstance(command, ScoresInput):
            return complete_scoring(record, command)
        if isinstance(command, UncertaintyInput):
            best, likely, worst = parse_outcome_triple(command)
            if has_forecast_for(record, best, likely, worst):
                return record
            result = self.simulate(worst, likely, best)
            # 先记录已解析的模拟，重放时提交会复用它
            # / Record the resolved run first so a replayed submit reuses it
            self.history.append(Forecast(inputs=command, result=result))
            return apply_forecast(record, best, likely, worst, result)
        return complete_risks(record, command, max_risks=self._settings.max_risks)

    def _forecast(self, command: Forecast) -> TransitionResult:
        if self._stage != Stage.UNCERTAINTY:
            self.history.append(command)
            return self._reject(
                StageValidationError(
                    errors.WRONG_STAGE,
                    f"Forecasts run in the uncertainty stage, not {self._stage.value}.",
                )
            )
        try:
            best, likely, worst = parse_outcome_triple(command.inputs)
        except StageValidationError as e:
            self.history.append(command)
            return self._reject(e)

        result = command.result
        if result is None:
            result = self.simulate(worst, likely, best)
        # 记录已解析的结果，重放时不再消耗随机源 / Store the resolved result so replay does not draw again
        self.history.append(Forecast(inputs=command.inputs, result=result))
        try:
            self._record = apply_forecast(self._record, best, likely, worst, result)
        except StageValidationError as e:
            return self._reject(e)
        return TransitionResult(
            accepted=True, stage=self._stage, previous_stage=self._stage, record=self._record,
        )

    def _back(self) -> TransitionResult:
        previous = self._stage
        if previous == Stage.FRAMING:
            return self._reject(
                StageValidationError(errors.AT_FIRST_STAGE, "Already at the first stage.")
            )
        self._stage = self.previous_stage(previous)
        logger.info("阶段回退: %s → %s", previous.value, self._stage.value)
        return TransitionResult(
            accepted=True, stage=self._stage, previous_stage=previous, record=self._record,
        )

    def _reset(self) -> TransitionResult:
        previous = self._stage
        self._record = DecisionRecord()
        self._stage = Stage.FRAMING
        logger.info("向导已重置（自 %s）", previous.value)
        return TransitionResult(
            accepted=True, stage=self._stage, previous_stage=previous, record=self._record,
        )

    def _reject(self, error: StageValidationError) -> TransitionResult:
        logger.info("阶段迁移被拒绝: stage=%s code=%s", self._stage.value, error.code)
        return TransitionResult(
            accepted=False,
            stage=self._stage,
            previous_stage=self._stage,
            record=self._record,
            error=error,
        )
