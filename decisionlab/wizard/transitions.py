"""阶段输入与纯 reducer。 / Stage inputs and pure reducers.

每个阶段完成都是一个纯函数 ``(record, input) -> record'``：
校验失败抛出 StageValidationError，不产生任何部分修改。
/ Every stage completion is a pure function ``(record, input) -> record'``:
a failed check raises StageValidationError and nothing is partially applied.

状态机负责决定"下一个阶段是什么"，本模块只负责"数据是否有效、如何合并"。
/ The state machine decides which stage comes next; this module only decides
whether data is valid and how it merges.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Sequence, Tuple, Union

from decisionlab.analysis.ranking import rank
from decisionlab.analysis.risk import classify_risk
from decisionlab.primitives.models import (
    LEVELS,
    MAX_SCORE,
    MIN_SCORE,
    NEUTRAL_SCORE,
    Alternative,
    Criterion,
    DecisionMeta,
    DecisionRecord,
    Risk,
    ScoreMatrix,
    SimulationResult,
    TopChoice,
    generate_id,
)
from decisionlab.utils.amounts import parse_amount
from decisionlab.wizard import errors
from decisionlab.wizard.errors import StageValidationError
from decisionlab.wizard.stages import (
    MAX_ALTERNATIVES,
    MAX_CRITERIA,
    MIN_ALTERNATIVES,
    MIN_CRITERIA,
    REVERSIBILITY_OPTIONS,
    RISK_STAGE_CUTOFF,
)

Amount = Union[str, float, int]


# =============================================================================
# 阶段输入 / Stage inputs
# =============================================================================


@dataclass(frozen=True)
class FramingInput:
    statement: str
    objectives: str
    threshold: float
    reversibility: str  # easy / moderate / hard


@dataclass(frozen=True)
class AlternativesInput:
    alternatives: Sequence[Alternative]


@dataclass(frozen=True)
class CriterionDraft:
    """待提交的准则，权重为整数百分比。 / Criterion awaiting submission, weight as an integer percentage.

    id 在草稿创建时生成，保证重放时评分矩阵的键一致。
    / The id is fixed at draft creation so score keys survive a replay.
    """

    name: str
    weight_percent: int
    id: str = field(default_factory=lambda: generate_id("crit"))


@dataclass(frozen=True)
class CriteriaInput:
    criteria: Sequence[CriterionDraft]


@dataclass(frozen=True)
class ScoresInput:
    scores: ScoreMatrix


@dataclass(frozen=True)
class UncertaintyInput:
    """三种情景值，可为用户输入文本（"$2M"）或数值。
    / Three scenario values, as user text ("$2M") or numbers.
    """

    best_case: Amount
    most_likely: Amount
    worst_case: Amount


@dataclass(frozen=True)
class RiskDraft:
    description: str = ""
    likelihood: Optional[str] = None
    impact: Optional[str] = None
    mitigation: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(
            isinstance(self.description, str)
            and self.description.strip()
            and _normalize_level(self.likelihood)
            and _normalize_level(self.impact)
        )


@dataclass(frozen=True)
class RisksInput:
    """风险列表；skip=True 时允许零风险通过（显式跳过）。
    / Risk list; skip=True lets zero risks through (explicit skip).
    """

    risks: Sequence[RiskDraft] = ()
    skip: bool = False


# =============================================================================
# 工具函数 / Helpers
# =============================================================================


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _normalize_level(value: Optional[str]) -> Optional[str]:
    if not isinstance(value, str):
        return None
    level = value.strip().lower()
    return level if level in LEVELS else None


def fill_score_matrix(
    alternatives: Sequence[Alternative],
    criteria: Sequence[Criterion],
    scores: ScoreMatrix,
) -> Dict[str, Dict[str, int]]:
    """为每个 (方案, 准则) 组合补齐分数，缺失项取中性值 5。
    / Complete the grid for every (alternative, criterion) pair; missing entries become 5.

    不属于当前方案/准则的键会被丢弃。 / Keys for unknown alternatives or criteria are dropped.
    """
    scores = scores or {}
    matrix: Dict[str, Dict[str, int]] = {}
    for alt in alternatives:
        row = scores.get(alt.id) or {}
        matrix[alt.id] = {}
        for crit in criteria:
            value = row.get(crit.id)
            matrix[alt.id][crit.id] = NEUTRAL_SCORE if value is None else value
    return matrix


def _coerce_amount(value: Amount) -> float:
    if _is_number(value):
        number = float(value)
        return number if math.isfinite(number) else math.nan
    return parse_amount(value if isinstance(value, str) else None)


# =============================================================================
# Reducers
# =============================================================================


def complete_framing(
    record: DecisionRecord,
    inp: FramingInput,
    risk_stage_cutoff: float = RISK_STAGE_CUTOFF,
) -> DecisionRecord:
    """合并框定信息。门槛降到风险阶段阈值及以下时，已录入的风险一并清除。
    / Merge framing. Risks already entered are dropped once the threshold no longer
    reaches the risk stage.
    """
    statement = (inp.statement or "").strip()
    objectives = (inp.objectives or "").strip()
    if not statement or not objectives:
        raise StageValidationError(
            errors.FRAMING_INCOMPLETE,
            "Describe the decision and what a successful outcome looks like.",
        )
    if not _is_number(inp.threshold) or not inp.threshold > 0:
        raise StageValidationError(
            errors.THRESHOLD_INVALID, "Select the economic scale of the decision."
        )
    if inp.reversibility not in REVERSIBILITY_OPTIONS:
        raise StageValidationError(
            errors.REVERSIBILITY_INVALID, "Select how reversible the decision is."
        )

    return replace(
        record,
        statement=statement,
        objectives=objectives,
        meta=DecisionMeta(
            threshold=inp.threshold,
            reversibility=inp.reversibility,
            reversibility_label=REVERSIBILITY_OPTIONS[inp.reversibility][0],
        ),
        risks=record.risks if inp.threshold > risk_stage_cutoff else (),
    )


def complete_alternatives(
    record: DecisionRecord, inp: AlternativesInput
) -> DecisionRecord:
    alternatives = tuple(inp.alternatives)
    if not MIN_ALTERNATIVES <= len(alternatives) <= MAX_ALTERNATIVES:
        raise StageValidationError(
            errors.ALTERNATIVE_COUNT,
            f"Provide between {MIN_ALTERNATIVES} and {MAX_ALTERNATIVES} alternatives "
            f"(currently {len(alternatives)}).",
        )
    if any(not (a.name or "").strip() for a in alternatives):
        raise StageValidationError(
            errors.ALTERNATIVE_NAME_EMPTY, "Every alternative needs a name."
        )
    if len({a.id for a in alternatives}) != len(alternatives):
        raise StageValidationError(
            errors.ALTERNATIVE_ID_DUPLICATE, "Alternative identifiers must be unique."
        )

    return replace(
        record,
        alternatives=tuple(replace(a, name=a.name.strip()) for a in alternatives),
    )


def complete_criteria(record: DecisionRecord, inp: CriteriaInput) -> DecisionRecord:
    drafts = tuple(inp.criteria)
    if not MIN_CRITERIA <= len(drafts) <= MAX_CRITERIA:
        raise StageValidationError(
            errors.CRITERIA_COUNT,
            f"Use between {MIN_CRITERIA} and {MAX_CRITERIA} criteria "
            f"(currently {len(drafts)}).",
        )
    if any(not (d.name or "").strip() for d in drafts):
        raise StageValidationError(
            errors.CRITERION_NAME_EMPTY, "Every criterion needs a name."
        )
    for d in drafts:
        if not isinstance(d.weight_percent, int) or isinstance(d.weight_percent, bool) \
                or d.weight_percent < 0:
            raise StageValidationError(
                errors.WEIGHT_INVALID,
                f'Weight for "{d.name.strip()}" must be a whole, non-negative percentage.',
            )
    total = sum(d.weight_percent for d in drafts)
    if total != 100:
        raise StageValidationError(
            errors.WEIGHT_SUM,
            f"Weights must add up to 100% (currently {total}%).",
        )

    return replace(
        record,
        criteria=tuple(
            Criterion(id=d.id, name=d.name.strip(), weight=d.weight_percent / 100)
            for d in drafts
        ),
    )


def complete_scoring(record: DecisionRecord, inp: ScoresInput) -> DecisionRecord:
    """合并评分并选出 TopChoice。 / Merge scores and pick the TopChoice.

    同一方案仍排第一时保留其已填写的情景值；换了第一名则重新开始。
    / If the same alternative still ranks first its scenario values are kept;
    a new leader starts fresh.
    """
    for alt_id, row in (inp.scores or {}).items():
        for crit_id, value in (row or {}).items():
            if not _is_number(value) or not MIN_SCORE <= value <= MAX_SCORE \
                    or value != int(value):
                raise StageValidationError(
                    errors.SCORE_OUT_OF_RANGE,
                    f"Scores must be whole numbers from {MIN_SCORE} to {MAX_SCORE} "
                    f"(got {value!r}).",
                )

    matrix = fill_score_matrix(record.alternatives, record.criteria, inp.scores)
    matrix = {a: {c: int(v) for c, v in row.items()} for a, row in matrix.items()}
    rankings = rank(record.alternatives, record.criteria, matrix)
    if not rankings or len(rankings) != len(record.alternatives):
        raise StageValidationError(
            errors.RANKING_UNAVAILABLE,
            "Alternatives and weighted criteria are required before scoring.",
        )

    leader = rankings[0]
    previous = record.top_choice
    if previous is not None and previous.id == leader.id:
        top_choice = replace(previous, name=leader.name)
        mc_result = record.mc_result
    else:
        # 模拟结果属于旧的第一名 / The simulation belonged to the previous leader
        top_choice = TopChoice(id=leader.id, name=leader.name)
        mc_result = None

    return replace(record, scores=matrix, top_choice=top_choice, mc_result=mc_result)


def parse_outcome_triple(inp: UncertaintyInput) -> Tuple[float, float, float]:
    """解析并校验三种情景值，返回 (best, most_likely, worst)。
    / Parse and validate the scenario triple, returning (best, most_likely, worst).
    """
    best = _coerce_amount(inp.best_case)
    likely = _coerce_amount(inp.most_likely)
    worst = _coerce_amount(inp.worst_case)

    if any(math.isnan(v) for v in (best, likely, worst)):
        raise StageValidationError(
            errors.AMOUNT_INVALID,
            "Please enter valid numbers. Use formats like $2M, $500K, -$100K.",
        )
    if best <= worst:
        raise StageValidationError(
            errors.RANGE_INVALID, "Best case should be higher than worst case."
        )
    if likely > best or likely < worst:
        raise StageValidationError(
            errors.MOST_LIKELY_OUT_OF_RANGE,
            "Most likely outcome should fall between worst and best case.",
        )
    return best, likely, worst


def apply_forecast(
    record: DecisionRecord,
    best: float,
    likely: float,
    worst: float,
    result: SimulationResult,
) -> DecisionRecord:
    if record.top_choice is None:
        raise StageValidationError(
            errors.TOP_CHOICE_MISSING, "Complete scoring before forecasting outcomes."
        )
    return replace(
        record,
        top_choice=replace(
            record.top_choice, best_case=best, most_likely=likely, worst_case=worst,
        ),
        mc_result=result,
    )


def has_forecast_for(record: DecisionRecord, best: float, likely: float, worst: float) -> bool:
    """记录中是否已有对应这组情景值的模拟结果。
    / Whether the record already holds a simulation for this exact triple.
    """
    top = record.top_choice
    return (
        record.mc_result is not None
        and top is not None
        and (top.best_case, top.most_likely, top.worst_case) == (best, likely, worst)
    )


def complete_risks(
    record: DecisionRecord, inp: RisksInput, max_risks: int = 5
) -> DecisionRecord:
    drafts = tuple(inp.risks)
    if len(drafts) > max_risks:
        raise StageValidationError(
            errors.RISK_LIMIT, f"Keep the risk review to at most {max_risks} risks."
        )
    for index, draft in enumerate(drafts, start=1):
        if not draft.is_complete:
            raise StageValidationError(
                errors.RISK_INCOMPLETE,
                f"Risk {index} needs a description, a likelihood and an impact.",
            )
    if not drafts and not inp.skip:
        raise StageValidationError(
            errors.RISK_REQUIRED,
            "Add at least one risk, or skip the risk review explicitly.",
        )

    risks = tuple(
        Risk(
            description=d.description.strip(),
            theme=classify_risk(d.description),
            likelihood=_normalize_level(d.likelihood),
            impact=_normalize_level(d.impact),
            mitigation=(d.mitigation or "").strip(),
        )
        for d in drafts
    )
    return replace(record, risks=risks)
