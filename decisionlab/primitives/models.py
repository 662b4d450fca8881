# models.py
# =============================================================================
# 本模块定义 Decision Lab 决策向导的全部核心数据模型。
# / Core data models of the Decision Lab wizard.
# 包含 / Contains: Alternative、Criterion、RankedAlternative、Insight、
#       TopChoice、SimulationResult、Risk、DecisionMeta、DecisionRecord。
#
# 所有结构均为不可变 dataclass：阶段迁移通过 dataclasses.replace()
# 生成新记录，而不是就地修改。
# / All structures are frozen; stage transitions produce new records via
#   dataclasses.replace() instead of mutating in place.
# =============================================================================

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

# 评分矩阵：alternative id → criterion id → 1..10 整数分
# / Score matrix: alternative id → criterion id → integer score in 1..10
ScoreMatrix = Mapping[str, Mapping[str, int]]

THEMES = ("execution", "market", "technical", "organizational", "financial", "other")
LEVELS = ("low", "medium", "high")

NEUTRAL_SCORE = 5
MIN_SCORE = 1
MAX_SCORE = 10


def generate_id(prefix: str) -> str:
    """生成会话内稳定的短标识。 / Generate a short identifier, stable for the session."""
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


@dataclass(frozen=True)
class Alternative:
    """候选方案。 / A candidate option being compared."""

    id: str
    name: str


@dataclass(frozen=True)
class Criterion:
    """加权评价维度。weight 为 [0, 1] 内的小数。
    / Weighted evaluation dimension. weight is a fraction in [0, 1].
    """

    id: str
    name: str
    weight: float = 0.0


@dataclass(frozen=True)
class RankedAlternative:
    """带加权得分的方案（排名输出项）。 / Alternative extended with its weighted score."""

    id: str
    name: str
    score: float


@dataclass(frozen=True)
class Insight:
    """评分模式检测输出。 / Scoring pattern detector output."""

    type: str  # clustered / dominant / inflated
    message: str


@dataclass(frozen=True)
class TopChoice:
    """排名第一的方案，在不确定性阶段补充三种经济情景值。
    / First-ranked alternative, enriched with three scenario values in the uncertainty stage.
    """

    id: str
    name: str
    best_case: float = 0.0
    most_likely: float = 0.0
    worst_case: float = 0.0


@dataclass(frozen=True)
class SimulationResult:
    """Monte Carlo 汇总统计。每次模拟整体替换，不做局部修改。
    / Monte Carlo summary statistics. Replaced wholesale by each run.
    """

    mean: float
    median: float
    p10: float
    p90: float
    prob_loss: float

    @classmethod
    def zero(cls) -> SimulationResult:
        return cls(mean=0.0, median=0.0, p10=0.0, p90=0.0, prob_loss=0.0)

    def to_dict(self) -> Dict[str, float]:
        return {
            "mean": self.mean,
            "median": self.median,
            "p10": self.p10,
            "p90": self.p90,
            "prob_loss": self.prob_loss,
        }


@dataclass(frozen=True)
class Risk:
    """事前验尸（pre-mortem）识别出的风险。theme 仅由 RiskClassifier 赋值。
    / Risk surfaced by the pre-mortem. theme is assigned by the classifier only.
    """

    description: str
    theme: str  # THEMES 之一 / one of THEMES
    likelihood: str  # LEVELS 之一 / one of LEVELS
    impact: str  # LEVELS 之一 / one of LEVELS
    mitigation: str = ""


@dataclass(frozen=True)
class DecisionMeta:
    """决策框定元信息。 / Framing metadata."""

    threshold: float = 0
    reversibility: str = ""  # easy / moderate / hard
    reversibility_label: str = ""  # High / Moderate / Low


@dataclass(frozen=True)
class DecisionRecord:
    """聚合根: 向导会话独占，阶段完成时合并各自字段。
    / Aggregate root, owned by one wizard session; each completed stage merges its fields in.

    向导开始时为空，显式重置时恢复为空。
    / Empty at wizard start and again after an explicit reset.
    """

    statement: str = ""
    objectives: str = ""
    alternatives: Tuple[Alternative, ...] = ()
    criteria: Tuple[Criterion, ...] = ()
    scores: Mapping[str, Mapping[str, int]] = field(default_factory=dict)
    top_choice: Optional[TopChoice] = None
    mc_result: Optional[SimulationResult] = None
    risks: Tuple[Risk, ...] = ()
    meta: DecisionMeta = field(default_factory=DecisionMeta)

    def to_dict(self) -> Dict[str, Any]:
        """序列化为字典，交给展示层使用。 / Serialize to a dict for the presentation layer."""
        return {
            "statement": self.statement,
            "objectives": self.objectives,
            "alternatives": [{"id": a.id, "name": a.name} for a in self.alternatives],
            "criteria": [
                {"id": c.id, "name": c.name, "weight": c.weight}
                for c in self.criteria
            ],
            "scores": {
                alt_id: dict(row) for alt_id, row in self.scores.items()
            },
            "top_choice": (
                {
                    "id": self.top_choice.id,
                    "name": self.top_choice.name,
                    "best_case": self.top_choice.best_case,
                    "most_likely": self.top_choice.most_likely,
                    "worst_case": self.top_choice.worst_case,
                }
                if self.top_choice
                else None
            ),
            "mc_result": self.mc_result.to_dict() if self.mc_result else None,
            "risks": [
                {
                    "description": r.description,
                    "theme": r.theme,
                    "likelihood": r.likelihood,
                    "impact": r.impact,
                    "mitigation": r.mitigation,
                }
                for r in self.risks
            ],
            "meta": {
                "threshold": self.meta.threshold,
                "reversibility": self.meta.reversibility,
                "reversibility_label": self.meta.reversibility_label,
            },
        }
