"""决策备忘录的结构化汇总。 / Structured summary behind the decision memo.

只产出数据，不渲染文本或 markdown；排版与导出由展示层负责。
/ Produces data only; wording, markdown and export belong to the presentation layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from decisionlab.analysis.ranking import rank
from decisionlab.primitives.models import (
    Criterion,
    DecisionRecord,
    RankedAlternative,
    Risk,
    SimulationResult,
)
from decisionlab.wizard.stages import threshold_label

LOSS_NOTABLE_PROBABILITY = 0.05


@dataclass(frozen=True)
class RiskEntry:
    risk: Risk
    priority: bool  # 高可能性且高影响 / high likelihood and high impact


@dataclass(frozen=True)
class SynthesisSummary:
    statement: str
    objectives: str
    threshold_label: str
    reversibility_label: str
    rankings: Tuple[RankedAlternative, ...]
    top: Optional[RankedAlternative]
    criteria_by_weight: Tuple[Criterion, ...]
    mc_result: Optional[SimulationResult]
    risks: Tuple[RiskEntry, ...]
    focus_criterion: Optional[Criterion]
    loss_notable: bool

    @property
    def confidence(self) -> float:
        """第一名的加权得分（0~10）。 / Weighted score of the leader (0..10)."""
        return self.top.score if self.top else 0.0

    @property
    def priority_risks(self) -> List[Risk]:
        return [entry.risk for entry in self.risks if entry.priority]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "statement": self.statement,
            "objectives": self.objectives,
            "threshold_label": self.threshold_label,
            "reversibility_label": self.reversibility_label,
            "rankings": [
                {"id": r.id, "name": r.name, "score": r.score} for r in self.rankings
            ],
            "top": (
                {"id": self.top.id, "name": self.top.name, "score": self.top.score}
                if self.top
                else None
            ),
            "criteria_by_weight": [
                {"id": c.id, "name": c.name, "weight": c.weight}
                for c in self.criteria_by_weight
            ],
            "mc_result": self.mc_result.to_dict() if self.mc_result else None,
            "risks": [
                {
                    "description": e.risk.description,
                    "theme": e.risk.theme,
                    "likelihood": e.risk.likelihood,
                    "impact": e.risk.impact,
                    "mitigation": e.risk.mitigation,
                    "priority": e.priority,
                }
                for e in self.risks
            ],
            "focus_criterion": (
                self.focus_criterion.name if self.focus_criterion else None
            ),
            "loss_notable": self.loss_notable,
        }


def build_synthesis(record: DecisionRecord) -> SynthesisSummary:
    """由 DecisionRecord 汇总备忘录所需数据，排名重新计算。
    / Summarize a DecisionRecord for the memo; rankings are recomputed.
    """
    rankings = tuple(rank(record.alternatives, record.criteria, record.scores))
    # sorted 稳定：同权重保持录入顺序 / stable sort keeps entry order for equal weights
    criteria_by_weight = tuple(
        sorted(record.criteria, key=lambda c: c.weight, reverse=True)
    )
    risks = tuple(
        RiskEntry(risk=r, priority=r.likelihood == "high" and r.impact == "high")
        for r in record.risks
    )
    mc = record.mc_result

    return SynthesisSummary(
        statement=record.statement,
        objectives=record.objectives,
        threshold_label=threshold_label(record.meta.threshold),
        reversibility_label=record.meta.reversibility_label,
        rankings=rankings,
        top=rankings[0] if rankings else None,
        criteria_by_weight=criteria_by_weight,
        mc_result=mc,
        risks=risks,
        focus_criterion=record.criteria[0] if record.criteria else None,
        loss_notable=bool(mc and mc.prob_loss > LOSS_NOTABLE_PROBABILITY),
    )
