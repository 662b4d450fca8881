# stages.py
# =============================================================================
# 向导阶段定义与选项表 / Wizard stage definitions and option tables
# =============================================================================

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Tuple


class Stage(str, Enum):
    """决策向导的有序阶段。 / Ordered decision-making stages."""

    FRAMING = "framing"
    ALTERNATIVES = "alternatives"
    CRITERIA = "criteria"
    SCORING = "scoring"
    UNCERTAINTY = "uncertainty"
    PREMORTEM = "premortem"  # 风险阶段（有条件） / Risk stage (conditional)
    SYNTHESIS = "synthesis"


STAGE_ORDER: Tuple[Stage, ...] = (
    Stage.FRAMING,
    Stage.ALTERNATIVES,
    Stage.CRITERIA,
    Stage.SCORING,
    Stage.UNCERTAINTY,
    Stage.PREMORTEM,
    Stage.SYNTHESIS,
)

STAGE_LABELS: Dict[Stage, str] = {
    Stage.FRAMING: "Framing",
    Stage.ALTERNATIVES: "Alternatives",
    Stage.CRITERIA: "Criteria",
    Stage.SCORING: "Scoring",
    Stage.UNCERTAINTY: "Uncertainty",
    Stage.PREMORTEM: "Risks",
    Stage.SYNTHESIS: "Memo",
}

RISK_STAGE_CUTOFF = 100000

MIN_ALTERNATIVES = 2
MAX_ALTERNATIVES = 5
MIN_CRITERIA = 2
MAX_CRITERIA = 5

# (标签, 数值) / (label, value)
THRESHOLD_OPTIONS: List[Tuple[str, int]] = [
    ("Under $50K", 25000),
    ("$50K - $100K", 75000),
    ("$100K - $500K", 250000),
    ("$500K - $1M", 750000),
    ("Over $1M", 1500000),
]

# 取值 → (标签, 描述) / value → (label, description)
REVERSIBILITY_OPTIONS: Dict[str, Tuple[str, str]] = {
    "easy": ("High", "Low switching costs, easily reversible."),
    "moderate": ("Moderate", "Manageable pivot, some sunk costs."),
    "hard": ("Low", "Significant sunk costs, extremely hard to undo."),
}

DEFAULT_CRITERIA_NAMES: Tuple[str, ...] = (
    "Expected ROI / Value",
    "Time to Outcome",
    "Strategic Fit",
    "Risk Level",
)

# 按准则数量的默认权重（整数百分比） / Default integer weights by criteria count
WEIGHT_PRESETS: Dict[int, List[int]] = {
    2: [60, 40],
    3: [45, 35, 20],
    4: [35, 25, 25, 15],
    5: [35, 25, 20, 15, 5],
}


def threshold_label(value: float) -> str:
    """经济门槛的展示标签，未匹配预设时为 "Unknown"。
    / Display label of an economic threshold, "Unknown" when it matches no preset.
    """
    for label, option in THRESHOLD_OPTIONS:
        if option == value:
            return label
    return "Unknown"


def reversibility_label(value: str) -> str:
    option = REVERSIBILITY_OPTIONS.get(value)
    return option[0] if option else ""
