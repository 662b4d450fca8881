# wizard/__init__.py
# =============================================================================
# 决策向导: 阶段、纯 reducer、状态机。异步会话见 wizard.session。
# / Decision wizard: stages, pure reducers, state machine. The async session lives in wizard.session.
# =============================================================================

from decisionlab.wizard.errors import StageValidationError
from decisionlab.wizard.machine import (
    Back,
    Forecast,
    Reset,
    TransitionResult,
    WizardStateMachine,
)
from decisionlab.wizard.stages import Stage
from decisionlab.wizard.transitions import (
    AlternativesInput,
    CriteriaInput,
    CriterionDraft,
    FramingInput,
    RiskDraft,
    RisksInput,
    ScoresInput,
    UncertaintyInput,
)

__all__ = [
    "AlternativesInput",
    "Back",
    "CriteriaInput",
    "CriterionDraft",
    "Forecast",
    "FramingInput",
    "Reset",
    "RiskDraft",
    "RisksInput",
    "ScoresInput",
    "Stage",
    "StageValidationError",
    "TransitionResult",
    "UncertaintyInput",
    "WizardStateMachine",
]
