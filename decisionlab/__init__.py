# decisionlab/__init__.py
# =============================================================================
# Decision Lab: 结构化商业决策向导核心。 / Structured business decision wizard core.
# =============================================================================

"""Decision Lab: 结构化商业决策向导核心。 / Structured business decision wizard core."""

from decisionlab.analysis.monte_carlo import simulate
from decisionlab.analysis.patterns import detect_patterns
from decisionlab.analysis.ranking import rank
from decisionlab.analysis.risk import classify_risk
from decisionlab.utils.amounts import format_amount, parse_amount
from decisionlab.wizard.machine import WizardStateMachine
from decisionlab.wizard.session import WizardSession

__version__ = "0.1.0"
__all__ = [
    "classify_risk",
    "detect_patterns",
    "format_amount",
    "parse_amount",
    "rank",
    "simulate",
    "WizardSession",
    "WizardStateMachine",
    "__version__",
]
