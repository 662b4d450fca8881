# analysis/__init__.py
# =============================================================================
# 决策分析核心: 排名、模式检测、Monte Carlo、风险分类。
# / Decision analytics core: ranking, pattern detection, Monte Carlo, risk classification.
# =============================================================================

from decisionlab.analysis.monte_carlo import DEFAULT_TRIALS, sample_triangular, simulate
from decisionlab.analysis.patterns import detect_patterns
from decisionlab.analysis.ranking import rank
from decisionlab.analysis.risk import classify_risk

__all__ = [
    "DEFAULT_TRIALS",
    "classify_risk",
    "detect_patterns",
    "rank",
    "sample_triangular",
    "simulate",
]
