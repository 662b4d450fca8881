"""评分模式检测器。 / Scoring pattern detector.

对排名与原始评分做三项独立的启发式检查，每条规则最多输出一条提示：
/ Three independent heuristics over rankings and raw scores, at most one insight each:

1. clustered: 首末得分差 < 1 分 / top-to-bottom spread under 1 point
2. dominant: 去掉某个准则后第一名易主 / removing one criterion changes the winner
3. inflated: 超过 70% 的分数 ≥ 7 / more than 70% of entries are 7 or above
"""

import logging
from typing import List, Sequence

from decisionlab.analysis.ranking import rank
from decisionlab.primitives.models import (
    Alternative,
    Criterion,
    Insight,
    RankedAlternative,
    ScoreMatrix,
)

logger = logging.getLogger(__name__)

CLUSTERED_SPREAD = 1.0
HIGH_SCORE = 7
INFLATED_RATIO = 0.7

CLUSTERED_MESSAGE = (
    "These scores are very close, within 1 point of each other. "
    "What's the real tie-breaker that the numbers aren't capturing?"
)
DOMINANT_MESSAGE = (
    '"{criterion}" is driving most of the difference. Without it, '
    "{alternative} would be #1 instead. Is that weighting intentional?"
)
INFLATED_MESSAGE = (
    "Most scores are 7 or above. If everything is 'good,' the analysis loses "
    "its ability to differentiate. Consider recalibrating what 'average' (5) "
    "looks like."
)


def _clustered(rankings: Sequence[RankedAlternative]) -> List[Insight]:
    if len(rankings) < 2:
        return []
    spread = rankings[0].score - rankings[-1].score
    if spread < CLUSTERED_SPREAD:
        return [Insight(type="clustered", message=CLUSTERED_MESSAGE)]
    return []


def _dominant(
    rankings: Sequence[RankedAlternative],
    alternatives: Sequence[Alternative],
    criteria: Sequence[Criterion],
    scores: ScoreMatrix,
) -> List[Insight]:
    if len(rankings) < 2 or len(criteria) < 2:
        return []
    leader = rankings[0].id
    for crit in criteria:
        others = [c for c in criteria if c.id != crit.id]
        alt_rankings = rank(alternatives, others, scores)
        if len(alt_rankings) >= 2 and alt_rankings[0].id != leader:
            return [
                Insight(
                    type="dominant",
                    message=DOMINANT_MESSAGE.format(
                        criterion=crit.name, alternative=alt_rankings[0].name,
                    ),
                )
            ]
    return []


def _inflated(
    alternatives: Sequence[Alternative],
    criteria: Sequence[Criterion],
    scores: ScoreMatrix,
) -> List[Insight]:
    high_count = 0
    total_count = 0
    for alt in alternatives:
        row = scores.get(alt.id) or {}
        for crit in criteria:
            value = row.get(crit.id)
            if value is None:
                continue
            total_count += 1
            if value >= HIGH_SCORE:
                high_count += 1
    if total_count and high_count / total_count > INFLATED_RATIO:
        return [Insight(type="inflated", message=INFLATED_MESSAGE)]
    return []


def detect_patterns(
    rankings: Sequence[RankedAlternative],
    alternatives: Sequence[Alternative],
    criteria: Sequence[Criterion],
    scores: ScoreMatrix,
) -> List[Insight]:
    """运行全部检测规则，按 clustered → dominant → inflated 顺序返回。
    / Run every rule; results come back in clustered, dominant, inflated order.

    内部异常时返回空列表并记录日志。 / Returns an empty list on internal errors.
    """
    try:
        if not rankings or not criteria:
            return []
        scores = scores or {}
        insights: List[Insight] = []
        insights.extend(_clustered(rankings))
        insights.extend(_dominant(rankings, alternatives, criteria, scores))
        insights.extend(_inflated(alternatives, criteria, scores))
        return insights
    except Exception:
        logger.exception("评分模式检测失败 / Pattern detection failed")
        return []
