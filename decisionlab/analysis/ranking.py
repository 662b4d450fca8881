# ranking.py
# =============================================================================
# 加权多准则排名 / Weighted multi-criteria ranking
#
# 职责 / Responsibilities:
#   - 按给定准则的权重计算每个方案的加权得分
#     / Compute each alternative's weighted score over the given criteria
#   - 以给定准则的权重之和归一化（不假设为 1），以便模式检测器
#     传入准则子集重新排名
#     / Normalize by the given criteria's weight total (not assumed to be 1),
#       so the pattern detector can re-rank over a subset of criteria
#   - 按得分降序稳定排序（同分保持输入顺序）
#     / Stable sort by score descending (ties keep input order)
#
# 纯函数，不抛异常：内部异常转为空列表并记录日志。
# / Pure function that never raises: internal exceptions become an empty list plus a log entry.
# =============================================================================

from __future__ import annotations

import logging
from typing import List, Sequence

from decisionlab.primitives.models import (
    NEUTRAL_SCORE,
    Alternative,
    Criterion,
    RankedAlternative,
    ScoreMatrix,
)

logger = logging.getLogger(__name__)


def rank(
    alternatives: Sequence[Alternative],
    criteria: Sequence[Criterion],
    scores: ScoreMatrix,
) -> List[RankedAlternative]:
    """计算加权得分并按降序返回。 / Compute weighted scores and return them sorted descending.

    缺失的 (方案, 准则) 分数按中性值 5 计。方案或准则为空、
    或权重之和为 0 时返回空列表。
    / Missing (alternative, criterion) entries count as the neutral 5. Empty
    alternatives or criteria, or a zero weight total, yield an empty list.
    """
    try:
        if not alternatives or not criteria:
            return []
        total_weight = sum(c.weight or 0 for c in criteria)
        if total_weight == 0:
            return []

        scores = scores or {}
        ranked = []
        for alt in alternatives:
            row = scores.get(alt.id) or {}
            weighted = 0.0
            for crit in criteria:
                value = row.get(crit.id)
                weighted += (crit.weight or 0) * (NEUTRAL_SCORE if value is None else value)
            ranked.append(
                RankedAlternative(id=alt.id, name=alt.name, score=weighted / total_weight)
            )

        # sorted() 稳定，reverse=True 仍保持同分项的输入顺序
        # / sorted() is stable; reverse=True keeps ties in input order
        return sorted(ranked, key=lambda r: r.score, reverse=True)
    except Exception:
        logger.exception("排名计算失败 / Ranking failed")
        return []
