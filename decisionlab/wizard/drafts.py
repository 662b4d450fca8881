"""阶段内草稿编辑辅助函数。 / In-stage draft editing helpers.

展示层在用户提交某个阶段之前，用这些纯函数维护本地草稿：
增删改方案、默认准则与权重预设、调整准则顺序、评分网格、接受顾问建议。
所有函数都返回新的元组/字典，不修改入参。
/ Pure helpers the presentation layer uses to maintain local drafts before a
stage is submitted. Every function returns new tuples/dicts; inputs are never mutated.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from decisionlab.primitives.models import (
    LEVELS,
    MAX_SCORE,
    MIN_SCORE,
    Alternative,
    Criterion,
    generate_id,
)
from decisionlab.wizard.stages import (
    DEFAULT_CRITERIA_NAMES,
    MAX_ALTERNATIVES,
    MAX_CRITERIA,
    MIN_ALTERNATIVES,
    MIN_CRITERIA,
    WEIGHT_PRESETS,
)
from decisionlab.wizard.transitions import CriterionDraft, RiskDraft, fill_score_matrix


# =============================================================================
# 方案 / Alternatives
# =============================================================================


def add_alternative(
    alternatives: Sequence[Alternative], name: str
) -> Tuple[Alternative, ...]:
    """追加方案；名称为空或已达上限时原样返回。
    / Append an alternative; unchanged when the name is blank or the cap is reached.
    """
    name = (name or "").strip()
    if not name or len(alternatives) >= MAX_ALTERNATIVES:
        return tuple(alternatives)
    return tuple(alternatives) + (Alternative(id=generate_id("alt"), name=name),)


def rename_alternative(
    alternatives: Sequence[Alternative], alt_id: str, name: str
) -> Tuple[Alternative, ...]:
    return tuple(
        replace(a, name=name) if a.id == alt_id else a for a in alternatives
    )


def remove_alternative(
    alternatives: Sequence[Alternative], alt_id: str
) -> Tuple[Alternative, ...]:
    """删除方案；少于等于下限时拒绝。 / Remove an alternative; refused at the minimum."""
    if len(alternatives) <= MIN_ALTERNATIVES:
        return tuple(alternatives)
    return tuple(a for a in alternatives if a.id != alt_id)


def accept_alternative_suggestions(
    alternatives: Sequence[Alternative], suggestions: Iterable[str]
) -> Tuple[Alternative, ...]:
    """将顾问建议追加为方案，跳过重复（大小写无关），不超过上限。
    / Append advisor suggestions as alternatives, skipping case-insensitive
    duplicates and stopping at the cap.
    """
    result = tuple(alternatives)
    seen = {a.name.strip().lower() for a in result}
    for suggestion in suggestions:
        key = (suggestion or "").strip().lower()
        if not key or key in seen:
            continue
        grown = add_alternative(result, suggestion)
        if len(grown) == len(result):
            break
        result = grown
        seen.add(key)
    return result


# =============================================================================
# 准则与权重 / Criteria and weights
# =============================================================================


def default_weights(count: int) -> List[int]:
    """按准则数量给出默认整数权重。 / Default integer weights for a criteria count."""
    if count in WEIGHT_PRESETS:
        return list(WEIGHT_PRESETS[count])
    if count <= 0:
        return []
    return [round(100 / count)] * count


def default_criteria() -> Tuple[CriterionDraft, ...]:
    """默认的四个准则，带预设权重。 / The four default criteria with preset weights."""
    weights = default_weights(len(DEFAULT_CRITERIA_NAMES))
    return tuple(
        CriterionDraft(name=name, weight_percent=weight)
        for name, weight in zip(DEFAULT_CRITERIA_NAMES, weights)
    )


def add_criterion(
    drafts: Sequence[CriterionDraft], name: str
) -> Tuple[CriterionDraft, ...]:
    """追加准则并按新数量重置默认权重。 / Append a criterion and re-apply preset weights."""
    name = (name or "").strip()
    if not name or len(drafts) >= MAX_CRITERIA:
        return tuple(drafts)
    grown = tuple(drafts) + (CriterionDraft(name=name, weight_percent=0),)
    return reset_weights(grown)


def remove_criterion(
    drafts: Sequence[CriterionDraft], crit_id: str
) -> Tuple[CriterionDraft, ...]:
    if len(drafts) <= MIN_CRITERIA:
        return tuple(drafts)
    return reset_weights(tuple(d for d in drafts if d.id != crit_id))


def reset_weights(drafts: Sequence[CriterionDraft]) -> Tuple[CriterionDraft, ...]:
    weights = default_weights(len(drafts))
    return tuple(replace(d, weight_percent=w) for d, w in zip(drafts, weights))


def set_weight(
    drafts: Sequence[CriterionDraft], crit_id: str, weight_percent: int
) -> Tuple[CriterionDraft, ...]:
    weight_percent = max(0, min(100, int(weight_percent)))
    return tuple(
        replace(d, weight_percent=weight_percent) if d.id == crit_id else d
        for d in drafts
    )


def move_criterion(
    drafts: Sequence[CriterionDraft], index: int, offset: int
) -> Tuple[CriterionDraft, ...]:
    """上移（offset=-1）或下移（offset=1）准则，权重随准则一起移动。
    / Move a criterion up (offset=-1) or down (offset=1); its weight moves with it.
    """
    items = list(drafts)
    target = index + offset
    if not 0 <= index < len(items) or not 0 <= target < len(items):
        return tuple(items)
    items[index], items[target] = items[target], items[index]
    return tuple(items)


def weight_total(drafts: Sequence[CriterionDraft]) -> int:
    return sum(d.weight_percent for d in drafts)


# =============================================================================
# 评分 / Scoring
# =============================================================================


def initial_score_grid(
    alternatives: Sequence[Alternative],
    criteria: Sequence[Criterion],
    existing: Mapping[str, Mapping[str, int]],
) -> Dict[str, Dict[str, int]]:
    """评分网格初值：沿用已有分数，其余为 5。 / Initial grid: existing scores, 5 elsewhere."""
    return fill_score_matrix(alternatives, criteria, existing)


def set_score(
    grid: Mapping[str, Mapping[str, int]], alt_id: str, crit_id: str, value: float
) -> Dict[str, Dict[str, int]]:
    """设置单个分数，截断到 [1, 10] 的整数。 / Set one score, clamped to an integer in [1, 10]."""
    clamped = max(MIN_SCORE, min(MAX_SCORE, int(round(value))))
    updated = {a: dict(row) for a, row in grid.items()}
    updated.setdefault(alt_id, {})[crit_id] = clamped
    return updated


# =============================================================================
# 风险 / Risks
# =============================================================================


def accept_risk_suggestions(
    suggestions: Sequence, selected: Iterable[int]
) -> List[RiskDraft]:
    """将选中的顾问风险建议转为 RiskDraft；缺失或非法等级取 medium。
    提交时主题由分类器判定，顾问给出的 category 不参与。
    / Turn selected advisor risk suggestions into RiskDrafts; missing or invalid
    levels become medium. On submit the theme comes from the classifier, never
    from the advisor category.
    """
    chosen = sorted(set(selected))
    risks: List[RiskDraft] = []
    for index in chosen:
        if not 0 <= index < len(suggestions):
            continue
        suggestion = suggestions[index]
        likelihood = suggestion.likelihood if suggestion.likelihood in LEVELS else "medium"
        impact = suggestion.impact if suggestion.impact in LEVELS else "medium"
        risks.append(
            RiskDraft(
                description=suggestion.description,
                likelihood=likelihood,
                impact=impact,
            )
        )
    return risks
