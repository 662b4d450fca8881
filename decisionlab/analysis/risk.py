"""风险主题分类器。 / Risk theme classifier.

按固定优先级做大小写无关的关键词匹配，首个命中的信号组决定主题。
顺序有意义：一条描述可能同时命中多个组。
/ Case-insensitive keyword matching in a fixed precedence order; the first
matching signal group decides the theme. Order matters because one
description can match several groups.
"""

import re
from typing import List, Tuple

# (信号组, 主题): 按优先级排列 / (signal group, theme) in precedence order
_THEME_RULES: List[Tuple[re.Pattern, str]] = [
    # 高层 / 政治 / 预算 / Leadership, politics, budget
    (
        re.compile(
            r"executive|sponsor|politic|reorg|budget|priorit|competitive pressure",
            re.IGNORECASE,
        ),
        "organizational",
    ),
    # 监管 / 合规 / Regulatory, compliance
    (re.compile(r"regulat|complian|legal|gdpr|audit", re.IGNORECASE), "organizational"),
    # 人才 / 团队能力 / Talent, team capacity
    (re.compile(r"talent|hiring|hire|team|skill|capacity", re.IGNORECASE), "organizational"),
    (re.compile(r"tech|integrat|scalab|infrastr|legacy", re.IGNORECASE), "technical"),
    (re.compile(r"market|competitor|customer|demand", re.IGNORECASE), "market"),
]

DEFAULT_THEME = "other"


def classify_risk(description: str) -> str:
    """将风险描述映射为粗粒度主题。 / Map a risk description to a coarse theme.

    >>> classify_risk("Legacy infrastructure can't scale")
    'technical'
    """
    if not description:
        return DEFAULT_THEME
    for pattern, theme in _THEME_RULES:
        if pattern.search(description):
            return theme
    return DEFAULT_THEME
