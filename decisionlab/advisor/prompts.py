"""Decision Lab 顾问提示词模板。

本文件集中管理外部 AI 顾问的四类提示词。每个模板均标注调用位置和用途，
模板使用 str.format 填充，字面花括号写作 {{ }}。

提示词分类：
1. 系统提示词: 所有调用共用
2. 方案头脑风暴: Alternatives 阶段
3. 评分洞察: Scoring 阶段
4. 事前验尸风险头脑风暴: Risks 阶段
5. 备忘录润色: Synthesis 阶段
"""

# =============================================================================
# 系统提示词
# =============================================================================

# 调用位置: service.py DecisionAdvisor 所有调用
# 用途: 设定顾问角色
ADVISOR_SYSTEM = (
    "You are a strategic decision advisor helping a business leader "
    "structure an important decision. Be concrete and concise."
)


# =============================================================================
# Alternatives 阶段
# =============================================================================

# 调用位置: service.py DecisionAdvisor.suggest_alternatives()
# 用途: 建议 2-3 个用户尚未考虑的方案，输出 JSON 对象
ALTERNATIVES_BRAINSTORM = (
    "A business leader is evaluating a decision.\n"
    "DECISION CONTEXT:\n"
    '- Statement: "{statement}"\n'
    '- Success criteria: "{objectives}"\n'
    "- Current alternatives: {alternatives}\n"
    "- Scale: {threshold_label}\n"
    "- Reversibility: {reversibility_label}\n"
    "TASK: Suggest 2-3 additional alternatives they might not have considered.\n"
    "Focus on: hybrid approaches, phased/staged strategies, non-obvious options.\n"
    "OUTPUT FORMAT (JSON only, no markdown):\n"
    '{{"suggestions":["Alternative description here"],'
    '"rationale":"Brief 1-sentence explanation"}}'
)


# =============================================================================
# Scoring 阶段
# =============================================================================

# 调用位置: service.py DecisionAdvisor.scoring_insight()
# 用途: 对加权评分结果给出一条关于取舍的观察，纯文本
SCORING_INSIGHT = (
    "Analyze multi-criteria decision scores:\n"
    "{ranked_details}\n"
    'TOP: "{top_name}" ({top_score:.1f}/10)\n'
    'RUNNER-UP: "{runner_up_name}" ({runner_up_score:.1f}/10)\n'
    "GAP: {gap:.1f} points\n"
    "Provide ONE insightful observation (2-3 sentences) about key trade-offs. "
    "Plain text, conversational."
)

# 调用位置: service.py build_scoring_insight_prompt()
# 用途: SCORING_INSIGHT 中每个方案的一行明细
SCORING_INSIGHT_LINE = '"{name}": Total {score:.1f}/10 [{details}]'


# =============================================================================
# Risks 阶段
# =============================================================================

# 调用位置: service.py DecisionAdvisor.suggest_risks()
# 用途: 针对排名第一的方案生成 4-5 条风险，输出 JSON 对象
RISK_BRAINSTORM = (
    'Pre-mortem for: "{top_name}". Decision: "{statement}". '
    "Scale: {threshold_label}. Reversibility: {reversibility_label}. "
    'Objectives: "{objectives}".\n'
    "Generate 4-5 specific risks. JSON only:\n"
    '{{"risks":[{{"description":"1-sentence risk",'
    '"category":"Execution|Market|Technical|Organizational|Financial",'
    '"suggestedLikelihood":"high|medium|low",'
    '"suggestedImpact":"high|medium|low"}}]}}'
)


# =============================================================================
# Synthesis 阶段
# =============================================================================

# 调用位置: service.py DecisionAdvisor.refine_memo()
# 用途: 润色展示层生成的备忘录纯文本
MEMO_REFINEMENT = (
    "Polish this decision memo for executive review. Add exec summary, "
    "tighten language, keep all data. Max 20% length increase. "
    "Return as plain text with markdown headers.\n"
    "MEMO:\n"
    "{memo}"
)
