#!/usr/bin/env python3
# =============================================================================
# e2e_build_vs_buy.py: 端到端决策向导示例（自建还是采购 CRM）
#
# 按向导顺序走完全部阶段：框定 → 方案 → 准则 → 评分 → 不确定性 → 风险 → 备忘录。
# 顾问使用本地离线的 llm_caller 替身，返回固定回复，便于观察
# 建议接受、过期丢弃与 "AI unavailable" 降级路径。
#
# 用法：
#   python examples/e2e_build_vs_buy.py
#   python examples/e2e_build_vs_buy.py --no-advisor     # 完全不使用顾问
#   python examples/e2e_build_vs_buy.py --seed 7 --threshold 75000
#
# 可选：项目根目录下 decisionlab.yaml 会被自动加载（命令行参数优先）。
# =============================================================================

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# 将项目根目录加入 sys.path，便于直接运行本脚本
_REPO_ROOT = Path(__file__).resolve().parent.parent
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from decisionlab import WizardSession, WizardStateMachine, format_amount
from decisionlab.advisor.service import DecisionAdvisor
from decisionlab.config import SettingsLoader
from decisionlab.primitives.events import WizardEvent
from decisionlab.utils.amounts import range_bar_position
from decisionlab.wizard import drafts
from decisionlab.wizard.stages import STAGE_LABELS, Stage
from decisionlab.wizard.transitions import (
    AlternativesInput,
    CriteriaInput,
    FramingInput,
    RiskDraft,
    RisksInput,
    ScoresInput,
    UncertaintyInput,
)

# 日志配置
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)


# =============================================================================
# 离线顾问替身
# =============================================================================

_CANNED_REPLIES = {
    "Suggest 2-3 additional alternatives": json.dumps({
        "suggestions": ["Buy now, build extensions later", "Open-source CRM with a partner"],
        "rationale": "Phased options keep the switching cost low.",
    }),
    "Analyze multi-criteria decision scores": (
        "Buy wins mainly on time to value; Build only leads on strategic fit."
    ),
    "Pre-mortem for": json.dumps({"risks": [
        {"description": "Customer data migration takes twice as long",
         "category": "Execution", "suggestedLikelihood": "high", "suggestedImpact": "high"},
        {"description": "Sales team rejects the new workflow",
         "category": "Organizational", "suggestedLikelihood": "medium", "suggestedImpact": "high"},
        {"description": "Vendor price increase at renewal",
         "category": "Financial", "suggestedLikelihood": "medium", "suggestedImpact": "medium"},
    ]}),
}


async def offline_llm(system_prompt: str, user_prompt: str) -> str:
    """按提示词开头返回固定回复；备忘录润色模拟一次失败。"""
    await asyncio.sleep(0.05)
    for marker, reply in _CANNED_REPLIES.items():
        if marker in user_prompt:
            return reply
    raise RuntimeError("API error: 503")


def print_event(event: WizardEvent) -> None:
    if event.type == "stage_entered":
        print(f"  → {STAGE_LABELS[Stage(event.stage)]}")
    elif event.type in ("advisor_failed", "transition_rejected"):
        print(f"  ! {event.type}: {event.detail}")


# =============================================================================
# 主流程
# =============================================================================


async def run(args: argparse.Namespace) -> None:
    overrides = {"random_seed": args.seed}
    if args.no_advisor:
        overrides["advisor"] = {"enabled": False}
    loader = SettingsLoader(settings=overrides)
    logger.info("向导配置: %s", loader.summary())
    settings = loader.resolve()

    session = WizardSession(
        machine=WizardStateMachine(settings=settings),
        advisor=DecisionAdvisor(llm_caller=offline_llm, settings=settings.advisor),
        on_event=print_event,
    )

    # 1. 框定
    await session.submit(FramingInput(
        statement="Build vs buy a CRM",
        objectives="Sales team fully live on one system by Q3",
        threshold=args.threshold,
        reversibility="moderate",
    ))

    # 2. 方案（顾问建议仅展示，不采纳）
    alternatives = drafts.add_alternative((), "Build")
    alternatives = drafts.add_alternative(alternatives, "Buy")
    reply = await session.suggest_alternatives(alternatives)
    if reply.ok:
        print(f"  顾问建议: {', '.join(reply.value.suggestions)}  ({reply.value.rationale})")
    else:
        print(f"  {reply.error}，继续手动填写")
    await session.submit(AlternativesInput(alternatives))

    # 3. 准则：三项自定义准则，权重 50/30/20
    criteria = drafts.default_criteria()[:3]
    criteria = drafts.set_weight(criteria, criteria[0].id, 50)
    criteria = drafts.set_weight(criteria, criteria[1].id, 30)
    criteria = drafts.set_weight(criteria, criteria[2].id, 20)
    await session.submit(CriteriaInput(criteria))

    # 4. 评分
    build, buy = (a.id for a in session.record.alternatives)
    c1, c2, c3 = (c.id for c in session.record.criteria)
    grid = drafts.initial_score_grid(session.record.alternatives, session.record.criteria, {})
    for alt_id, values in ((build, (4, 3, 9)), (buy, (8, 9, 5))):
        for crit_id, value in zip((c1, c2, c3), values):
            grid = drafts.set_score(grid, alt_id, crit_id, value)
    preview = session.preview_scores(grid)
    for r in preview.rankings:
        print(f"  {r.name:<8} {r.score:.1f} / 10")
    for insight in preview.insights:
        print(f"  [{insight.type}] {insight.message}")
    insight = await session.scoring_insight(grid)
    if insight.ok:
        print(f"  顾问洞察: {insight.value}")
    await session.submit(ScoresInput(grid))

    # 5. 不确定性
    triple = UncertaintyInput(best_case="$500K", most_likely="$150K", worst_case="-$100K")
    outcome = await session.forecast(triple)
    mc = outcome.result
    print(
        f"  期望 {format_amount(mc.mean)}, P10 {format_amount(mc.p10)}, "
        f"P90 {format_amount(mc.p90)}, 亏损概率 {mc.prob_loss:.0%}, "
        f"最可能值位于区间 {range_bar_position(150000, mc.p10, mc.p90):.0f}%"
    )
    await session.submit(triple)

    # 6. 风险（仅当经济门槛超过阈值）
    if session.stage == Stage.PREMORTEM:
        risks = await session.suggest_risks()
        if risks.ok:
            accepted = drafts.accept_risk_suggestions(risks.value, range(len(risks.value)))
            await session.submit(RisksInput(accepted))
        else:
            await session.submit(RisksInput([
                RiskDraft("Customer data migration slips", "high", "high",
                          "Run a two-week pilot migration"),
            ]))

    # 7. 备忘录
    summary = session.synthesis()
    print(json.dumps(summary.to_dict(), indent=2, ensure_ascii=False))
    memo = await session.refine_memo(f"Recommendation: {summary.top.name}")
    print(f"  备忘录润色: {memo.value if memo.ok else memo.error}")
    logger.info("顾问调用统计: %s", session.advisor.stats.to_dict())


def create_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Decision Lab 端到端示例：自建还是采购 CRM")
    parser.add_argument("--seed", type=int, default=42, help="Monte Carlo 随机种子")
    parser.add_argument("--threshold", type=float, default=250000, help="经济门槛（美元）")
    parser.add_argument("--no-advisor", action="store_true", help="禁用 AI 顾问")
    return parser


if __name__ == "__main__":
    asyncio.run(run(create_arg_parser().parse_args()))
