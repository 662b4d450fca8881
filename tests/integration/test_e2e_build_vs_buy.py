# tests/integration/test_e2e_build_vs_buy.py
# 端到端决策场景：自建还是采购 CRM / End-to-end decision scenario: build vs buy a CRM

import json
from unittest.mock import AsyncMock

import pytest
from decisionlab import WizardSession, WizardStateMachine, format_amount, rank
from decisionlab.advisor.service import DecisionAdvisor
from decisionlab.config import load_settings
from decisionlab.primitives.models import Alternative, Criterion
from decisionlab.wizard import drafts
from decisionlab.wizard.stages import Stage
from decisionlab.wizard.transitions import (
    AlternativesInput,
    CriteriaInput,
    CriterionDraft,
    FramingInput,
    RisksInput,
    ScoresInput,
    UncertaintyInput,
)

ALTERNATIVES = [Alternative("build", "Build"), Alternative("buy", "Buy")]
CRITERIA = [
    CriterionDraft("Cost", 50, id="cost"),
    CriterionDraft("Time", 30, id="time"),
    CriterionDraft("Fit", 20, id="fit"),
]
SCORES = {
    "build": {"cost": 4, "time": 3, "fit": 9},
    "buy": {"cost": 8, "time": 9, "fit": 5},
}


def _fake_llm():
    risks = {"risks": [
        {"description": "Customer data migration slips", "category": "Execution",
         "suggestedLikelihood": "high", "suggestedImpact": "high"},
        {"description": "Vendor roadmap diverges from our needs", "category": "Market",
         "suggestedLikelihood": "medium", "suggestedImpact": "medium"},
    ]}
    return AsyncMock(side_effect=[
        json.dumps({"suggestions": ["Buy and extend"], "rationale": "Hybrid."}),
        "Buy leads mostly on time to value.",
        json.dumps(risks),
        "## Executive summary\nBuy the CRM.",
    ])


class TestBuildVsBuy:
    def test_ranking(self):
        crits = [Criterion(d.id, d.name, d.weight_percent / 100) for d in CRITERIA]
        result = rank(ALTERNATIVES, crits, SCORES)
        assert [r.name for r in result] == ["Buy", "Build"]
        assert result[0].score == pytest.approx(8.7)
        assert result[1].score == pytest.approx(4.7)

    @pytest.mark.asyncio
    async def test_full_session(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        settings = load_settings(settings={"trials": 2000, "random_seed": 42})
        caller = _fake_llm()
        events = []
        session = WizardSession(
            machine=WizardStateMachine(settings=settings),
            advisor=DecisionAdvisor(llm_caller=caller, settings=settings.advisor),
            on_event=events.append,
        )

        assert (await session.submit(
            FramingInput("Build vs buy a CRM", "Sales team live by Q3", 250000, "moderate")
        )).accepted

        suggestions = await session.suggest_alternatives(ALTERNATIVES)
        assert suggestions.ok
        alternatives = drafts.accept_alternative_suggestions(
            ALTERNATIVES, suggestions.value.suggestions
        )
        assert len(alternatives) == 3
        # 只比较原始两个方案 / compare the original two only
        assert (await session.submit(AlternativesInput(ALTERNATIVES))).accepted

        assert (await session.submit(CriteriaInput(CRITERIA))).accepted

        insight = await session.scoring_insight(SCORES)
        assert insight.value == "Buy leads mostly on time to value."
        assert (await session.submit(ScoresInput(SCORES))).accepted
        assert session.record.top_choice.name == "Buy"

        forecast = await session.forecast(UncertaintyInput("$500K", "$150K", "-$100K"))
        assert forecast.applied
        mc = forecast.result
        assert -100000 <= mc.p10 <= mc.median <= mc.p90 <= 500000
        assert (await session.submit(UncertaintyInput("$500K", "$150K", "-$100K"))).accepted
        assert session.record.mc_result == mc
        assert session.stage == Stage.PREMORTEM

        risks = await session.suggest_risks()
        accepted = drafts.accept_risk_suggestions(risks.value, [0, 1])
        assert (await session.submit(RisksInput(accepted))).accepted
        assert [r.theme for r in session.record.risks] == ["market", "other"]
        assert session.stage == Stage.SYNTHESIS

        summary = session.synthesis()
        assert summary.top.name == "Buy"
        assert summary.confidence == pytest.approx(8.7)
        assert [r.description for r in summary.priority_risks] == ["Customer data migration slips"]
        assert summary.threshold_label == "$100K - $500K"
        assert format_amount(mc.mean).startswith("$")

        memo = await session.refine_memo("Decision memo: buy the CRM.")
        assert memo.value.startswith("## Executive summary")

        assert session.advisor.stats.to_dict()["successes"] == 4
        assert [e.type for e in events].count("stage_entered") == 6

        rebuilt = WizardStateMachine.replay(session.machine.history, settings=settings)
        assert rebuilt.record == session.record
        assert rebuilt.stage == Stage.SYNTHESIS
