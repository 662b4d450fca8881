# tests/wizard/test_synthesis.py
# 备忘录结构化汇总测试 / Memo summary tests

import pytest
from decisionlab.primitives.models import (
    Alternative,
    Criterion,
    DecisionMeta,
    DecisionRecord,
    Risk,
    SimulationResult,
)
from decisionlab.wizard.synthesis import build_synthesis


def _record(**overrides):
    data = dict(
        statement="Build vs buy a CRM",
        objectives="Ship in Q3",
        alternatives=(Alternative("build", "Build"), Alternative("buy", "Buy")),
        criteria=(
            Criterion("time", "Time", 0.3),
            Criterion("cost", "Cost", 0.5),
            Criterion("fit", "Fit", 0.2),
        ),
        scores={
            "build": {"cost": 4, "time": 3, "fit": 9},
            "buy": {"cost": 8, "time": 9, "fit": 5},
        },
        mc_result=SimulationResult(150000, 140000, -20000, 320000, 0.12),
        risks=(
            Risk("Vendor raises prices", "other", "high", "high", "Lock a 3-year rate"),
            Risk("Adoption lags", "other", "medium", "high"),
        ),
        meta=DecisionMeta(threshold=250000, reversibility="moderate", reversibility_label="Moderate"),
    )
    data.update(overrides)
    return DecisionRecord(**data)


class TestBuildSynthesis:
    def test_rankings_and_top(self):
        summary = build_synthesis(_record())
        assert [r.name for r in summary.rankings] == ["Buy", "Build"]
        assert summary.top.name == "Buy"
        assert summary.confidence == pytest.approx(8.7)

    def test_criteria_sorted_by_weight(self):
        summary = build_synthesis(_record())
        assert [c.name for c in summary.criteria_by_weight] == ["Cost", "Time", "Fit"]
        assert summary.focus_criterion.name == "Time"

    def test_priority_risks(self):
        summary = build_synthesis(_record())
        assert [e.priority for e in summary.risks] == [True, False]
        assert [r.description for r in summary.priority_risks] == ["Vendor raises prices"]

    def test_labels_and_loss_flag(self):
        summary = build_synthesis(_record())
        assert summary.threshold_label == "$100K - $500K"
        assert summary.reversibility_label == "Moderate"
        assert summary.loss_notable is True

    def test_small_loss_not_notable(self):
        summary = build_synthesis(_record(mc_result=SimulationResult(1, 1, 0, 2, 0.05)))
        assert summary.loss_notable is False

    def test_empty_record(self):
        summary = build_synthesis(DecisionRecord())
        assert summary.top is None
        assert summary.confidence == 0.0
        assert summary.focus_criterion is None
        assert summary.threshold_label == "Unknown"
        assert summary.loss_notable is False

    def test_to_dict(self):
        data = build_synthesis(_record()).to_dict()
        assert data["top"]["name"] == "Buy"
        assert data["risks"][0]["priority"] is True
        assert data["focus_criterion"] == "Time"
        assert data["mc_result"]["prob_loss"] == 0.12
