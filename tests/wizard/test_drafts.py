# tests/wizard/test_drafts.py
# 阶段内草稿编辑测试 / In-stage draft editing tests

from decisionlab.advisor.payloads import RiskSuggestion
from decisionlab.primitives.models import Alternative, Criterion
from decisionlab.wizard import drafts
from decisionlab.wizard.transitions import CriterionDraft, RiskDraft


def _alts(*names):
    return tuple(Alternative(id=f"a{i}", name=n) for i, n in enumerate(names))


class TestAlternativeDrafts:
    def test_add_trims_and_ignores_blank(self):
        alts = drafts.add_alternative((), "  Build ")
        assert [a.name for a in alts] == ["Build"]
        assert alts[0].id.startswith("alt_")
        assert drafts.add_alternative(alts, "   ") == alts

    def test_add_respects_cap(self):
        five = _alts("A", "B", "C", "D", "E")
        assert drafts.add_alternative(five, "F") == five

    def test_rename(self):
        alts = drafts.rename_alternative(_alts("A", "B"), "a1", "Buy")
        assert [a.name for a in alts] == ["A", "Buy"]

    def test_remove_refused_at_minimum(self):
        two = _alts("A", "B")
        assert drafts.remove_alternative(two, "a0") == two
        assert [a.name for a in drafts.remove_alternative(_alts("A", "B", "C"), "a0")] == ["B", "C"]

    def test_accept_suggestions(self):
        alts = drafts.accept_alternative_suggestions(
            _alts("Build", "Buy"), ["buy", "Partner with a reseller", "", "Phased rollout"],
        )
        assert [a.name for a in alts] == ["Build", "Buy", "Partner with a reseller", "Phased rollout"]

    def test_accept_suggestions_stops_at_cap(self):
        alts = drafts.accept_alternative_suggestions(_alts("A", "B", "C", "D"), ["E", "F", "G"])
        assert [a.name for a in alts] == ["A", "B", "C", "D", "E"]

    def test_inputs_not_mutated(self):
        original = _alts("A", "B")
        drafts.add_alternative(original, "C")
        assert len(original) == 2


class TestCriteriaDrafts:
    def test_default_criteria(self):
        defaults = drafts.default_criteria()
        assert [d.name for d in defaults] == [
            "Expected ROI / Value", "Time to Outcome", "Strategic Fit", "Risk Level",
        ]
        assert [d.weight_percent for d in defaults] == [35, 25, 25, 15]
        assert drafts.weight_total(defaults) == 100

    def test_default_weights(self):
        assert drafts.default_weights(2) == [60, 40]
        assert drafts.default_weights(3) == [45, 35, 20]
        assert drafts.default_weights(5) == [35, 25, 20, 15, 5]
        assert drafts.default_weights(6) == [17] * 6
        assert drafts.default_weights(0) == []

    def test_add_and_remove_reapply_presets(self):
        grown = drafts.add_criterion(drafts.default_criteria(), "Vendor stability")
        assert [d.weight_percent for d in grown] == [35, 25, 20, 15, 5]
        assert drafts.add_criterion(grown, "Sixth") == grown
        shrunk = drafts.remove_criterion(grown, grown[0].id)
        assert [d.weight_percent for d in shrunk] == [35, 25, 25, 15]

    def test_remove_refused_at_minimum(self):
        two = (CriterionDraft("Cost", 60), CriterionDraft("Time", 40))
        assert drafts.remove_criterion(two, two[0].id) == two

    def test_set_weight_clamps(self):
        two = (CriterionDraft("Cost", 60), CriterionDraft("Time", 40))
        updated = drafts.set_weight(two, two[1].id, 140)
        assert updated[1].weight_percent == 100
        assert drafts.set_weight(two, two[0].id, -3)[0].weight_percent == 0

    def test_move_carries_weight(self):
        items = drafts.default_criteria()
        moved = drafts.move_criterion(items, 3, -1)
        assert [d.name for d in moved][2:] == ["Risk Level", "Strategic Fit"]
        assert moved[2].weight_percent == 15
        assert moved[2].id == items[3].id

    def test_move_out_of_bounds_is_noop(self):
        items = drafts.default_criteria()
        assert drafts.move_criterion(items, 0, -1) == items
        assert drafts.move_criterion(items, 3, 1) == items


class TestScoreDrafts:
    def test_initial_grid(self):
        alts = _alts("A", "B")
        crits = (Criterion("c1", "One", 0.5), Criterion("c2", "Two", 0.5))
        grid = drafts.initial_score_grid(alts, crits, {"a0": {"c1": 9}})
        assert grid == {"a0": {"c1": 9, "c2": 5}, "a1": {"c1": 5, "c2": 5}}

    def test_set_score_clamps(self):
        grid = {"a0": {"c1": 5}}
        assert drafts.set_score(grid, "a0", "c1", 14)["a0"]["c1"] == 10
        assert drafts.set_score(grid, "a0", "c1", 0)["a0"]["c1"] == 1
        assert drafts.set_score(grid, "a0", "c1", 6.6)["a0"]["c1"] == 7
        assert grid == {"a0": {"c1": 5}}


class TestRiskSuggestions:
    def test_accept_selected(self):
        suggestions = [
            RiskSuggestion("Legacy ERP can't integrate", "Execution", "high", None),
            RiskSuggestion("Vendor goes under", "Financial", "low", "high"),
        ]
        accepted = drafts.accept_risk_suggestions(suggestions, [0, 5])
        assert accepted == [
            RiskDraft("Legacy ERP can't integrate", "high", "medium"),
        ]
        assert accepted[0].mitigation == ""
        assert accepted[0].is_complete
