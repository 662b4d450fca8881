# tests/advisor/test_payloads.py
# 顾问回复解析测试 / Advisor reply parsing tests

import json

import pytest
from decisionlab.advisor.payloads import (
    AlternativeSuggestions,
    RiskSuggestion,
    parse_alternative_suggestions,
    parse_risk_suggestions,
    parse_text,
)


class TestAlternativeSuggestions:
    def test_plain_json(self):
        raw = json.dumps({"suggestions": ["Phased rollout", " Partner "], "rationale": "Hedge. "})
        assert parse_alternative_suggestions(raw) == AlternativeSuggestions(
            suggestions=("Phased rollout", "Partner"), rationale="Hedge.",
        )

    def test_code_block_and_junk_entries(self):
        raw = '```json\n{"suggestions": ["Lease", 42, "", null]}\n```'
        result = parse_alternative_suggestions(raw)
        assert result.suggestions == ("Lease",)
        assert result.rationale == ""

    @pytest.mark.parametrize(
        "raw",
        [
            "no json here",
            '{"ideas": ["x"]}',
            '{"suggestions": "Lease"}',
            '{"suggestions": []}',
        ],
    )
    def test_malformed(self, raw):
        with pytest.raises(ValueError):
            parse_alternative_suggestions(raw)


class TestRiskSuggestions:
    def test_object_with_suggested_levels(self):
        raw = json.dumps({"risks": [{
            "description": "Vendor raises prices",
            "category": "Financial",
            "suggestedLikelihood": "HIGH",
            "suggestedImpact": "medium",
        }]})
        assert parse_risk_suggestions(raw) == [
            RiskSuggestion("Vendor raises prices", "Financial", "high", "medium"),
        ]

    def test_bare_array_and_invalid_levels(self):
        raw = 'Here you go: [{"description": "Adoption lags", "likelihood": "very", "impact": "low"}]'
        result = parse_risk_suggestions(raw)
        assert result == [RiskSuggestion("Adoption lags", "", None, "low")]

    def test_skips_entries_without_description(self):
        raw = json.dumps({"risks": [{"category": "Market"}, "text", {"description": "Churn"}]})
        assert [r.description for r in parse_risk_suggestions(raw)] == ["Churn"]

    @pytest.mark.parametrize("raw", ['{"risks": null}', '{"risks": [{}]}', ""])
    def test_malformed(self, raw):
        with pytest.raises(ValueError):
            parse_risk_suggestions(raw)


class TestParseText:
    def test_strips(self):
        assert parse_text("  Buy wins on time.  ") == "Buy wins on time."

    @pytest.mark.parametrize("raw", ["", "   ", None, 3])
    def test_blank(self, raw):
        with pytest.raises(ValueError):
            parse_text(raw)
