# tests/analysis/test_risk_classifier.py
# 风险主题分类测试 / Risk theme classifier tests

import pytest
from decisionlab.analysis.risk import classify_risk


class TestClassifyRisk:
    @pytest.mark.parametrize(
        "description, theme",
        [
            ("Our top engineer on the team might leave", "organizational"),
            ("Competitor launches a cheaper product", "market"),
            ("Legacy infrastructure can't scale", "technical"),
            ("Office plant dies", "other"),
            ("Executive sponsor changes roles", "organizational"),
            ("GDPR audit flags data handling", "organizational"),
            ("Integration with billing breaks", "technical"),
            ("Customer demand softens", "market"),
        ],
    )
    def test_examples(self, description, theme):
        assert classify_risk(description) == theme

    def test_case_insensitive(self):
        assert classify_risk("LEGACY SYSTEMS") == "technical"

    def test_precedence_first_group_wins(self):
        # 同时命中 team（组织）与 tech（技术） / matches both team and tech
        assert classify_risk("The tech team lacks capacity") == "organizational"
        # 同时命中 integrat（技术）与 market（市场）
        assert classify_risk("Market data integration slips") == "technical"

    def test_deterministic(self):
        text = "Budget cuts after reorg"
        assert classify_risk(text) == classify_risk(text) == "organizational"

    def test_empty(self):
        assert classify_risk("") == "other"
