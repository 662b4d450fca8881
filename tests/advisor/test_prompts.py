# tests/advisor/test_prompts.py
# 提示词模板测试 / Prompt template tests

import pytest
from decisionlab.advisor import prompts


class TestTemplates:
    @pytest.mark.parametrize(
        "template, fields",
        [
            (
                prompts.ALTERNATIVES_BRAINSTORM,
                dict(statement="s", objectives="o", alternatives="a",
                     threshold_label="t", reversibility_label="r"),
            ),
            (
                prompts.SCORING_INSIGHT,
                dict(ranked_details="d", top_name="n", top_score=1.0,
                     runner_up_name="m", runner_up_score=0.5, gap=0.5),
            ),
            (
                prompts.RISK_BRAINSTORM,
                dict(top_name="n", statement="s", threshold_label="t",
                     reversibility_label="r", objectives="o"),
            ),
            (prompts.MEMO_REFINEMENT, dict(memo="m")),
        ],
    )
    def test_templates_format_cleanly(self, template, fields):
        text = template.format(**fields)
        assert "{{" not in text
        assert text.strip()

    def test_json_examples_keep_braces(self):
        text = prompts.RISK_BRAINSTORM.format(
            top_name="Buy", statement="s", threshold_label="t",
            reversibility_label="r", objectives="o",
        )
        assert '{"risks":[{"description":"1-sentence risk"' in text

    def test_memo_embedded(self):
        assert prompts.MEMO_REFINEMENT.format(memo="RAW").endswith("MEMO:\nRAW")
