"""Tests for validating untrusted completion output."""

import pytest

from sellspark.llm.parsing import (
    NarrativeOutput,
    PainAnalysisOutput,
    QuestionOutput,
    extract_json_object,
    parse_model,
)


class TestExtractJsonObject:

    def test_plain_object(self):
        assert extract_json_object('{"admin": 3}') == {"admin": 3}

    def test_object_wrapped_in_prose(self):
        raw = 'Sure! Here you go:\n{"admin": 3}\nHope that helps.'
        assert extract_json_object(raw) == {"admin": 3}

    @pytest.mark.parametrize("raw", ["", "   ", None, "no json here", "[1, 2]", "{broken"])
    def test_rejected_outputs(self, raw):
        with pytest.raises(ValueError):
            extract_json_object(raw)


class TestPainAnalysisOutput:

    def test_positive_scores_only(self):
        result = parse_model('{"admin": 3, "content": 0, "upsell": null}', PainAnalysisOutput)
        assert result.ok
        assert result.value.positive_scores() == {"admin": 3}

    def test_unknown_category_rejected(self):
        result = parse_model('{"admin": 3, "marketing": 5}', PainAnalysisOutput)
        assert not result.ok
        assert "schema mismatch" in result.error

    @pytest.mark.parametrize("value", [-1, 11])
    def test_out_of_range_rejected(self, value):
        assert not parse_model(f'{{"admin": {value}}}', PainAnalysisOutput).ok


class TestQuestionOutput:

    def test_valid_question_is_stripped(self):
        raw = '{"question": "  How do leads find you?  ", "suggested_replies": [" Ads", "Referrals", "Social", "Events"]}'
        result = parse_model(raw, QuestionOutput)
        assert result.value.question == "How do leads find you?"
        assert result.value.suggested_replies[0] == "Ads"

    @pytest.mark.parametrize("raw", [
        '{"question": "Q?", "suggested_replies": ["A", "B", "C"]}',
        '{"question": "Q?", "suggested_replies": ["A", "B", "C", "D", "E"]}',
        '{"question": "Q?", "suggested_replies": ["A", "B", " ", "D"]}',
        '{"question": "   ", "suggested_replies": ["A", "B", "C", "D"]}',
        '{"suggested_replies": ["A", "B", "C", "D"]}',
    ])
    def test_invalid_questions(self, raw):
        assert not parse_model(raw, QuestionOutput).ok


def test_narrative_items_default_to_empty_text():
    result = parse_model('{"narratives": [{"recipe_id": "admin_automation"}]}', NarrativeOutput)
    [item] = result.value.narratives
    assert item.headline == ""
    assert item.explainer == ""
