"""Tests for the pain matrix and answer classification."""

import json
import random

import pytest

from sellspark.services.pain_analyzer import PainAnalyzer, PainCategory, PainMatrix

from fakes import FailingCompletionClient, FakeCompletionClient


class TestPainMatrix:

    def test_starts_empty(self):
        matrix = PainMatrix()
        assert matrix.is_empty()
        assert matrix[PainCategory.ADMIN] == 0
        assert matrix.to_dict() == {}

    def test_apply_is_additive(self):
        matrix = PainMatrix({"follow_up": 3}).apply({"follow_up": 4, "admin": 2})
        assert matrix.to_dict() == {"follow_up": 7, "admin": 2}

    def test_apply_clamps_at_ten(self):
        matrix = PainMatrix({"content": 8}).apply({"content": 9})
        assert matrix["content"] == 10

    def test_apply_ignores_non_positive_deltas(self):
        matrix = PainMatrix({"upsell": 5}).apply({"upsell": 0, "retention": -3})
        assert matrix.to_dict() == {"upsell": 5}

    def test_apply_returns_new_matrix(self):
        original = PainMatrix({"admin": 2})
        original.apply({"admin": 5})
        assert original["admin"] == 2

    def test_rejects_out_of_range_scores(self):
        with pytest.raises(ValueError):
            PainMatrix({"admin": 11})

    def test_rejects_unknown_category(self):
        with pytest.raises(ValueError):
            PainMatrix({"marketing": 3})

    def test_highest_breaks_ties_by_declaration_order(self):
        matrix = PainMatrix({"admin": 6, "onboarding": 6, "content": 2})
        assert matrix.highest() == PainCategory.ONBOARDING

    def test_highest_of_empty_matrix_is_none(self):
        assert PainMatrix().highest() is None

    def test_to_dict_follows_declaration_order(self):
        matrix = PainMatrix({"admin": 1, "lead_flow": 2})
        assert list(matrix.to_dict()) == ["lead_flow", "admin"]

    def test_scores_never_decrease_and_stay_bounded(self):
        rng = random.Random(7)
        matrix = PainMatrix()
        categories = [c.value for c in PainCategory]

        for _ in range(200):
            deltas = {rng.choice(categories): rng.randint(-5, 10) for _ in range(3)}
            updated = matrix.apply(deltas)
            for category in PainCategory:
                assert updated[category] >= matrix[category]
                assert 0 <= updated[category] <= 10
            matrix = updated


class TestPainAnalyzer:

    def test_merges_returned_deltas(self):
        client = FakeCompletionClient(pain={"I chase leads by hand": {"follow_up": 6, "lead_flow": 3}})
        analyzer = PainAnalyzer(client)

        matrix, error = analyzer.apply_answer(PainMatrix({"follow_up": 2}), "I chase leads by hand", "Q?")

        assert error is None
        assert matrix.to_dict() == {"lead_flow": 3, "follow_up": 8}

    def test_prompt_carries_answer_and_question(self):
        client = FakeCompletionClient()
        PainAnalyzer(client).apply_answer(PainMatrix(), "Too many invoices", "What slows you down?")

        prompt = client.calls[0]
        assert "User answer: Too many invoices" in prompt
        assert "What slows you down?" in prompt

    def test_zero_scores_are_ignored(self):
        client = FakeCompletionClient(pain=lambda answer: json.dumps({"admin": 0, "content": 4}))
        matrix, error = PainAnalyzer(client).apply_answer(PainMatrix(), "anything", "Q?")
        assert error is None
        assert matrix.to_dict() == {"content": 4}

    @pytest.mark.parametrize("raw", [
        "not json at all",
        json.dumps({"admin": 14}),
        json.dumps({"marketing": 5}),
        json.dumps({"admin": "lots"}),
        json.dumps(["admin", 5]),
        "",
    ])
    def test_malformed_output_leaves_matrix_unchanged(self, raw):
        client = FakeCompletionClient(pain=lambda answer: raw)
        start = PainMatrix({"admin": 4})

        matrix, error = PainAnalyzer(client).apply_answer(start, "anything", "Q?")

        assert matrix == start
        assert error

    def test_completion_failure_leaves_matrix_unchanged(self):
        start = PainMatrix({"retention": 3})
        matrix, error = PainAnalyzer(FailingCompletionClient()).apply_answer(start, "anything", "Q?")

        assert matrix == start
        assert "unavailable" in error

    def test_json_wrapped_in_prose_is_accepted(self):
        client = FakeCompletionClient(pain=lambda answer: 'Sure! {"onboarding": 5} Hope that helps.')
        matrix, error = PainAnalyzer(client).apply_answer(PainMatrix(), "anything", "Q?")
        assert error is None
        assert matrix["onboarding"] == 5
