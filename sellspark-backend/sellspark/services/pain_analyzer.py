# sellspark/services/pain_analyzer.py

import logging
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple

from sellspark.llm.parsing import PainAnalysisOutput, parse_model
from sellspark.llm.prompts import PAIN_ANALYSIS_PROMPT
from sellspark.utils.errors import CompletionError

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

MAX_SCORE = 10


class PainCategory(str, Enum):
    # Declaration order is the tie-break order everywhere
    LEAD_FLOW = "lead_flow"
    FOLLOW_UP = "follow_up"
    ONBOARDING = "onboarding"
    ACCOUNTABILITY = "accountability"
    CONTENT = "content"
    UPSELL = "upsell"
    RETENTION = "retention"
    ADMIN = "admin"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


class PainMatrix:
    """
    Bounded accumulator: PainCategory -> integer score in [0, 10].

    Updates are additive and clamped, so scores never decrease.
    Instances are never mutated; apply() returns a new matrix.
    """

    def __init__(self, scores: Optional[Mapping] = None):
        self._scores: Dict[PainCategory, int] = {}
        for key, value in (scores or {}).items():
            category = PainCategory(key)
            score = int(value)
            if not 0 <= score <= MAX_SCORE:
                raise ValueError(f"Score out of range for {category.value}: {score}")
            if score > 0:
                self._scores[category] = score

    def __getitem__(self, category) -> int:
        return self._scores.get(PainCategory(category), 0)

    def __eq__(self, other) -> bool:
        return isinstance(other, PainMatrix) and self._scores == other._scores

    def __repr__(self) -> str:
        return f"PainMatrix({self.to_dict()!r})"

    def is_empty(self) -> bool:
        return not self._scores

    def apply(self, deltas: Mapping) -> "PainMatrix":
        updated = dict(self._scores)
        for key, delta in deltas.items():
            category = PainCategory(key)
            if delta <= 0:
                continue
            updated[category] = min(MAX_SCORE, updated.get(category, 0) + int(delta))
        return PainMatrix(updated)

    def highest(self) -> Optional[PainCategory]:
        """Highest-scoring category, ties broken by declaration order."""
        best, best_score = None, 0
        for category in PainCategory:
            score = self[category]
            if score > best_score:
                best, best_score = category, score
        return best

    def max_score(self) -> int:
        return max(self._scores.values(), default=0)

    def count_at_least(self, threshold: int) -> int:
        return sum(1 for score in self._scores.values() if score >= threshold)

    def to_dict(self) -> Dict[str, int]:
        return {
            category.value: self._scores[category]
            for category in PainCategory
            if category in self._scores
        }


class PainAnalyzer:
    def __init__(self, completion_client):
        self.client = completion_client

    def apply_answer(
        self,
        matrix: PainMatrix,
        answer_text: str,
        question_context: str,
    ) -> Tuple[PainMatrix, Optional[str]]:
        """
        Classify the answer into pain deltas and merge them into matrix.

        Returns (updated_matrix, error). On any completion or parsing
        failure the matrix comes back unchanged and error says why;
        the consultation carries on with the next question.
        """
        prompt = (
            PAIN_ANALYSIS_PROMPT
            .replace("{{QUESTION_CONTEXT}}", question_context or "General business question")
            .replace("{{USER_ANSWER}}", answer_text)
        )

        try:
            raw = self.client.generate_chat(
                messages=[{"role": "system", "content": prompt}],
                temperature=0.1,
            )
        except CompletionError as e:
            logger.warning("Pain analysis skipped, completion failed: %s", e)
            return matrix, str(e)

        result = parse_model(raw, PainAnalysisOutput)
        if not result.ok:
            logger.warning("Pain analysis skipped, malformed output: %s", result.error)
            return matrix, result.error

        deltas = result.value.positive_scores()
        logger.debug("Pain deltas: %s", deltas)
        return matrix.apply(deltas), None
