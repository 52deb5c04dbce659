# sellspark/services/question_selector.py

import json
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sellspark.llm.parsing import QuestionOutput, parse_model
from sellspark.llm.prompts import NEXT_QUESTION_PROMPT
from sellspark.services.pain_analyzer import PainCategory, PainMatrix
from sellspark.utils.errors import CompletionError

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

DEFAULT_CATEGORY = PainCategory.LEAD_FLOW
GROUNDING_SNIPPETS = 3
MAX_CONTEXT_CHARS = 300


@dataclass(frozen=True)
class Question:
    text: str
    suggested_replies: List[str] = field(default_factory=list)
    category: Optional[PainCategory] = None
    source: str = "llm"  # llm | fallback | fixed

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "suggested_replies": list(self.suggested_replies),
            "category": self.category.value if self.category else None,
            "source": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Question":
        category = data.get("category")
        return cls(
            text=data["text"],
            suggested_replies=list(data.get("suggested_replies") or []),
            category=PainCategory(category) if category else None,
            source=data.get("source", "llm"),
        )


# --------------------------------------------------
# Fixed opening questions (steps 0 and 1)
# --------------------------------------------------
def opening_question(business_name: Optional[str] = None) -> Question:
    subject = business_name or "your business"
    return Question(
        text=(
            f"Hi! I'm preparing a personalised automation plan for {subject}. "
            "Let's start with a quick introduction - what's your name?"
        ),
        source="fixed",
    )


def automation_goal_question(name: str) -> Question:
    return Question(
        text=(
            f"Nice to meet you, {name}! What's your biggest time-consuming challenge "
            "right now? What takes up most of your day that you wish you could automate?"
        ),
        suggested_replies=[
            "Lead follow-up takes forever",
            "Client onboarding is manual",
            "Content creation is time-consuming",
            "Customer support queries",
        ],
        source="fixed",
    )


# --------------------------------------------------
# Canned fallbacks, one per category
# --------------------------------------------------
CANNED_QUESTIONS = {
    PainCategory.LEAD_FLOW: Question(
        text="Where do most of your new prospects come from today, and how do you capture their details?",
        suggested_replies=["Referrals mostly", "Social media DMs", "Website forms", "I don't track it"],
    ),
    PainCategory.FOLLOW_UP: Question(
        text="What happens after someone shows interest but doesn't book - how do you stay in touch?",
        suggested_replies=["Manual emails", "I forget to follow up", "A basic sequence", "Nothing yet"],
    ),
    PainCategory.ONBOARDING: Question(
        text="Walk me through what a new client experiences in their first week with you.",
        suggested_replies=["Lots of back-and-forth", "A welcome call", "Forms and contracts", "It varies a lot"],
    ),
    PainCategory.ACCOUNTABILITY: Question(
        text="How do you keep clients on track with their commitments between sessions?",
        suggested_replies=["Text check-ins", "Weekly calls", "A shared tracker", "I don't, really"],
    ),
    PainCategory.CONTENT: Question(
        text="How much time does creating and publishing content take you each week?",
        suggested_replies=["Under 2 hours", "About half a day", "Way too long", "I rarely post"],
    ),
    PainCategory.UPSELL: Question(
        text="When a client finishes a program, how do you offer them the next step?",
        suggested_replies=["A personal pitch", "An email offer", "They ask me", "I don't offer one"],
    ),
    PainCategory.RETENTION: Question(
        text="How do you notice when a client is losing momentum or about to leave?",
        suggested_replies=["Missed sessions", "They go quiet", "They tell me", "I usually don't"],
    ),
    PainCategory.ADMIN: Question(
        text="Which admin tasks (scheduling, invoicing, reminders) eat most of your week?",
        suggested_replies=["Scheduling", "Invoicing", "Reminders", "All of it"],
    ),
}

GENERIC_FALLBACK = Question(
    text="What's your biggest challenge in running your coaching business right now?",
    suggested_replies=["Finding clients", "Keeping clients", "Too much admin", "Not enough time"],
)


def _normalize(text: str) -> str:
    return " ".join(text.lower().split()).rstrip("?.! ")


class QuestionSelector:
    def __init__(self, completion_client, knowledge_service):
        self.client = completion_client
        self.knowledge = knowledge_service

    @staticmethod
    def target_category(matrix: PainMatrix) -> PainCategory:
        return matrix.highest() or DEFAULT_CATEGORY

    def next_question(
        self,
        matrix: PainMatrix,
        answered_questions: Sequence[str],
        business_context: str = "",
    ) -> Question:
        """
        Phrase the next question for the highest-pain category.
        Never raises: falls back to the canned question for the category.
        """
        category = self.target_category(matrix)
        snippets = self._grounding(category, business_context)

        prompt = (
            NEXT_QUESTION_PROMPT
            .replace("{{BUSINESS_CONTEXT}}", business_context or "Not provided")
            .replace("{{TARGET_AREA}}", category.label)
            .replace("{{PAIN_SCORES}}", json.dumps(matrix.to_dict()))
            .replace("{{REFERENCE_SNIPPETS}}", "\n".join(f"- {s}" for s in snippets) or "None")
            .replace(
                "{{PREVIOUS_QUESTIONS}}",
                "\n".join(f"- {q}" for q in answered_questions) or "None",
            )
        )

        try:
            raw = self.client.generate_chat(
                messages=[{"role": "system", "content": prompt}],
                temperature=0.4,
            )
        except CompletionError as e:
            logger.warning("Question generation failed (%s); using canned question", e)
            return self._fallback(category, answered_questions)

        result = parse_model(raw, QuestionOutput)
        if not result.ok:
            logger.warning("Malformed question output (%s); using canned question", result.error)
            return self._fallback(category, answered_questions)

        asked = {_normalize(q) for q in answered_questions}
        if _normalize(result.value.question) in asked:
            logger.warning("Completion repeated a previous question; using canned question")
            return self._fallback(category, answered_questions)

        return Question(
            text=result.value.question,
            suggested_replies=result.value.suggested_replies,
            category=category,
        )

    def _grounding(self, category: PainCategory, business_context: str) -> List[str]:
        query = f"{category.label} coaching business question interview discovery"
        if business_context:
            query = f"{query} {business_context[:MAX_CONTEXT_CHARS]}"
        return self.knowledge.search(query, limit=GROUNDING_SNIPPETS)

    def _fallback(self, category: PainCategory, answered_questions: Sequence[str]) -> Question:
        asked = {_normalize(q) for q in answered_questions}
        canned = CANNED_QUESTIONS[category]

        candidate = canned
        if _normalize(canned.text) in asked:
            candidate = GENERIC_FALLBACK
            # first unused canned question, in declaration order
            for other in PainCategory:
                if _normalize(CANNED_QUESTIONS[other].text) not in asked:
                    candidate = CANNED_QUESTIONS[other]
                    break

        return Question(
            text=candidate.text,
            suggested_replies=list(candidate.suggested_replies),
            category=category,
            source="fallback",
        )
