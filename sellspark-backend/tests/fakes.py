"""Scripted stand-ins for the text completion and knowledge retrieval services."""

import json

from sellspark.utils.errors import CompletionError

PAIN_MARKER = "pain analysis engine"
QUESTION_MARKER = "discovery interview"
NARRATIVE_MARKER = "ROI Narrator"


def answer_from_prompt(prompt: str) -> str:
    return prompt.split("User answer:", 1)[1].split("\n", 1)[0].strip()


class FakeCompletionClient:
    """
    Routes each prompt by its marker text.

    pain: dict answer -> deltas, or callable(answer) -> raw string
    question: callable(n, prompt) -> raw string; default yields unique questions
    narrative: callable(prompt) -> raw string; default echoes nothing useful
    """

    def __init__(self, pain=None, question=None, narrative=None, on_pain=None):
        self.pain = pain or {}
        self.question = question
        self.narrative = narrative
        self.on_pain = on_pain
        self.calls = []
        self.question_count = 0

    def generate_chat(self, messages, temperature=0.2, json_mode=True):
        prompt = messages[0]["content"]
        self.calls.append(prompt)

        if PAIN_MARKER in prompt:
            if self.on_pain:
                self.on_pain()
            answer = answer_from_prompt(prompt)
            if callable(self.pain):
                return self.pain(answer)
            return json.dumps(self.pain.get(answer, {}))

        if QUESTION_MARKER in prompt:
            self.question_count += 1
            if self.question:
                return self.question(self.question_count, prompt)
            return json.dumps({
                "question": f"Generated question number {self.question_count}?",
                "suggested_replies": ["Yes", "No", "Sometimes", "Not sure"],
            })

        if NARRATIVE_MARKER in prompt:
            if self.narrative:
                return self.narrative(prompt)
            return json.dumps({"narratives": []})

        raise AssertionError("Unexpected prompt")

    def prompts_with(self, marker):
        return [p for p in self.calls if marker in p]


class FailingCompletionClient:
    def __init__(self):
        self.calls = 0

    def generate_chat(self, messages, temperature=0.2, json_mode=True):
        self.calls += 1
        raise CompletionError("completion service unavailable")


class FakeKnowledgeService:
    def __init__(self, snippets=None):
        self.snippets = snippets or []
        self.queries = []

    def search(self, query, limit=None):
        self.queries.append((query, limit))
        return list(self.snippets)[: limit or 3]
