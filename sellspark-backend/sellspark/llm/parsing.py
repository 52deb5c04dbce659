# LLM OUTPUT (UNTRUSTED) -> VALIDATED MODELS

import json
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


@dataclass(frozen=True)
class ParseResult:
    value: Any = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def extract_json_object(raw_output: str) -> dict:
    """
    Return the single JSON object in raw_output.
    Tolerates prose around the object; anything else raises ValueError.
    """
    raw_output = (raw_output or "").strip()

    # Guard 1: empty response
    if not raw_output:
        raise ValueError("LLM returned empty response")

    # Guard 2: extract JSON object if extra text exists
    try:
        data = json.loads(raw_output)
    except json.JSONDecodeError:
        match = re.search(r"\{.*\}", raw_output, re.DOTALL)
        if not match:
            raise ValueError(f"Invalid JSON from LLM: {raw_output[:300]}")
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError:
            raise ValueError(f"Invalid JSON from LLM: {raw_output[:300]}")

    if not isinstance(data, dict):
        raise ValueError("LLM output is not a JSON object")

    return data


def parse_model(raw_output: str, model: Type[BaseModel]) -> ParseResult:
    try:
        data = extract_json_object(raw_output)
        return ParseResult(value=model.model_validate(data))
    except ValidationError as e:
        return ParseResult(error=f"{model.__name__} schema mismatch: {e.error_count()} error(s)")
    except ValueError as e:
        return ParseResult(error=str(e))


# --------------------------------------------------
# Output schemas
# --------------------------------------------------
Severity = Optional[int]


class PainAnalysisOutput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    lead_flow: Severity = Field(default=None, ge=0, le=10)
    follow_up: Severity = Field(default=None, ge=0, le=10)
    onboarding: Severity = Field(default=None, ge=0, le=10)
    accountability: Severity = Field(default=None, ge=0, le=10)
    content: Severity = Field(default=None, ge=0, le=10)
    upsell: Severity = Field(default=None, ge=0, le=10)
    retention: Severity = Field(default=None, ge=0, le=10)
    admin: Severity = Field(default=None, ge=0, le=10)

    def positive_scores(self) -> dict:
        return {
            key: value
            for key, value in self.model_dump().items()
            if value is not None and value > 0
        }


class QuestionOutput(BaseModel):
    question: str
    suggested_replies: List[str] = Field(min_length=4, max_length=4)

    @field_validator("question")
    @classmethod
    def _question_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("question is blank")
        return v

    @field_validator("suggested_replies")
    @classmethod
    def _replies_not_blank(cls, v: List[str]) -> List[str]:
        cleaned = [reply.strip() for reply in v]
        if any(not reply for reply in cleaned):
            raise ValueError("blank suggested reply")
        return cleaned


class NarrativeItem(BaseModel):
    recipe_id: str
    headline: str = ""
    explainer: str = ""


class NarrativeOutput(BaseModel):
    narratives: List[NarrativeItem]
