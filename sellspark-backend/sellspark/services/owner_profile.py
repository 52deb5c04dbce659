# sellspark/services/owner_profile.py

import re
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Optional, Sequence


class BusinessModel(str, Enum):
    SOLO = "solo"
    TEAM = "team"
    AGENCY = "agency"


class TechComfort(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class OwnerProfile:
    monthly_revenue: float
    hourly_rate: float
    client_count: int
    business_model: BusinessModel
    tech_comfort: TechComfort

    def to_dict(self) -> dict:
        data = asdict(self)
        data["business_model"] = self.business_model.value
        data["tech_comfort"] = self.tech_comfort.value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "OwnerProfile":
        return cls(
            monthly_revenue=data["monthly_revenue"],
            hourly_rate=data["hourly_rate"],
            client_count=data["client_count"],
            business_model=BusinessModel(data["business_model"]),
            tech_comfort=TechComfort(data["tech_comfort"]),
        )


DEFAULT_REVENUE = 10000
DEFAULT_CLIENT_COUNT = 15
MIN_HOURLY_RATE = 50
MAX_HOURLY_RATE = 500

_AMOUNT = r"(?P<dollar>\$)?\s*(?P<value>\d[\d,]*(?:\.\d+)?)\s*(?P<k>k)?"
REVENUE_RE = re.compile(_AMOUNT + r"\s*(?:/|per|a|an|each)\s*(?:month|mo)\b", re.IGNORECASE)
HOURLY_RE = re.compile(_AMOUNT + r"\s*(?:/|per|an|a)\s*(?:hour|hr)\b", re.IGNORECASE)
CLIENTS_RE = re.compile(r"\b(\d{1,4})\s+(?:active\s+|paying\s+)?clients\b", re.IGNORECASE)

REVENUE_WORDS = ("revenue", "make", "earn", "income", "bring in", "gross", "turnover")
REVENUE_WORD_WINDOW = 40


def _amount(match) -> float:
    value = float(match.group("value").replace(",", ""))
    if match.group("k"):
        value *= 1000
    return value


def _is_revenue_figure(match, text: str) -> bool:
    # "4 a month" is a count; money needs a $ or k, or a revenue word just before it
    if match.group("dollar") or match.group("k"):
        return True
    window = text[max(0, match.start() - REVENUE_WORD_WINDOW):match.start()]
    return any(word in window for word in REVENUE_WORDS)


def _estimate_revenue(summary: str, text: str) -> float:
    for match in REVENUE_RE.finditer(text):
        if _is_revenue_figure(match, text) and _amount(match) > 0:
            return _amount(match)

    if "enterprise" in summary or "corporate" in summary:
        return 25000
    if "premium" in summary or "high-end" in summary:
        return 18000
    if "startup" in summary or "new" in summary:
        return 5000
    return DEFAULT_REVENUE


def _estimate_hourly_rate(monthly_revenue: float, text: str) -> float:
    match = HOURLY_RE.search(text)
    if match and _amount(match) > 0:
        return _amount(match)
    return max(MIN_HOURLY_RATE, min(MAX_HOURLY_RATE, monthly_revenue / 20))


def _estimate_client_count(text: str) -> int:
    match = CLIENTS_RE.search(text)
    if match and int(match.group(1)) > 0:
        return int(match.group(1))
    if "dozens" in text or "many" in text:
        return 25
    if "several" in text or "few" in text:
        return 8
    return DEFAULT_CLIENT_COUNT


def _business_model(text: str) -> BusinessModel:
    if "team" in text or "staff" in text:
        return BusinessModel.TEAM
    if "agency" in text or "company" in text:
        return BusinessModel.AGENCY
    return BusinessModel.SOLO


def _tech_comfort(text: str) -> TechComfort:
    if "tech" in text and "struggle" in text:
        return TechComfort.LOW
    if "automation" in text or "software" in text:
        return TechComfort.HIGH
    return TechComfort.MEDIUM


def extract_owner_profile(
    answers: Sequence[str],
    business_context: Optional[str] = "",
) -> OwnerProfile:
    """
    Deterministic owner profile from the collected answers.

    Explicit figures in the answers ("$12k/month", "$150 per hour",
    "20 clients") win over keyword estimates. Every numeric field
    comes out positive.
    """
    text = " ".join(a for a in answers if a).lower()
    summary = (business_context or "").lower()

    monthly_revenue = _estimate_revenue(summary, text)
    return OwnerProfile(
        monthly_revenue=monthly_revenue,
        hourly_rate=_estimate_hourly_rate(monthly_revenue, text),
        client_count=_estimate_client_count(text),
        business_model=_business_model(text),
        tech_comfort=_tech_comfort(text),
    )
