# sellspark/services/persona_registry.py

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from sellspark.services.pain_analyzer import PainCategory, PainMatrix

DEFAULT_PERSONA_THRESHOLD = 7


@dataclass(frozen=True)
class Persona:
    id: str
    name: str
    description: str
    weight: Mapping[PainCategory, float]

    def score(self, matrix: PainMatrix) -> float:
        return sum(matrix[category] * w for category, w in self.weight.items())

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "description": self.description}


@dataclass(frozen=True)
class PersonaAssignment:
    persona: Persona
    assigned_at_step: int

    def to_record(self) -> dict:
        return {"persona_id": self.persona.id, "assigned_at_step": self.assigned_at_step}

    @classmethod
    def from_record(cls, record: Optional[dict]) -> Optional["PersonaAssignment"]:
        if not record:
            return None
        return cls(
            persona=get_persona(record["persona_id"]),
            assigned_at_step=record["assigned_at_step"],
        )


def _weights(**kwargs) -> Mapping[PainCategory, float]:
    return MappingProxyType({PainCategory(key): value for key, value in kwargs.items()})


# Declaration order is the tie-break order
PERSONAS = (
    Persona(
        id="solo_scaling_sally",
        name="Solo Scaling Sally",
        description="One-person show trying to scale without burning out",
        weight=_weights(admin=1.3, follow_up=1.2, lead_flow=1.1),
    ),
    Persona(
        id="content_crushed_carl",
        name="Content-Crushed Carl",
        description="Struggles with consistent content creation and distribution",
        weight=_weights(content=1.4, follow_up=1.2, admin=1.1),
    ),
    Persona(
        id="overwhelmed_olivia",
        name="Overwhelmed Olivia",
        description="Too many clients, not enough systems",
        weight=_weights(accountability=1.3, onboarding=1.2, retention=1.1),
    ),
    Persona(
        id="growth_guru_gary",
        name="Growth Guru Gary",
        description="Established coach looking to maximize revenue per client",
        weight=_weights(upsell=1.4, retention=1.2, accountability=1.1),
    ),
    # Same weights as Sally, who is declared first and wins every tie, so
    # Tina is never assigned. Kept so stored assignments still resolve.
    Persona(
        id="tech_tired_tina",
        name="Tech-Tired Tina",
        description="Avoids technology, wants simple solutions",
        weight=_weights(admin=1.3, follow_up=1.2, lead_flow=1.1),
    ),
)

_BY_ID = {persona.id: persona for persona in PERSONAS}


def get_persona(persona_id: str) -> Persona:
    try:
        return _BY_ID[persona_id]
    except KeyError:
        raise KeyError(f"Unknown persona: {persona_id}")


def assign_persona(
    matrix: PainMatrix,
    threshold: int = DEFAULT_PERSONA_THRESHOLD,
) -> Optional[Persona]:
    """
    Best-matching persona once two or more categories reach threshold.

    score = sum(matrix[c] * weight[c]); the first persona in registry
    order wins ties. Returns None while the trigger is not met.
    """
    if matrix.count_at_least(threshold) < 2:
        return None

    best, best_score = None, None
    for persona in PERSONAS:
        score = persona.score(matrix)
        if best_score is None or score > best_score:
            best, best_score = persona, score

    return best
