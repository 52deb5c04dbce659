from enum import Enum


class ConsultationStatus(str, Enum):
    CREATED = "CREATED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


# COMPLETED is terminal
ALLOWED_TRANSITIONS = {
    ConsultationStatus.CREATED: {ConsultationStatus.ACTIVE, ConsultationStatus.COMPLETED},
    ConsultationStatus.ACTIVE: {ConsultationStatus.ACTIVE, ConsultationStatus.COMPLETED},
    ConsultationStatus.COMPLETED: set(),
}


def can_transition(current: str, target: str) -> bool:
    return ConsultationStatus(target) in ALLOWED_TRANSITIONS[ConsultationStatus(current)]
