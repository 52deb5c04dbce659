# sellspark/services/consultation_service.py

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm.exc import StaleDataError

from sellspark.db import models
from sellspark.services.narrative_renderer import NarrativeRenderer
from sellspark.services.owner_profile import extract_owner_profile
from sellspark.services.pain_analyzer import PainAnalyzer, PainMatrix
from sellspark.services.persona_registry import PersonaAssignment, assign_persona
from sellspark.services.question_selector import (
    Question,
    QuestionSelector,
    automation_goal_question,
    opening_question,
)
from sellspark.services.roi_simulator import ROISimulator, recipes_for_matrix
from sellspark.utils.errors import (
    ConcurrencyConflictError,
    ConsultationNotCompleteError,
    SessionNotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from sellspark.utils.state_machine import ConsultationStatus, can_transition

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

NAME_STEP = 0
GOAL_STEP = 1


@dataclass(frozen=True)
class _Snapshot:
    """Fields read under the first, short database session."""
    id: str
    version: int
    status: str
    step: int
    name: Optional[str]
    business_name: Optional[str]
    automation_goal: Optional[str]
    business_context: Optional[str]
    pain_matrix: dict
    persona: Optional[dict]
    answers: list
    pending_question: Optional[dict]
    profile: Optional[dict]
    roi_metrics: Optional[list]
    narratives: Optional[list]

    @classmethod
    def of(cls, row: models.ConsultationSession) -> "_Snapshot":
        return cls(
            id=row.id,
            version=row.version,
            status=row.status,
            step=row.step,
            name=row.name,
            business_name=row.business_name,
            automation_goal=row.automation_goal,
            business_context=row.business_context,
            pain_matrix=dict(row.pain_matrix or {}),
            persona=dict(row.persona) if row.persona else None,
            answers=list(row.answers or []),
            pending_question=dict(row.pending_question) if row.pending_question else None,
            profile=row.profile,
            roi_metrics=row.roi_metrics,
            narratives=row.narratives,
        )


def _persona_view(assignment: Optional[PersonaAssignment]) -> Optional[dict]:
    if assignment is None:
        return None
    return {**assignment.persona.to_dict(), "assigned_at_step": assignment.assigned_at_step}


@dataclass
class SubmitResult:
    session_id: str
    step: int
    is_complete: bool
    pain_matrix: dict
    persona: Optional[dict] = None
    next_question: Optional[str] = None
    suggested_replies: List[str] = field(default_factory=list)
    # set when the answer could not be scored; the consultation still moved on
    pain_update_error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "step": self.step,
            "is_complete": self.is_complete,
            "pain_matrix": self.pain_matrix,
            "persona": self.persona,
            "next_question": self.next_question,
            "suggested_replies": self.suggested_replies,
            "pain_update_error": self.pain_update_error,
        }


@dataclass
class ConsultationResults:
    session_id: str
    roi_metrics: List[dict]
    narratives: List[dict]
    persona: Optional[dict]
    pain_matrix: dict
    profile: dict

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "roi_metrics": self.roi_metrics,
            "narratives": self.narratives,
            "persona": self.persona,
            "pain_matrix": self.pain_matrix,
            "profile": self.profile,
        }


class ConsultationService:
    """
    Consultation session state machine.

    CREATED -> ACTIVE(step 0..N) -> COMPLETED (terminal).

    Every step is read -> release -> call external services -> re-acquire
    and commit. The commit checks the session version, so two concurrent
    answers cannot both land; the loser gets ConcurrencyConflictError and
    nothing of its step is written.
    """

    def __init__(
        self,
        session_factory,
        completion_client,
        knowledge_service,
        settings,
        publisher=None,
        simulator: Optional[ROISimulator] = None,
    ):
        self.session_factory = session_factory
        self.settings = settings
        self.publisher = publisher

        self.pain_analyzer = PainAnalyzer(completion_client)
        self.question_selector = QuestionSelector(completion_client, knowledge_service)
        self.narrative_renderer = NarrativeRenderer(completion_client)
        self.simulator = simulator or ROISimulator(
            trials=settings.SIMULATION_TRIALS,
            seed=settings.SIMULATION_SEED,
            max_workers=settings.SIMULATION_WORKERS,
        )

    # --------------------------------------------------
    # Content store access
    # --------------------------------------------------
    @contextmanager
    def _db(self):
        db = self.session_factory()
        try:
            yield db
        except StaleDataError as e:
            db.rollback()
            raise ConcurrencyConflictError("Session changed concurrently; re-fetch and retry") from e
        except DBAPIError as e:
            db.rollback()
            logger.exception("Content store unavailable")
            raise StoreUnavailableError("Content store unavailable") from e
        finally:
            db.close()

    @staticmethod
    def _get_row(db, session_id: str) -> models.ConsultationSession:
        row = db.get(models.ConsultationSession, session_id)
        if row is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return row

    def _read(self, session_id: str) -> _Snapshot:
        with self._db() as db:
            return _Snapshot.of(self._get_row(db, session_id))

    def _publish(self, session_id: str, event_type: str, payload: dict):
        if self.publisher is not None:
            self.publisher.publish(session_id, event_type, payload)

    # --------------------------------------------------
    # Session bootstrap
    # --------------------------------------------------
    def start_session(
        self,
        business_context: str = "",
        website_url: Optional[str] = None,
        business_name: Optional[str] = None,
    ) -> str:
        question = opening_question(business_name)

        with self._db() as db:
            session = models.ConsultationSession(
                status=ConsultationStatus.CREATED.value,
                step=0,
                business_name=business_name,
                business_context=business_context or None,
                website_url=website_url,
                pain_matrix={},
                answers=[],
                pending_question=question.to_dict(),
            )
            db.add(session)
            db.flush()
            db.add(models.ChatMessage(session_id=session.id, role="assistant", message=question.text))
            db.commit()
            session_id = session.id

        logger.info("Consultation session started id=%s", session_id)
        self._publish(session_id, "session_started", {"question": question.to_dict()})
        return session_id

    def get_session(self, session_id: str) -> dict:
        snap = self._read(session_id)
        return {
            "session_id": snap.id,
            "status": snap.status,
            "step": snap.step,
            "pending_question": snap.pending_question,
            "pain_matrix": PainMatrix(snap.pain_matrix).to_dict(),
            "persona": _persona_view(PersonaAssignment.from_record(snap.persona)),
        }

    # --------------------------------------------------
    # Answer handling
    # --------------------------------------------------
    def _should_complete(self, next_step: int, matrix: PainMatrix) -> bool:
        return (
            next_step >= self.settings.COMPLETION_STEP_THRESHOLD
            or matrix.max_score() >= self.settings.CATEGORY_COMPLETION_THRESHOLD
        )

    @staticmethod
    def _grounding_context(snap: _Snapshot, goal: Optional[str]) -> str:
        parts = []
        if snap.business_context:
            parts.append(snap.business_context)
        if goal:
            parts.append(f"Automation goal: {goal}")
        return "\n".join(parts)

    def submit_answer(self, session_id: str, answer_text: str) -> SubmitResult:
        answer = (answer_text or "").strip()
        if not answer:
            raise ValidationError("Answer text is required")

        snap = self._read(session_id)
        if snap.status == ConsultationStatus.COMPLETED.value:
            raise ValidationError("Consultation already completed; start a new session")

        step = snap.step
        question = (
            Question.from_dict(snap.pending_question)
            if snap.pending_question
            else opening_question(snap.business_name)
        )
        answers = snap.answers + [{
            "question_id": f"step_{step}",
            "question": question.text,
            "answer": answer,
        }]

        matrix = PainMatrix(snap.pain_matrix)
        persona = PersonaAssignment.from_record(snap.persona)
        newly_assigned = False
        pain_error = None
        name, goal = snap.name, snap.automation_goal

        if step == NAME_STEP:
            name = answer
        elif step == GOAL_STEP:
            goal = answer
        else:
            matrix, pain_error = self.pain_analyzer.apply_answer(matrix, answer, question.text)
            # assign once, then freeze
            if persona is None:
                candidate = assign_persona(matrix, self.settings.PERSONA_THRESHOLD)
                if candidate is not None:
                    persona = PersonaAssignment(persona=candidate, assigned_at_step=step)
                    newly_assigned = True

        next_step = step + 1
        is_complete = self._should_complete(next_step, matrix)

        next_question = None
        profile = metrics = narratives = None
        if is_complete:
            profile = extract_owner_profile([a["answer"] for a in answers], snap.business_context)
            metrics = self.simulator.simulate(recipes_for_matrix(matrix), profile)
            narratives = self.narrative_renderer.render(metrics, profile)
        elif step == NAME_STEP:
            next_question = automation_goal_question(name)
        else:
            next_question = self.question_selector.next_question(
                matrix,
                [a["question"] for a in answers],
                self._grounding_context(snap, goal),
            )

        new_status = ConsultationStatus.COMPLETED if is_complete else ConsultationStatus.ACTIVE

        # -------------------------------
        # Commit (re-validated)
        # -------------------------------
        with self._db() as db:
            row = self._get_row(db, session_id)
            if row.version != snap.version or row.status != snap.status:
                raise ConcurrencyConflictError("Session changed concurrently; re-fetch and retry")
            if not can_transition(row.status, new_status.value):
                raise ValidationError(f"Invalid transition {row.status} -> {new_status.value}")

            row.status = new_status.value
            row.step = next_step
            row.name = name
            row.automation_goal = goal
            row.answers = answers
            row.pain_matrix = matrix.to_dict()
            row.persona = persona.to_record() if persona else None
            row.pending_question = next_question.to_dict() if next_question else None

            db.add(models.ChatMessage(session_id=session_id, role="user", message=answer))
            if next_question:
                db.add(models.ChatMessage(
                    session_id=session_id, role="assistant", message=next_question.text,
                ))

            if is_complete:
                row.profile = profile.to_dict()
                row.roi_metrics = [m.to_dict() for m in metrics]
                row.narratives = [n.to_dict() for n in narratives]
                row.completed_at = datetime.now(timezone.utc)

            db.commit()

        result = SubmitResult(
            session_id=session_id,
            step=next_step,
            is_complete=is_complete,
            pain_matrix=matrix.to_dict(),
            persona=_persona_view(persona),
            next_question=next_question.text if next_question else None,
            suggested_replies=list(next_question.suggested_replies) if next_question else [],
            pain_update_error=pain_error,
        )

        self._publish(session_id, "answer_recorded", {
            "step": next_step,
            "pain_matrix": result.pain_matrix,
            "next_question": result.next_question,
        })
        if newly_assigned:
            logger.info("Persona %s assigned to session=%s", persona.persona.id, session_id)
            self._publish(session_id, "persona_assigned", result.persona)
        if is_complete:
            logger.info("Consultation completed session=%s at step=%d", session_id, next_step)
            self._publish(session_id, "consultation_completed", {"step": next_step})

        return result

    # --------------------------------------------------
    # Results
    # --------------------------------------------------
    def get_results(self, session_id: str) -> ConsultationResults:
        snap = self._read(session_id)
        if snap.status != ConsultationStatus.COMPLETED.value:
            raise ConsultationNotCompleteError("Consultation is not yet complete")

        return ConsultationResults(
            session_id=snap.id,
            roi_metrics=list(snap.roi_metrics or []),
            narratives=list(snap.narratives or []),
            persona=_persona_view(PersonaAssignment.from_record(snap.persona)),
            pain_matrix=PainMatrix(snap.pain_matrix).to_dict(),
            profile=snap.profile or {},
        )

    # --------------------------------------------------
    # Reset
    # --------------------------------------------------
    def reset(self, session_id: str) -> dict:
        """Discard all history and return the session to ACTIVE step 0."""
        with self._db() as db:
            row = self._get_row(db, session_id)
            if row.status == ConsultationStatus.COMPLETED.value:
                raise ValidationError("Completed consultations cannot be reset; start a new session")

            question = opening_question(row.business_name)

            row.status = ConsultationStatus.ACTIVE.value
            row.step = 0
            row.name = None
            row.automation_goal = None
            row.pain_matrix = {}
            row.persona = None
            row.answers = []
            row.pending_question = question.to_dict()
            row.chats.clear()
            row.chats.append(models.ChatMessage(role="assistant", message=question.text))
            db.commit()

        logger.info("Consultation reset session=%s", session_id)
        self._publish(session_id, "consultation_reset", {"question": question.to_dict()})
        return self.get_session(session_id)
