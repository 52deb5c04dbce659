from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from sellspark.services.consultation_service import ConsultationService
from sellspark.utils.errors import (
    ConcurrencyConflictError,
    ConsultationError,
    ConsultationNotCompleteError,
    SessionNotFoundError,
    StoreUnavailableError,
    ValidationError,
)

router = APIRouter(prefix="/consultation", tags=["Consultation"])

ERROR_STATUS = (
    (ValidationError, 400),
    (SessionNotFoundError, 404),
    (ConsultationNotCompleteError, 409),
    (ConcurrencyConflictError, 409),
    (StoreUnavailableError, 503),
)


def get_consultation_service(request: Request) -> ConsultationService:
    return request.app.state.consultation_service


def _http_error(error: ConsultationError) -> HTTPException:
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            return HTTPException(status_code, str(error))
    return HTTPException(500, "Unexpected consultation error")


# ------------------------------------------------------------------
# 1. Start Session
# ------------------------------------------------------------------
@router.post("/start")
def start_session(
    business_context: str = "",
    website_url: Optional[str] = None,
    business_name: Optional[str] = None,
    service: ConsultationService = Depends(get_consultation_service),
):
    try:
        session_id = service.start_session(
            business_context=business_context,
            website_url=website_url,
            business_name=business_name,
        )
        return service.get_session(session_id)
    except ConsultationError as e:
        raise _http_error(e)


# ------------------------------------------------------------------
# 2. Answer the pending question
# ------------------------------------------------------------------
@router.post("/{session_id}/respond")
def respond(
    session_id: str,
    answer: str,
    service: ConsultationService = Depends(get_consultation_service),
):
    try:
        return service.submit_answer(session_id, answer).to_dict()
    except ConsultationError as e:
        raise _http_error(e)


# ------------------------------------------------------------------
# 3. Status (frontend sync)
# ------------------------------------------------------------------
@router.get("/{session_id}")
def get_status(
    session_id: str,
    service: ConsultationService = Depends(get_consultation_service),
):
    try:
        return service.get_session(session_id)
    except ConsultationError as e:
        raise _http_error(e)


# ------------------------------------------------------------------
# 4. Final report (completed sessions only)
# ------------------------------------------------------------------
@router.get("/{session_id}/results")
def get_results(
    session_id: str,
    service: ConsultationService = Depends(get_consultation_service),
):
    try:
        return service.get_results(session_id).to_dict()
    except ConsultationError as e:
        raise _http_error(e)


# ------------------------------------------------------------------
# 5. Reset
# ------------------------------------------------------------------
@router.post("/{session_id}/reset")
def reset(
    session_id: str,
    service: ConsultationService = Depends(get_consultation_service),
):
    try:
        return service.reset(session_id)
    except ConsultationError as e:
        raise _http_error(e)
