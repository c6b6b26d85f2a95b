"""OTP API router — the surface a login UI talks to.

Endpoints
---------
POST /session              → open a session context
GET  /session              → session status
POST /session/logout       → end the session context
POST /otp/send             → issue a code for an email
POST /otp/verify           → check a code
POST /otp/resend           → invalidate + issue a new code
GET  /otp/remaining?email= → countdown for the UI

Every endpoint except ``POST /session`` requires the ``X-Session-ID``
header.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException, Query

from otp_login.api.schemas import (
    EmailRequest,
    OtpSentResponse,
    RemainingResponse,
    SessionResponse,
    VerifyRequest,
    VerifyResponse,
    normalize_email,
)
from otp_login.services.session_manager import Session, SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["otp"])

# Shared session registry (in-memory singleton)
_session_manager = SessionManager()


def get_session_manager() -> SessionManager:
    return _session_manager


def get_session(
    x_session_id: str = Header(..., alias="X-Session-ID"),
    manager: SessionManager = Depends(get_session_manager),
) -> Session:
    session = manager.get(x_session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Unknown or expired session")
    return session


def _schedule_flush(background: BackgroundTasks, manager: SessionManager) -> None:
    if manager.analytics.pending_count:
        background.add_task(manager.analytics.flush)


# ── Session ──────────────────────────────────────────────

@router.post("/session", response_model=SessionResponse)
async def open_session(manager: SessionManager = Depends(get_session_manager)):
    """Open a new session context."""
    session = manager.open()
    return SessionResponse(session_id=session.session_id)


@router.get("/session", response_model=SessionResponse)
async def session_status(session: Session = Depends(get_session)):
    return SessionResponse(
        session_id=session.session_id,
        authenticated=session.is_authenticated,
        email=session.authenticated_email,
    )


@router.post("/session/logout", response_model=SessionResponse)
async def logout(
    background: BackgroundTasks,
    session: Session = Depends(get_session),
    manager: SessionManager = Depends(get_session_manager),
):
    """Log the user out and discard the whole session context."""
    if session.authenticated_email is not None:
        manager.analytics.log_logout(
            session.authenticated_email, session.duration_seconds()
        )
    manager.clear(session.session_id)
    _schedule_flush(background, manager)
    return SessionResponse(session_id=session.session_id)


# ── OTP ──────────────────────────────────────────────────

@router.post("/otp/send", response_model=OtpSentResponse)
async def send_otp(
    body: EmailRequest,
    background: BackgroundTasks,
    session: Session = Depends(get_session),
    manager: SessionManager = Depends(get_session_manager),
):
    """Issue a code for *email*.

    Delivery is out of band; in development mode the code is only logged.
    """
    otp = session.otp_manager
    otp.generate(body.email)
    _schedule_flush(background, manager)
    return OtpSentResponse(email=body.email, expires_in=otp.remaining_seconds(body.email))


@router.post("/otp/resend", response_model=OtpSentResponse)
async def resend_otp(
    body: EmailRequest,
    background: BackgroundTasks,
    session: Session = Depends(get_session),
    manager: SessionManager = Depends(get_session_manager),
):
    """Invalidate the previous code and issue a new one."""
    otp = session.otp_manager
    otp.resend(body.email)
    logger.info("OTP resent for %s in session %s", body.email, session.session_id)
    _schedule_flush(background, manager)
    return OtpSentResponse(email=body.email, expires_in=otp.remaining_seconds(body.email))


@router.post("/otp/verify", response_model=VerifyResponse)
async def verify_otp(
    body: VerifyRequest,
    background: BackgroundTasks,
    session: Session = Depends(get_session),
    manager: SessionManager = Depends(get_session_manager),
):
    """Validate a code; a success signs the session in."""
    result = session.otp_manager.validate(body.email, body.code)
    if result.success:
        session.mark_authenticated(body.email)
        logger.info("Session %s authenticated as %s", session.session_id, body.email)
    else:
        logger.info(
            "OTP verification failed for %s: %s", body.email, result.reason.value
        )
    _schedule_flush(background, manager)
    return VerifyResponse(**result.as_dict())


@router.get("/otp/remaining", response_model=RemainingResponse)
async def remaining_time(
    email: str = Query(..., description="Email the code was issued to"),
    session: Session = Depends(get_session),
):
    """Countdown for display; never mutates state."""
    try:
        email = normalize_email(email)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return RemainingResponse(
        email=email, remaining_seconds=session.otp_manager.remaining_seconds(email)
    )
