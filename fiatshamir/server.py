"""FastAPI-powered Fiat-Shamir verifier service."""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .constants import DEFAULT_ROUNDS, SESSION_TTL_SECONDS
from .keys import PublicKey
from .protocol import FiatShamirVerifier

logger = logging.getLogger(__name__)


@dataclass
class _SessionState:
    verifier: FiatShamirVerifier
    rounds: int
    completed_rounds: int = 0
    commitment: Optional[int] = None
    challenge: Optional[int] = None
    touched: float = 0.0


class _SessionManager:
    def __init__(self, ttl: float = SESSION_TTL_SECONDS) -> None:
        self.ttl = ttl
        self._sessions: Dict[str, _SessionState] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _expired(self, state: _SessionState, now: float) -> bool:
        return now - state.touched >= self.ttl

    def _purge(self, now: float) -> None:
        for session_id in [key for key, state in self._sessions.items() if self._expired(state, now)]:
            del self._sessions[session_id]

    def create(self, public: PublicKey, rounds: int) -> str:
        now = time.monotonic()
        self._purge(now)
        session_id = secrets.token_urlsafe(16)
        self._sessions[session_id] = _SessionState(
            verifier=FiatShamirVerifier(public),
            rounds=rounds,
            touched=now,
        )
        return session_id

    def get(self, session_id: str) -> _SessionState:
        now = time.monotonic()
        state = self._sessions.get(session_id)
        if state is None or self._expired(state, now):
            self._sessions.pop(session_id, None)
            raise KeyError(session_id)
        state.touched = now
        return state

    def pop(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)


class SessionStartRequest(BaseModel):
    n: str
    y: str
    rounds: int = Field(DEFAULT_ROUNDS, ge=1)


class SessionStartResponse(BaseModel):
    session: str
    rounds: int


class CommitRequest(BaseModel):
    commitment: str


class CommitResponse(BaseModel):
    challenge: int


class RespondRequest(BaseModel):
    response: str


class RespondResponse(BaseModel):
    accepted: bool
    round: int
    completed: bool
    success: Optional[bool] = None


app = FastAPI(title="FiatShamir", description="Interactive Fiat-Shamir identification verifier")
_sessions = _SessionManager()


def _parse_hex(value: str, name: str) -> int:
    try:
        return int(value, 16)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"{name} must be hex encoded") from exc


def _open_session(session_id: str) -> _SessionState:
    try:
        state = _sessions.get(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Unknown session") from exc
    return state


def _reduced(value: int, state: _SessionState, name: str) -> int:
    if not 0 <= value < state.verifier.public.n:
        raise HTTPException(status_code=400, detail=f"{name} must be reduced modulo n")
    return value


@app.post("/sessions", response_model=SessionStartResponse)
async def start_session(request: SessionStartRequest) -> SessionStartResponse:
    n = _parse_hex(request.n, "Modulus")
    y = _parse_hex(request.y, "Public value")
    try:
        public = PublicKey(n=n, y=y)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    session = _sessions.create(public, request.rounds)
    logger.info("Opened session with %d-bit modulus for %d rounds", n.bit_length(), request.rounds)
    return SessionStartResponse(session=session, rounds=request.rounds)


@app.post("/sessions/{session_id}/commit", response_model=CommitResponse)
async def commit(session_id: str, request: CommitRequest) -> CommitResponse:
    state = _open_session(session_id)
    if state.commitment is not None:
        raise HTTPException(status_code=400, detail="Round already has a commitment")
    value = _reduced(_parse_hex(request.commitment, "Commitment"), state, "Commitment")
    if not state.verifier.accepts_commitment(value):
        raise HTTPException(status_code=400, detail="Invalid commitment")
    state.commitment = value
    # The challenge is drawn only once the commitment is fixed.
    state.challenge = state.verifier.challenge()
    return CommitResponse(challenge=state.challenge)


@app.post("/sessions/{session_id}/respond", response_model=RespondResponse)
async def respond(session_id: str, request: RespondRequest) -> RespondResponse:
    state = _open_session(session_id)
    if state.commitment is None or state.challenge is None:
        raise HTTPException(status_code=400, detail="No commitment for this round")
    response = _reduced(_parse_hex(request.response, "Response"), state, "Response")

    accepted = state.verifier.verify(state.commitment, state.challenge, response)
    state.commitment = None
    state.challenge = None
    state.completed_rounds += 1
    success: Optional[bool] = None
    if not accepted:
        success = False
        logger.info("Session rejected at round %d", state.completed_rounds)
    elif state.completed_rounds == state.rounds:
        success = True
        logger.info("Session accepted after %d rounds", state.rounds)
    if success is not None:
        _sessions.pop(session_id)

    return RespondResponse(
        accepted=accepted,
        round=state.completed_rounds,
        completed=success is not None,
        success=success,
    )


__all__ = ["app"]
