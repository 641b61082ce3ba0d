from __future__ import annotations

import os
import random
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from rpsbrain import Aggression, DecisionEngine, HistoryView, TraceLogger
from rpsbrain.moves import parse_move


app = FastAPI(title="rpsbrain RPS opponent API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in os.getenv("ALLOW_ORIGINS", "*").split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Traces are only written when a directory is configured
TRACE_DIR = os.getenv("TRACE_DIR")
DEFAULT_SEED = int(os.getenv("ENGINE_SEED", "42"))
trace_logger = TraceLogger(TRACE_DIR) if TRACE_DIR else None


@dataclass
class Session:
    engine: DecisionEngine
    rng: random.Random


sessions: Dict[str, Session] = {}
sessions_lock = threading.Lock()


class CreateSessionReq(BaseModel):
    seed: Optional[int] = None


class CreateSessionRes(BaseModel):
    session_id: str


class DecideReq(BaseModel):
    player_moves: List[Union[int, str]] = []
    ai_moves: List[Union[int, str]] = []
    outcomes: List[str] = []
    aggression: Aggression = Aggression.NORMAL
    exploit_enabled: bool = True


class DecideRes(BaseModel):
    ai_move: str
    trace: Dict[str, Any]


class CommitReq(BaseModel):
    player_move: Union[int, str]


class CommitRes(BaseModel):
    trace: Dict[str, Any]


def _get_session(session_id: str) -> Session:
    with sessions_lock:
        s = sessions.get(session_id)
    if s is None:
        raise HTTPException(status_code=404, detail=f"unknown session {session_id}")
    return s


@app.post("/sessions", response_model=CreateSessionRes)
def create_session(req: CreateSessionReq):
    sid = uuid.uuid4().hex
    seed = req.seed if req.seed is not None else DEFAULT_SEED
    engine = DecisionEngine(trace_logger=trace_logger, session_id=sid)
    with sessions_lock:
        sessions[sid] = Session(engine=engine, rng=random.Random(seed))
    return CreateSessionRes(session_id=sid)


@app.post("/sessions/{session_id}/decide", response_model=DecideRes)
def decide(session_id: str, req: DecideReq):
    s = _get_session(session_id)
    try:
        history = HistoryView(
            player_moves=tuple(req.player_moves),
            ai_moves=tuple(req.ai_moves),
            outcomes=tuple(req.outcomes),
            rng=s.rng,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    move, pending = s.engine.decide(history, req.aggression, req.exploit_enabled)
    return DecideRes(ai_move=str(move), trace=pending.to_dict())


@app.post("/sessions/{session_id}/commit", response_model=CommitRes)
def commit(session_id: str, req: CommitReq):
    s = _get_session(session_id)
    try:
        player_move = parse_move(req.player_move)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    pending = s.engine.pending
    if pending is None:
        raise HTTPException(status_code=409, detail="no decision pending for this session")
    try:
        trace = s.engine.commit(pending, player_move)
    except RuntimeError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return CommitRes(trace=trace.to_dict())


@app.post("/sessions/{session_id}/reset")
def reset(session_id: str):
    s = _get_session(session_id)
    s.engine.reset()
    return {"ok": True}


@app.delete("/sessions/{session_id}")
def delete_session(session_id: str):
    with sessions_lock:
        removed = sessions.pop(session_id, None)
    if removed is None:
        raise HTTPException(status_code=404, detail=f"unknown session {session_id}")
    return {"ok": True}


@app.get("/sessions/{session_id}/weights")
def weights(session_id: str):
    s = _get_session(session_id)
    return {"weights": [{"name": n, "weight": w} for n, w in s.engine.weights()]}


@app.get("/")
def root():
    return {"ok": True, "service": "rpsbrain backend"}


@app.get("/healthz")
def healthz():
    return {"status": "healthy"}
