from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..deps import get_db, get_matcher
from ..schemas.session import AttemptIn, AttemptOut, EvaluateIn, SessionOut, SessionStartIn
from ...db import requests as rq
from ...db.models import SignSample
from ...ml.matcher import KnnMatcher, SampleCorpus

router = APIRouter(prefix="/api/practice-sessions", tags=["sessions"])


def _session_or_404(db: Session, session_id: int):
    s = rq.get_practice_session(db, session_id)
    if not s:
        raise HTTPException(404, "Session not found")
    return s


@router.post("/start", response_model=SessionOut)
def start_session(payload: SessionStartIn, db: Session = Depends(get_db)):
    return rq.start_session(db, payload.learner_id, payload.lesson_id)


@router.post("/{session_id}/attempts", response_model=AttemptOut)
def record_attempt(session_id: int, payload: AttemptIn, db: Session = Depends(get_db)):
    s = _session_or_404(db, session_id)
    return rq.record_attempt(db, s, payload.sign_id, payload.score, payload.feedback, payload.record_motion_data)


@router.post("/{session_id}/evaluate")
def evaluate_attempt(
    session_id: int,
    payload: EvaluateIn,
    db: Session = Depends(get_db),
    matcher: KnnMatcher = Depends(get_matcher),
):
    s = _session_or_404(db, session_id)
    target = db.get(SignSample, payload.sign_id)
    if target is None:
        raise HTTPException(404, "Sign not found")

    corpus = SampleCorpus(rq.load_corpus(db, s.lesson_id))
    if not corpus:
        corpus = SampleCorpus(rq.load_corpus(db))
    landmarks = [lm.model_dump(exclude_none=True) for lm in payload.landmarks]
    match = matcher.match(landmarks, corpus)

    if match is None:
        score, feedback = 0.0, "No sign recognized. Check the hand shape against the reference."
    elif match.sign_name != target.sign_name.lower():
        score, feedback = 0.0, f"Recognized '{match.sign_name}' instead of '{target.sign_name}'."
    else:
        score, feedback = float(match.confidence), f"Recognized '{target.sign_name}'."

    attempt = rq.record_attempt(db, s, target.id, score, feedback, landmarks)
    return {
        "attempt": AttemptOut.model_validate(attempt),
        "match": match.to_dict() if match else None,
    }


@router.post("/{session_id}/finish", response_model=SessionOut)
def finish_session(session_id: int, db: Session = Depends(get_db)):
    s = _session_or_404(db, session_id)
    return rq.finish_session(db, s)


@router.get("/history/{learner_id}", response_model=list[SessionOut])
def history(learner_id: int, db: Session = Depends(get_db)):
    return rq.session_history(db, learner_id)
