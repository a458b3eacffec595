from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..deps import get_db
from ...db import requests as rq

router = APIRouter(prefix="/api/progress", tags=["progress"])


@router.get("/{learner_id}/statistics")
def statistics(learner_id: int, db: Session = Depends(get_db)):
    stats = rq.learner_statistics(db, learner_id)
    if stats is None:
        return {"message": "No practice data yet."}
    return stats


@router.get("/{learner_id}/lecturer-summary")
def lecturer_summary(learner_id: int, db: Session = Depends(get_db)):
    summary = rq.lecturer_summary(db, learner_id)
    if summary is None:
        return {"summary": "Start practising to get feedback from your lecturer."}
    return {"summary": summary}
