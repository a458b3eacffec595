from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..deps import get_db, get_matcher
from ..schemas.recognition import RecognizeIn, RecognizeOut
from ...db import requests as rq
from ...ml.matcher import KnnMatcher, SampleCorpus

router = APIRouter(prefix="/api", tags=["recognition"])


@router.post("/recognize", response_model=RecognizeOut)
def recognize(payload: RecognizeIn, db: Session = Depends(get_db), matcher: KnnMatcher = Depends(get_matcher)):
    """Single-frame match against the stored samples, without smoothing."""
    corpus = SampleCorpus(rq.load_corpus(db, payload.lesson_id))
    landmarks = [lm.model_dump(exclude_none=True) for lm in payload.landmarks]
    match = matcher.match(landmarks, corpus)
    return {
        "match": match.to_dict() if match else None,
        "ranking": matcher.ranking(landmarks, corpus),
    }
