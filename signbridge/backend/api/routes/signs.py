from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..deps import get_db
from ..schemas.sign import SignSampleIn, SignSampleOut, SignStatsOut
from ...db import requests as rq

router = APIRouter(prefix="/api/sign", tags=["signs"])


@router.get("", response_model=list[SignSampleOut])
def list_signs(db: Session = Depends(get_db)):
    return rq.list_samples(db)


@router.post("", response_model=SignSampleOut, status_code=201)
def save_sign(payload: SignSampleIn, db: Session = Depends(get_db)):
    return rq.save_sample(db, payload.to_storage())


@router.get("/stats", response_model=list[SignStatsOut])
def sign_stats(db: Session = Depends(get_db)):
    return rq.sample_stats(db)


@router.post("/batch")
def save_batch(payload: list[SignSampleIn], db: Session = Depends(get_db)):
    if not payload:
        raise HTTPException(400, "No samples provided")
    saved = rq.save_samples(db, [p.to_storage() for p in payload])
    return {"saved": saved}


@router.get("/lesson/{lesson_id}", response_model=list[SignSampleOut])
def lesson_signs(lesson_id: int, db: Session = Depends(get_db)):
    return rq.list_samples_for_lesson(db, lesson_id)


@router.delete("/{sign_name}")
def delete_by_sign(sign_name: str, db: Session = Depends(get_db)):
    deleted = rq.delete_samples_by_sign(db, sign_name)
    if not deleted:
        raise HTTPException(404, f"No samples found for sign: {sign_name}")
    return {"deleted": deleted, "sign_name": sign_name}
