from fastapi import APIRouter, Body, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ..deps import get_db
from ..schemas.lesson import LessonIn, LessonOut, LessonUpdateIn
from ...db import requests as rq

router = APIRouter(prefix="/api/lessons", tags=["lessons"])


def _lesson_or_404(db: Session, lesson_id: int):
    lesson = rq.get_lesson(db, lesson_id)
    if not lesson:
        raise HTTPException(404, "Lesson not found")
    return lesson


@router.get("", response_model=list[LessonOut])
def list_lessons(db: Session = Depends(get_db)):
    return rq.list_lessons(db)


@router.get("/{lesson_id}", response_model=LessonOut)
def get_lesson(lesson_id: int, db: Session = Depends(get_db)):
    return _lesson_or_404(db, lesson_id)


@router.post("", response_model=LessonOut, status_code=201)
def create_lesson(payload: LessonIn, db: Session = Depends(get_db)):
    return rq.create_lesson(db, payload.title, payload.description, payload.level)


@router.put("/{lesson_id}", status_code=204)
def update_lesson(lesson_id: int, payload: LessonUpdateIn, db: Session = Depends(get_db)):
    if lesson_id != payload.id:
        raise HTTPException(400, "ID mismatch")
    lesson = _lesson_or_404(db, lesson_id)
    lesson.title = payload.title
    lesson.description = payload.description
    lesson.level = payload.level
    db.commit()
    return Response(status_code=204)


@router.delete("/{lesson_id}", status_code=204)
def delete_lesson(lesson_id: int, db: Session = Depends(get_db)):
    lesson = _lesson_or_404(db, lesson_id)
    db.delete(lesson)
    db.commit()
    return Response(status_code=204)


@router.post("/{lesson_id}/add-signs")
def add_signs(lesson_id: int, sign_ids: list[int] = Body(...), db: Session = Depends(get_db)):
    lesson = _lesson_or_404(db, lesson_id)
    added = rq.assign_signs(db, lesson, rq.signs_by_ids(db, sign_ids))
    return {"message": f"Added {added} signs to lesson {lesson.title}", "added": added}


@router.post("/{lesson_id}/assign-by-names")
def assign_by_names(lesson_id: int, sign_names: list[str] = Body(...), db: Session = Depends(get_db)):
    lesson = _lesson_or_404(db, lesson_id)
    signs = rq.signs_by_names(db, sign_names)
    if not signs:
        raise HTTPException(404, "No signs found for the given names")
    assigned = [s.sign_name for s in signs]
    rq.assign_signs(db, lesson, signs)
    return {
        "message": f"Assigned {len(assigned)} signs to lesson: {lesson.title}",
        "assigned_signs": assigned,
    }
