from collections import defaultdict
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session, selectinload

from ..ml.samples import SignSample as Sample
from .models import Attempt, Lesson, PracticeSession, SignSample


# ---------- samples ----------

def _to_row(sample) -> SignSample:
    if isinstance(sample, dict):
        sample = Sample(**sample)
    return SignSample(
        sign_name=sample.sign_name,
        landmarks=sample.landmarks,
        file_name=sample.file_name,
        source_file_name=sample.source_file_name,
        is_augmented=bool(sample.is_augmented),
        frame_index=sample.frame_index,
    )


def list_samples(db: Session) -> List[SignSample]:
    return db.query(SignSample).order_by(SignSample.id).all()


def list_samples_for_lesson(db: Session, lesson_id: int) -> List[SignSample]:
    return db.query(SignSample).filter_by(lesson_id=lesson_id).order_by(SignSample.id).all()


def load_corpus(db: Session, lesson_id: Optional[int] = None) -> List[Sample]:
    """Samples detached from the session, ready for SampleCorpus."""
    rows = list_samples(db) if lesson_id is None else list_samples_for_lesson(db, lesson_id)
    return [Sample.from_obj(r) for r in rows]


def save_sample(db: Session, sample) -> SignSample:
    row = _to_row(sample)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def save_samples(db: Session, samples: Iterable) -> int:
    rows = [_to_row(s) for s in samples]
    db.add_all(rows)
    db.commit()
    return len(rows)


def delete_samples_by_sign(db: Session, sign_name: str) -> int:
    rows = db.query(SignSample).filter(func.lower(SignSample.sign_name) == sign_name.lower()).all()
    for r in rows:
        db.delete(r)
    db.commit()
    return len(rows)


def sample_stats(db: Session) -> list:
    name = func.lower(SignSample.sign_name)
    rows = (
        db.query(name, func.count(SignSample.id), func.sum(case((SignSample.is_augmented, 1), else_=0)))
        .group_by(name)
        .order_by(name)
        .all()
    )
    return [
        {"sign_name": n, "count": int(c), "augmented_count": int(a or 0)}
        for n, c, a in rows
    ]


# ---------- lessons ----------

def list_lessons(db: Session) -> List[Lesson]:
    return db.query(Lesson).options(selectinload(Lesson.signs)).order_by(Lesson.id).all()


def get_lesson(db: Session, lesson_id: int) -> Optional[Lesson]:
    return db.query(Lesson).options(selectinload(Lesson.signs)).filter_by(id=lesson_id).first()


def create_lesson(db: Session, title: str, description: Optional[str] = None, level: Optional[str] = None) -> Lesson:
    lesson = Lesson(title=title, description=description, level=level)
    db.add(lesson)
    db.commit()
    db.refresh(lesson)
    return lesson


def assign_signs(db: Session, lesson: Lesson, signs: List[SignSample]) -> int:
    for s in signs:
        s.lesson_id = lesson.id
    db.commit()
    return len(signs)


def signs_by_ids(db: Session, sign_ids: List[int]) -> List[SignSample]:
    if not sign_ids:
        return []
    return db.query(SignSample).filter(SignSample.id.in_(sign_ids)).all()


def signs_by_names(db: Session, sign_names: List[str]) -> List[SignSample]:
    names = [n.lower() for n in sign_names]
    if not names:
        return []
    return db.query(SignSample).filter(func.lower(SignSample.sign_name).in_(names)).all()


# ---------- practice sessions ----------

def start_session(db: Session, learner_id: int, lesson_id: Optional[int] = None) -> PracticeSession:
    s = PracticeSession(learner_id=learner_id, lesson_id=lesson_id, total_score=0.0)
    db.add(s)
    db.commit()
    db.refresh(s)
    return s


def get_practice_session(db: Session, session_id: int) -> Optional[PracticeSession]:
    return db.query(PracticeSession).filter_by(id=session_id).first()


def record_attempt(db: Session, session: PracticeSession, sign_id: int, score: float,
                   feedback: Optional[str] = None, record_motion_data=None) -> Attempt:
    attempt = Attempt(
        session_id=session.id,
        sign_id=sign_id,
        score=score,
        feedback=feedback,
        record_motion_data=record_motion_data,
    )
    db.add(attempt)
    db.commit()
    db.refresh(attempt)
    return attempt


def finish_session(db: Session, session: PracticeSession) -> PracticeSession:
    session.end_date = datetime.now(timezone.utc)
    if session.attempts:
        session.total_score = sum(a.score for a in session.attempts) / len(session.attempts)
    db.commit()
    db.refresh(session)
    return session


def session_history(db: Session, learner_id: int) -> List[PracticeSession]:
    return (
        db.query(PracticeSession)
        .options(selectinload(PracticeSession.attempts))
        .filter_by(learner_id=learner_id)
        .order_by(PracticeSession.start_date.desc(), PracticeSession.id.desc())
        .all()
    )


# ---------- progress ----------

def learner_attempts(db: Session, learner_id: int) -> List[Attempt]:
    return (
        db.query(Attempt)
        .join(PracticeSession)
        .options(selectinload(Attempt.sign))
        .filter(PracticeSession.learner_id == learner_id)
        .order_by(Attempt.id)
        .all()
    )


def learner_statistics(db: Session, learner_id: int) -> Optional[dict]:
    attempts = learner_attempts(db, learner_id)
    if not attempts:
        return None

    practiced = {a.sign_id for a in attempts}
    completed = 0
    for lesson in list_lessons(db):
        ids = {s.id for s in lesson.signs}
        if ids and ids <= practiced:
            completed += 1

    best = {}
    for a in attempts:
        name = a.sign.sign_name.lower() if a.sign else str(a.sign_id)
        best[name] = max(best.get(name, a.score), a.score)

    by_day = defaultdict(list)
    for a in attempts:
        day = (a.created_at or datetime.now(timezone.utc)).strftime("%Y-%m-%d")
        by_day[day].append(a.score)

    return {
        "completed_lessons": completed,
        "highest_scores": [{"sign_name": n, "max_score": s} for n, s in sorted(best.items())],
        "timeline": [
            {"date": d, "average_score": sum(v) / len(v), "attempt_count": len(v)}
            for d, v in sorted(by_day.items())
        ],
    }


def lecturer_summary(db: Session, learner_id: int) -> Optional[str]:
    attempts = learner_attempts(db, learner_id)
    if not attempts:
        return None

    avg = sum(a.score for a in attempts) / len(attempts)
    if avg >= 80:
        text = "Excellent! You have mastered the basic signs. Keep up this accuracy."
    elif avg >= 50:
        text = "Good progress. Pay closer attention to small details of the hand shape to reach full marks."
    else:
        text = "Spend more time with the demo videos and practise the reference hand shapes carefully."

    per_sign = defaultdict(list)
    for a in attempts:
        per_sign[a.sign_id].append(a.score)
    weakest_id = min(per_sign, key=lambda k: sum(per_sign[k]) / len(per_sign[k]))
    weakest = db.get(SignSample, weakest_id)
    if weakest is not None:
        text += f" In particular, focus on improving the sign '{weakest.sign_name}'."
    return text
