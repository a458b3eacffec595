from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from .landmark import LandmarkIn


class SessionStartIn(BaseModel):
    learner_id: int
    lesson_id: Optional[int] = None


class AttemptIn(BaseModel):
    sign_id: int
    score: float = Field(..., ge=0, le=100)
    feedback: Optional[str] = None
    record_motion_data: Optional[Any] = None


class EvaluateIn(BaseModel):
    sign_id: int
    landmarks: List[LandmarkIn] = Field(..., min_length=21, max_length=21)


class AttemptOut(BaseModel):
    id: int
    session_id: int
    sign_id: int
    score: float
    feedback: Optional[str] = None
    record_motion_data: Optional[Any] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SessionOut(BaseModel):
    id: int
    learner_id: int
    lesson_id: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    total_score: float
    attempts: List[AttemptOut] = []

    class Config:
        from_attributes = True
