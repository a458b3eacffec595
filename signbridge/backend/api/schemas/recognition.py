from typing import List, Optional

from pydantic import BaseModel, Field

from .landmark import LandmarkIn


class RecognizeIn(BaseModel):
    landmarks: List[LandmarkIn] = Field(..., min_length=21, max_length=21)
    lesson_id: Optional[int] = None


class MatchOut(BaseModel):
    sign_name: str
    avg_distance: float
    sample_count: int
    confidence: int


class RankOut(BaseModel):
    sign_name: str
    avg_distance: float
    sample_count: int


class RecognizeOut(BaseModel):
    match: Optional[MatchOut] = None
    ranking: List[RankOut] = []
