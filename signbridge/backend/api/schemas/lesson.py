from typing import List, Optional

from pydantic import BaseModel

from .sign import SignSampleOut


class LessonIn(BaseModel):
    title: str
    description: Optional[str] = None
    level: Optional[str] = None


class LessonUpdateIn(LessonIn):
    id: int


class LessonOut(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    level: Optional[str] = None
    signs: List[SignSampleOut] = []

    class Config:
        from_attributes = True
