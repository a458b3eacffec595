from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from .landmark import LandmarkIn


class SignSampleIn(BaseModel):
    sign_name: str
    landmarks: List[LandmarkIn] = Field(..., min_length=21, max_length=21)
    file_name: Optional[str] = None
    source_file_name: Optional[str] = None
    is_augmented: bool = False
    frame_index: Optional[int] = None

    @field_validator("sign_name")
    @classmethod
    def sign_name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Sign name is required")
        return v.strip()

    def to_storage(self) -> dict:
        data = self.model_dump()
        data["landmarks"] = [lm.model_dump(exclude_none=True) for lm in self.landmarks]
        return data


class SignSampleOut(BaseModel):
    id: int
    sign_name: str
    file_name: Optional[str] = None
    source_file_name: Optional[str] = None
    is_augmented: bool = False
    frame_index: Optional[int] = None
    lesson_id: Optional[int] = None
    landmarks: List[LandmarkIn]
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SignStatsOut(BaseModel):
    sign_name: str
    count: int
    augmented_count: int
