from typing import Optional

from pydantic import BaseModel


class LandmarkIn(BaseModel):
    x: float
    y: float
    z: float
    visibility: Optional[float] = None
