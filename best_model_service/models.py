import math
from typing import Any, Optional, Union

from pydantic import BaseModel, StrictInt, confloat, field_validator

# ints are kept as ints so a submitted 7 is stored as 7, not 7.0
Score = Union[int, float]


class Record(BaseModel):
    name: str
    score: Score
    data: Any = None  # opaque payload, stored and returned verbatim


class CommitResult(BaseModel):
    accepted: bool
    record: Record  # new record if accepted, currently held one if rejected


# --------- HTTP schemas ----------
class SaveModelIn(BaseModel):
    # strict: true and "7" are not scores
    score: Union[StrictInt, confloat(strict=True, allow_inf_nan=False)]
    data: Any = None
    name: Optional[str] = None

    @field_validator("score")
    @classmethod
    def score_fits_a_float(cls, v):
        # huge ints would be written fine but could never be read back
        try:
            math.isfinite(v)
        except OverflowError:
            raise ValueError("score out of range")
        return v


class SaveModelOut(BaseModel):
    success: bool
    message: str
    current: Optional[Record] = None
