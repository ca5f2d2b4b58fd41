"""Market-wide indicator models."""

from pydantic import BaseModel


class VixSnapshot(BaseModel):
    """VIX波动率指数快照."""

    current: float
    fifty_day_avg: float
    rating: str
