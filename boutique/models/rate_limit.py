from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint


class RateLimitCounter(SQLModel, table=True):
    """Request count for one client key within one fixed window."""
    __tablename__ = "rate_limit_counters"
    __table_args__ = (UniqueConstraint("key", "window_start"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(index=True)
    window_start: int = Field(index=True)
    # window_start + window length; rows at or past it are evicted
    expires_at: int = Field(index=True)
    count: int = Field(default=0)
