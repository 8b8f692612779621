from datetime import datetime
from typing import List

from pydantic import BaseModel


class SessionSummary(BaseModel):
    numeric_id: str
    stakes: str
    net_cents: int
    settled_at: datetime


class UserStatsResponse(BaseModel):
    """A linked user's results across settled sessions."""
    user_id: str
    total_net_cents: int
    session_count: int
    sessions: List[SessionSummary]
