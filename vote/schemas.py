# src/vote/schemas.py
from pydantic import BaseModel
from datetime import datetime
from typing import List, Literal, Optional

from utils.pagination import PaginationMeta


class VoteCast(BaseModel):
    type: Literal["UPVOTE", "DOWNVOTE"]


class VoteCreate(VoteCast):
    food_spot_id: int


class VoteFilters(BaseModel):
    type: Optional[str] = None
    user_id: Optional[int] = None
    food_spot_id: Optional[int] = None


class VoteResponse(BaseModel):
    id: int
    type: str
    user_id: int
    food_spot_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class VoteResult(BaseModel):
    """Outcome of casting a vote. `vote` is None when the same vote was cast again and got removed."""
    vote: Optional[VoteResponse]
    total_upvotes: int
    total_downvotes: int


class PaginatedVoteResponse(BaseModel):
    meta: PaginationMeta
    data: List[VoteResponse]
