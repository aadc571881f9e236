from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class VoterIn(BaseModel):
    name: str = ""
    email: EmailStr


class ElectionCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = ""
    nominees: List[str] = Field(..., min_length=1)
    voters: List[VoterIn] = Field(default_factory=list)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class NomineeOut(BaseModel):
    id: str
    name: str


class NomineeTally(BaseModel):
    name: str
    vote_count: int


class IssuedCredential(BaseModel):
    name: str
    email: str
    voter_id: str
    voter_key: str


class ElectionCreated(BaseModel):
    id: str
    title: str
    description: str
    status: str
    voting_token: str
    voting_url: str
    nominees: List[NomineeOut]
    voters_count: int
    credentials: List[IssuedCredential]


class BallotOut(BaseModel):
    id: str
    title: str
    description: str
    status: str
    nominees: List[NomineeOut]


class ResultsOut(BaseModel):
    title: str
    description: str
    status: str
    nominees: List[NomineeTally]
    total_voters: int
    voted_count: int
    turnout: float
    created_at: datetime


class SummaryNominee(NomineeOut):
    vote_count: int


class ElectionSummary(BaseModel):
    id: str
    title: str
    description: str
    status: str
    voting_url: str
    nominees: List[SummaryNominee]
    voters_count: int
    voted_count: int
    turnout: float
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: datetime


class VoterPublicView(BaseModel):
    name: str
    voter_id: str


class VerifyOut(BaseModel):
    message: str
    voter: VoterPublicView


class VoteReceipt(BaseModel):
    message: str
    voted_for: str
