from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from pydantic import BaseModel, Field

ACTIVE = "active"
CLOSED = "closed"
SCHEDULED = "scheduled"
EXPIRED = "expired"


def new_id() -> str:
    return str(ObjectId())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Nominee(BaseModel):
    id: str = Field(default_factory=new_id)
    name: str
    vote_count: int = 0


class Voter(BaseModel):
    voter_id: str
    voter_key: str
    name: str
    email: str
    has_voted: bool = False
    voted_at: Optional[datetime] = None

    def matches(self, voter_id: str, voter_key: str) -> bool:
        # exact, case-sensitive comparison of both halves of the credential
        return self.voter_id == voter_id and self.voter_key == voter_key


class Election(BaseModel):
    id: str = Field(default_factory=new_id)
    title: str
    description: str = ""
    creator_id: str
    voting_token: str
    status: str = ACTIVE
    nominees: List[Nominee]
    voters: List[Voter]
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)

    def find_voter(self, voter_id: str, voter_key: str) -> Optional[Voter]:
        for voter in self.voters:
            if voter.matches(voter_id, voter_key):
                return voter
        return None

    def find_nominee(self, nominee_id: str) -> Optional[Nominee]:
        for nominee in self.nominees:
            if nominee.id == nominee_id:
                return nominee
        return None

    @property
    def voted_count(self) -> int:
        return sum(1 for v in self.voters if v.has_voted)

    @property
    def total_votes(self) -> int:
        return sum(n.vote_count for n in self.nominees)

    def current_status(self, now: Optional[datetime] = None) -> str:
        return effective_status(now or utcnow(), self.start_date, self.end_date, self.status)


def aware_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Mongo hands back naive UTC datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def effective_status(
    now: datetime,
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    status: str,
) -> str:
    """
    Status as seen at `now`. Derived on every read, never written back:
    a stored `closed` always wins, otherwise the schedule window decides.
    """
    if status == CLOSED:
        return CLOSED
    now = aware_utc(now)
    start_date = aware_utc(start_date)
    end_date = aware_utc(end_date)
    if start_date is not None and now < start_date:
        return SCHEDULED
    if end_date is not None and now >= end_date:
        return EXPIRED
    return ACTIVE


def to_document(election: Election) -> dict:
    """Mongo document for an election aggregate (roster and nominees embedded)."""
    doc = election.model_dump()
    doc["_id"] = ObjectId(doc.pop("id"))
    return doc


def from_document(doc: dict) -> Election:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    for field in ("start_date", "end_date", "created_at"):
        data[field] = aware_utc(data.get(field))
    for voter in data.get("voters", []):
        voter["voted_at"] = aware_utc(voter.get("voted_at"))
    return Election(**data)
