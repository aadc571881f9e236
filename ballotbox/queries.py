# ballotbox/queries.py
# Read-only projections of the election aggregate. None of them expose
# voter credentials; only the organizer summary sees per-election counts.
from datetime import datetime
from typing import List, Optional

from .config import PUBLIC_BASE_URL
from .models.election_model import Election
from .storage import ElectionStore


def voting_url(token: str) -> str:
    return f"{PUBLIC_BASE_URL}/vote/{token}"


def turnout(voted_count: int, voters_count: int) -> float:
    if voters_count == 0:
        return 0.0
    return voted_count / voters_count


def public_ballot(store: ElectionStore, token: str, now: Optional[datetime] = None) -> dict:
    election = store.find_by_token(token)
    return {
        "id": election.id,
        "title": election.title,
        "description": election.description,
        "status": election.current_status(now),
        "nominees": [{"id": n.id, "name": n.name} for n in election.nominees],
    }


def results(store: ElectionStore, election_id: str, now: Optional[datetime] = None) -> dict:
    election = store.find_by_id(election_id)
    total_voters = len(election.voters)
    voted_count = election.voted_count
    return {
        "title": election.title,
        "description": election.description,
        "status": election.current_status(now),
        "nominees": [{"name": n.name, "vote_count": n.vote_count} for n in election.nominees],
        "total_voters": total_voters,
        "voted_count": voted_count,
        "turnout": turnout(voted_count, total_voters),
        "created_at": election.created_at,
    }


def election_summary(election: Election, now: Optional[datetime] = None) -> dict:
    voters_count = len(election.voters)
    voted_count = election.voted_count
    return {
        "id": election.id,
        "title": election.title,
        "description": election.description,
        "status": election.current_status(now),
        "voting_url": voting_url(election.voting_token),
        "nominees": [
            {"id": n.id, "name": n.name, "vote_count": n.vote_count} for n in election.nominees
        ],
        "voters_count": voters_count,
        "voted_count": voted_count,
        "turnout": turnout(voted_count, voters_count),
        "start_date": election.start_date,
        "end_date": election.end_date,
        "created_at": election.created_at,
    }


def summary(store: ElectionStore, creator_id: str, now: Optional[datetime] = None) -> List[dict]:
    return [election_summary(e, now) for e in store.find_by_creator(creator_id)]
