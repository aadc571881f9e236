from typing import List

from fastapi import APIRouter, Depends

from ..database.connection import get_store
from ..notifications import CredentialNotifier, get_notifier, notify_voters
from ..queries import election_summary, public_ballot, results, summary, voting_url
from ..schemas import BallotOut, ElectionCreate, ElectionCreated, ElectionSummary, ResultsOut
from ..security import get_current_creator
from ..storage import ElectionStore

router = APIRouter(prefix="/election", tags=["Election"])


@router.post("/create", response_model=ElectionCreated, status_code=201)
def create_election(
    payload: ElectionCreate,
    creator_id: str = Depends(get_current_creator),
    store: ElectionStore = Depends(get_store),
    notifier: CredentialNotifier = Depends(get_notifier),
):
    election = store.create_election(
        title=payload.title,
        description=payload.description,
        creator_id=creator_id,
        nominees=payload.nominees,
        voters=[v.model_dump() for v in payload.voters],
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    notify_voters(notifier, election)

    # credentials go back to the organizer once, at creation time
    return {
        "id": election.id,
        "title": election.title,
        "description": election.description,
        "status": election.current_status(),
        "voting_token": election.voting_token,
        "voting_url": voting_url(election.voting_token),
        "nominees": [{"id": n.id, "name": n.name} for n in election.nominees],
        "voters_count": len(election.voters),
        "credentials": [
            {"name": v.name, "email": v.email, "voter_id": v.voter_id, "voter_key": v.voter_key}
            for v in election.voters
        ],
    }


@router.get("/mine", response_model=List[ElectionSummary])
def my_elections(
    creator_id: str = Depends(get_current_creator),
    store: ElectionStore = Depends(get_store),
):
    return summary(store, creator_id)


@router.get("/vote/{token}", response_model=BallotOut)
def get_ballot(token: str, store: ElectionStore = Depends(get_store)):
    return public_ballot(store, token)


# Results are public: anyone holding the election id can read the tally.
@router.get("/results/{election_id}", response_model=ResultsOut)
def get_results(election_id: str, store: ElectionStore = Depends(get_store)):
    return results(store, election_id)


@router.post("/{election_id}/close", response_model=ElectionSummary)
def close_election(
    election_id: str,
    creator_id: str = Depends(get_current_creator),
    store: ElectionStore = Depends(get_store),
):
    election = store.close_election(election_id, creator_id)
    return election_summary(election)


@router.delete("/{election_id}")
def delete_election(
    election_id: str,
    creator_id: str = Depends(get_current_creator),
    store: ElectionStore = Depends(get_store),
):
    store.delete_by_id(election_id, creator_id)
    return {"message": "Election deleted successfully"}
