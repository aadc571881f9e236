from fastapi import APIRouter, Depends

from ..credentials import normalize_credential
from ..database.connection import get_store
from ..ledger import cast_vote, verify_voter
from ..models.vote_model import Vote, VoterCredentials
from ..schemas import VerifyOut, VoteReceipt
from ..storage import ElectionStore

vote_router = APIRouter(prefix="/vote", tags=["Vote"])


@vote_router.post("/verify", response_model=VerifyOut)
def verify(creds: VoterCredentials, store: ElectionStore = Depends(get_store)):
    """
    Checks a voter's credential pair before the ballot is shown.
    Nothing is reserved; /vote/cast checks the credential again.
    """
    voter = verify_voter(
        store,
        creds.voting_token,
        normalize_credential(creds.voter_id),
        normalize_credential(creds.voter_key),
    )
    return {"message": "Voter verified successfully", "voter": voter}


@vote_router.post("/cast", response_model=VoteReceipt)
def cast(vote: Vote, store: ElectionStore = Depends(get_store)):
    """
    Casts a vote. The vote counts as soon as the store records it, whether or
    not this response reaches the client.
    """
    receipt = cast_vote(
        store,
        vote.voting_token,
        normalize_credential(vote.voter_id),
        normalize_credential(vote.voter_key),
        vote.nominee_id,
    )
    return {"message": "Vote cast successfully", "voted_for": receipt["voted_for"]}
