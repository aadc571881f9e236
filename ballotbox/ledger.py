"""
Casting engine: credential verification and vote recording.

The engine keeps no state. Both operations work on a snapshot read from the
store for the checks that cannot change (the election exists, the credential
pair is on the roster, the nominee belongs to this election) and leave the
one check that can change, the voter's ``has_voted`` flag, to the store's
atomic ``record_vote``. Two concurrent casts for the same voter can both
pass the snapshot checks; only one of them can win ``record_vote``.
"""
import logging
from datetime import datetime
from typing import Optional

from .errors import AlreadyVoted, ElectionClosed, InvalidCredentials, InvalidNominee
from .models.election_model import ACTIVE, Election, Voter
from .storage import ElectionStore

logger = logging.getLogger(__name__)


def _open_election(store: ElectionStore, token: str, now: Optional[datetime]) -> Election:
    election = store.find_by_token(token)
    status = election.current_status(now)
    if status != ACTIVE:
        raise ElectionClosed(f"This election is {status}.")
    return election


def _roster_entry(election: Election, voter_id: str, voter_key: str) -> Voter:
    voter = election.find_voter(voter_id, voter_key)
    if voter is None:
        logger.warning(f"Invalid credentials presented for election {election.id}")
        raise InvalidCredentials()
    return voter


def verify_voter(store: ElectionStore, token: str, voter_id: str, voter_key: str,
                 now: Optional[datetime] = None) -> dict:
    """
    Confirm a credential before the ballot is shown. Read only; it reserves
    nothing, `cast_vote` checks everything again.
    """
    election = _open_election(store, token, now)
    voter = _roster_entry(election, voter_id, voter_key)
    if voter.has_voted:
        raise AlreadyVoted()
    return {"name": voter.name, "voter_id": voter.voter_id}


def cast_vote(store: ElectionStore, token: str, voter_id: str, voter_key: str,
              nominee_id: str, now: Optional[datetime] = None) -> dict:
    """
    Record one vote for `nominee_id`.

    Raises NotFound, ElectionClosed, InvalidCredentials, InvalidNominee or
    AlreadyVoted, in that order of precedence. Not idempotent: once a voter
    has voted every later call for that credential raises AlreadyVoted.
    """
    election = _open_election(store, token, now)
    voter = _roster_entry(election, voter_id, voter_key)
    nominee = election.find_nominee(nominee_id)
    if nominee is None:
        raise InvalidNominee()
    if voter.has_voted:
        logger.warning(f"Repeat vote attempt by {voter_id} in election {election.id}")
        raise AlreadyVoted()

    if not store.record_vote(election.id, voter_id, voter_key, nominee_id):
        # the credential and nominee were valid in the snapshot and never
        # change, so a lost flip means another request voted first, unless
        # the election was deleted in between (find_by_id raises NotFound)
        store.find_by_id(election.id)
        logger.warning(f"Concurrent vote by {voter_id} in election {election.id} lost the race")
        raise AlreadyVoted()

    logger.info(f"Vote recorded in election {election.id} by voter {voter_id}")
    return {"voted_for": nominee.name, "nominee_id": nominee.id}
