# ballotbox/storage.py
import logging
import threading
from typing import Dict, Iterable, List, Optional

from .credentials import CredentialGenerator
from .errors import ConflictError, Forbidden, NotFound, ValidationError
from .models.election_model import CLOSED, Election, Nominee, Voter, aware_utc, utcnow

logger = logging.getLogger(__name__)


class ElectionStore:
    """
    System of record for election aggregates.

    Subclasses supply the persistence primitives (`_insert`, `_load_*`,
    `_remove`, `_set_status`, `token_exists`, `record_vote`); the
    validation, credential generation and ownership rules live here so
    every backend enforces them the same way.
    """

    def __init__(self, generator: Optional[CredentialGenerator] = None):
        self.generator = generator or CredentialGenerator()

    # --- persistence primitives -------------------------------------------

    def _insert(self, election: Election) -> bool:
        """Persist a new aggregate. False if its voting token is already taken."""
        raise NotImplementedError

    def _load_by_token(self, token: str) -> Optional[Election]:
        raise NotImplementedError

    def _load_by_id(self, election_id: str) -> Optional[Election]:
        raise NotImplementedError

    def _load_by_creator(self, creator_id: str) -> List[Election]:
        raise NotImplementedError

    def _remove(self, election_id: str) -> bool:
        raise NotImplementedError

    def _set_status(self, election_id: str, status: str) -> bool:
        raise NotImplementedError

    def token_exists(self, token: str) -> bool:
        raise NotImplementedError

    def record_vote(self, election_id: str, voter_id: str, voter_key: str, nominee_id: str) -> bool:
        """
        Atomic check-and-flip. If the voter matching (voter_id, voter_key)
        has not voted, mark them voted and add one to the nominee's counter,
        both or neither. Returns True when this call flipped the flag.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release backend resources; nothing to release by default."""

    # --- operations -------------------------------------------------------

    def create_election(
        self,
        title: str,
        description: str,
        creator_id: str,
        nominees: Iterable[str],
        voters: Iterable[dict],
        start_date=None,
        end_date=None,
    ) -> Election:
        nominees = [(n or "").strip() for n in nominees]
        voters = [dict(v) for v in voters]
        start_date, end_date = aware_utc(start_date), aware_utc(end_date)
        _validate(title, creator_id, nominees, voters, start_date, end_date)

        pairs = self.generator.generate_for_roster(len(voters))
        roster = [
            Voter(
                voter_id=voter_id,
                voter_key=voter_key,
                name=(v.get("name") or "").strip(),
                email=v["email"].strip(),
            )
            for v, (voter_id, voter_key) in zip(voters, pairs)
        ]

        # token_exists is only a pre-check; the insert itself is the
        # authority on uniqueness, so a token taken in between is retried
        for _attempt in range(self.generator.token_retries):
            election = Election(
                title=title.strip(),
                description=(description or "").strip(),
                creator_id=creator_id,
                voting_token=self.generator.voting_token(self.token_exists),
                nominees=[Nominee(name=name) for name in nominees],
                voters=roster,
                start_date=start_date,
                end_date=end_date,
            )
            if self._insert(election):
                break
            logger.warning(f"Voting token {election.voting_token} taken on insert, regenerating")
        else:
            raise ConflictError("Could not generate a unique voting token.")
        logger.info(
            f"Election {election.id} created by {creator_id} with "
            f"{len(election.nominees)} nominees and {len(election.voters)} voters"
        )
        return election

    def find_by_token(self, token: str) -> Election:
        election = self._load_by_token(token)
        if election is None:
            raise NotFound()
        return election

    def find_by_id(self, election_id: str) -> Election:
        election = self._load_by_id(election_id)
        if election is None:
            raise NotFound()
        return election

    def find_by_creator(self, creator_id: str) -> List[Election]:
        return self._load_by_creator(creator_id)

    def _owned(self, election_id: str, requester_id: str) -> Election:
        election = self.find_by_id(election_id)
        if election.creator_id != requester_id:
            logger.warning(f"User {requester_id} denied access to election {election_id}")
            raise Forbidden()
        return election

    def delete_by_id(self, election_id: str, requester_id: str) -> None:
        self._owned(election_id, requester_id)
        if not self._remove(election_id):
            raise NotFound()
        logger.info(f"Election {election_id} deleted by {requester_id}")

    def close_election(self, election_id: str, requester_id: str) -> Election:
        self._owned(election_id, requester_id)
        if not self._set_status(election_id, CLOSED):
            raise NotFound()
        logger.info(f"Election {election_id} closed by {requester_id}")
        return self.find_by_id(election_id)


def _validate(title, creator_id, nominees, voters, start_date, end_date) -> None:
    if not (title or "").strip():
        raise ValidationError("Election title is required.")
    if not creator_id:
        raise ValidationError("Election creator is required.")
    if not nominees:
        raise ValidationError("At least one nominee is required.")
    if any(not name for name in nominees):
        raise ValidationError("Nominee names must not be empty.")
    for voter in voters:
        if not (voter.get("email") or "").strip():
            raise ValidationError("Voter emails must not be empty.")
    if start_date is not None and end_date is not None and end_date <= start_date:
        raise ValidationError("Election end date must be after its start date.")


class MemoryElectionStore(ElectionStore):
    """
    In-process store. Each election has its own lock; every read copies the
    aggregate under that lock, so callers only ever see whole snapshots and
    `record_vote` is a critical section scoped to one election.
    """

    def __init__(self, generator: Optional[CredentialGenerator] = None):
        super().__init__(generator)
        self._elections: Dict[str, Election] = {}
        self._tokens: Dict[str, str] = {}
        self._locks: Dict[str, threading.Lock] = {}
        # guards the three dicts above; an election lock may be held when taking
        # it, never the other way round
        self._registry_lock = threading.Lock()

    def _entry(self, election_id: str):
        with self._registry_lock:
            return self._elections.get(election_id), self._locks.get(election_id)

    def _is_current(self, election_id: str, election: Election) -> bool:
        # call with the election lock held: False once the aggregate was removed
        with self._registry_lock:
            return self._elections.get(election_id) is election

    def _snapshot(self, election_id: Optional[str]) -> Optional[Election]:
        if election_id is None:
            return None
        election, lock = self._entry(election_id)
        if election is None:
            return None
        with lock:
            return election.model_copy(deep=True)

    def _insert(self, election: Election) -> bool:
        with self._registry_lock:
            if election.voting_token in self._tokens:
                return False
            self._elections[election.id] = election.model_copy(deep=True)
            self._tokens[election.voting_token] = election.id
            self._locks[election.id] = threading.Lock()
            return True

    def _load_by_token(self, token: str) -> Optional[Election]:
        with self._registry_lock:
            election_id = self._tokens.get(token)
        return self._snapshot(election_id)

    def _load_by_id(self, election_id: str) -> Optional[Election]:
        return self._snapshot(election_id)

    def _load_by_creator(self, creator_id: str) -> List[Election]:
        with self._registry_lock:
            ids = [e.id for e in self._elections.values() if e.creator_id == creator_id]
        found = [e for e in (self._snapshot(i) for i in ids) if e is not None]
        return sorted(found, key=lambda e: e.created_at, reverse=True)

    def _remove(self, election_id: str) -> bool:
        election, lock = self._entry(election_id)
        if election is None:
            return False
        # waits for any vote in progress, so a vote either lands before the
        # removal or sees the election gone
        with lock:
            with self._registry_lock:
                if self._elections.get(election_id) is not election:
                    return False
                del self._elections[election_id]
                self._tokens.pop(election.voting_token, None)
                self._locks.pop(election_id, None)
                return True

    def _set_status(self, election_id: str, status: str) -> bool:
        election, lock = self._entry(election_id)
        if election is None:
            return False
        with lock:
            if not self._is_current(election_id, election):
                return False
            election.status = status
        return True

    def token_exists(self, token: str) -> bool:
        with self._registry_lock:
            return token in self._tokens

    def record_vote(self, election_id: str, voter_id: str, voter_key: str, nominee_id: str) -> bool:
        election, lock = self._entry(election_id)
        if election is None:
            return False
        with lock:
            if not self._is_current(election_id, election):
                return False
            voter = election.find_voter(voter_id, voter_key)
            nominee = election.find_nominee(nominee_id)
            if voter is None or nominee is None or voter.has_voted:
                return False
            voter.has_voted = True
            voter.voted_at = utcnow()
            nominee.vote_count += 1
            return True
