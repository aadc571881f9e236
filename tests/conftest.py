import secrets

import pytest

from ballotbox.credentials import CredentialGenerator
from ballotbox.storage import MemoryElectionStore

NOMINEES = ["Alice", "Bob"]
VOTERS = [{"name": "n1", "email": "a@x.com"}, {"name": "n2", "email": "b@x.com"}]


class ScriptedBytes:
    """Random source whose 4-byte draws (voter ids) come from a fixed list."""

    def __init__(self, voter_ids, voter_key=None):
        self.voter_ids = list(voter_ids)
        self.voter_key = voter_key

    def __call__(self, n):
        if n == 4 and self.voter_ids:
            return bytes.fromhex(self.voter_ids.pop(0))
        if n == 6 and self.voter_key:
            return bytes.fromhex(self.voter_key)
        return secrets.token_bytes(n)


@pytest.fixture
def store():
    return MemoryElectionStore()


@pytest.fixture
def election(store):
    return store.create_election("Board", "Annual board vote", "creator-1", NOMINEES, VOTERS)


def tally_matches_roster(election):
    return election.total_votes == election.voted_count


@pytest.fixture
def lettered_election():
    # credentials with letters in them, so case variants really differ
    gen = CredentialGenerator(random_bytes=ScriptedBytes(["ABCD1234", "BCDE2345"], "ABCDEF123456"))
    store = MemoryElectionStore(gen)
    return store, store.create_election("Board", "", "creator-1", NOMINEES, VOTERS)
