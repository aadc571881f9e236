# ballotbox/credentials.py
import secrets
import logging
from typing import Callable, Set, Tuple

from .config import (
    VOTER_ID_BYTES,
    VOTER_KEY_BYTES,
    VOTING_TOKEN_BYTES,
    TOKEN_RETRIES,
    CREDENTIAL_RETRIES,
)
from .errors import ConflictError

logger = logging.getLogger(__name__)


class CredentialGenerator:
    """
    Produces voter credentials and election voting tokens.

    `random_bytes` defaults to `secrets.token_bytes`; tests swap it for a
    deterministic source to force collisions.
    """

    def __init__(
        self,
        random_bytes: Callable[[int], bytes] = secrets.token_bytes,
        token_retries: int = TOKEN_RETRIES,
        credential_retries: int = CREDENTIAL_RETRIES,
    ):
        self.random_bytes = random_bytes
        self.token_retries = token_retries
        self.credential_retries = credential_retries

    def _hex(self, nbytes: int) -> str:
        return self.random_bytes(nbytes).hex().upper()

    def generate(self) -> Tuple[str, str]:
        """Return a fresh (voter_id, voter_key) pair."""
        return self._hex(VOTER_ID_BYTES), self._hex(VOTER_KEY_BYTES)

    def generate_for_roster(self, count: int) -> list:
        """
        Generate `count` credential pairs whose voter ids are unique within
        the roster. A colliding voter id is regenerated; after
        `credential_retries` consecutive collisions a ConflictError is raised.
        """
        seen: Set[str] = set()
        pairs = []
        for _ in range(count):
            for _attempt in range(self.credential_retries):
                voter_id, voter_key = self.generate()
                if voter_id not in seen:
                    break
                logger.warning("Voter ID collision within roster, regenerating")
            else:
                raise ConflictError("Could not generate a unique voter ID for the roster.")
            seen.add(voter_id)
            pairs.append((voter_id, voter_key))
        return pairs

    def voting_token(self, exists: Callable[[str], bool]) -> str:
        """
        Return a voting token for which `exists(token)` is False.
        Retried on collision, ConflictError once retries run out.
        """
        for _attempt in range(self.token_retries):
            token = self.random_bytes(VOTING_TOKEN_BYTES).hex()
            if not exists(token):
                return token
            logger.warning("Voting token collision, regenerating")
        raise ConflictError("Could not generate a unique voting token.")


def normalize_credential(value: str) -> str:
    # credentials are issued uppercase; clients may type them in any case
    return (value or "").strip().upper()
