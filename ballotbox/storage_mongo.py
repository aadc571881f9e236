# storage_mongo.py
import time
import logging
from typing import List, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import AutoReconnect, ConnectionFailure, DuplicateKeyError

from .config import MONGO_URI, MONGO_DB, ELECTIONS_COLLECTION, STORE_RETRIES
from .credentials import CredentialGenerator
from .models.election_model import Election, from_document, to_document, utcnow
from .storage import ElectionStore

logger = logging.getLogger(__name__)


def _object_id(election_id: str) -> Optional[ObjectId]:
    try:
        return ObjectId(election_id)
    except (InvalidId, TypeError):
        return None


class MongoElectionStore(ElectionStore):
    """
    Elections live in one collection, one document per aggregate, with the
    nominees and the voter roster embedded. MongoDB updates to a single
    document are atomic, so `record_vote` closes the double-vote race with
    one conditional `update_one` instead of a read-modify-write.
    """

    def __init__(self, collection=None, generator: Optional[CredentialGenerator] = None,
                 retries: int = STORE_RETRIES):
        super().__init__(generator)
        if collection is None:
            client = MongoClient(MONGO_URI)
            collection = client[MONGO_DB][ELECTIONS_COLLECTION]
            logger.info(f"Connected to MongoDB at {MONGO_URI}, database: {MONGO_DB}")
        self.collection = collection
        self.retries = max(1, retries)

        self.collection.create_index("voting_token", unique=True)
        self.collection.create_index([("creator_id", ASCENDING), ("created_at", DESCENDING)])

    def _read(self, op, *args, **kwargs):
        """Run a read, retrying on transient connection errors."""
        for attempt in range(1, self.retries + 1):
            try:
                return op(*args, **kwargs)
            except (AutoReconnect, ConnectionFailure) as e:
                if attempt == self.retries:
                    logger.error(f"MongoDB read failed after {attempt} attempts: {e}")
                    raise
                logger.warning(f"MongoDB read failed ({e}), retrying")
                time.sleep(0.05 * attempt)

    # Writes below are single-document operations and rely on the driver's
    # retryable writes, so a failure never leaves half an election or half
    # a vote behind.

    def _insert(self, election: Election) -> bool:
        try:
            self.collection.insert_one(to_document(election))
        except DuplicateKeyError:
            logger.warning(f"Voting token collision on insert for election {election.id}")
            return False
        return True

    def _load_by_token(self, token: str) -> Optional[Election]:
        doc = self._read(self.collection.find_one, {"voting_token": token})
        return from_document(doc) if doc else None

    def _load_by_id(self, election_id: str) -> Optional[Election]:
        oid = _object_id(election_id)
        if oid is None:
            return None
        doc = self._read(self.collection.find_one, {"_id": oid})
        return from_document(doc) if doc else None

    def _load_by_creator(self, creator_id: str) -> List[Election]:
        def fetch():
            cursor = self.collection.find({"creator_id": creator_id}).sort("created_at", DESCENDING)
            return [from_document(doc) for doc in cursor]
        return self._read(fetch)

    def _remove(self, election_id: str) -> bool:
        oid = _object_id(election_id)
        if oid is None:
            return False
        return self.collection.delete_one({"_id": oid}).deleted_count == 1

    def _set_status(self, election_id: str, status: str) -> bool:
        oid = _object_id(election_id)
        if oid is None:
            return False
        return self.collection.update_one({"_id": oid}, {"$set": {"status": status}}).matched_count == 1

    def token_exists(self, token: str) -> bool:
        return self._read(self.collection.count_documents, {"voting_token": token}, limit=1) > 0

    def record_vote(self, election_id: str, voter_id: str, voter_key: str, nominee_id: str) -> bool:
        oid = _object_id(election_id)
        if oid is None:
            return False
        result = self.collection.update_one(
            {
                "_id": oid,
                "nominees.id": nominee_id,
                "voters": {"$elemMatch": {
                    "voter_id": voter_id,
                    "voter_key": voter_key,
                    "has_voted": False,
                }},
            },
            {
                "$set": {"voters.$[v].has_voted": True, "voters.$[v].voted_at": utcnow()},
                "$inc": {"nominees.$[n].vote_count": 1},
            },
            array_filters=[
                {"v.voter_id": voter_id, "v.voter_key": voter_key, "v.has_voted": False},
                {"n.id": nominee_id},
            ],
        )
        return result.modified_count == 1

    def close(self):
        self.collection.database.client.close()
        logger.info("MongoDB connection closed")
