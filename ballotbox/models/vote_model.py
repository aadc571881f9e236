from pydantic import BaseModel, Field


class VoterCredentials(BaseModel):
    voting_token: str = Field(..., min_length=1)
    voter_id: str = Field(..., min_length=1)
    voter_key: str = Field(..., min_length=1)


class Vote(VoterCredentials):
    nominee_id: str = Field(..., min_length=1)
