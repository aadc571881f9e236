# ballotbox/config.py
# Central place for settings and constants
import os
from dotenv import load_dotenv

load_dotenv()

# Storage backend: "memory" for local runs and tests, "mongo" for deployments
STORAGE_BACKEND = os.getenv("BALLOTBOX_STORAGE", "memory").lower()

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
MONGO_DB = os.getenv("MONGO_DB", "ballotbox")
ELECTIONS_COLLECTION = "elections"

# Organizer bearer tokens (issued by whatever login service sits in front)
SECRET_KEY = os.getenv("SECRET_KEY", "a_very_secret_key_for_dev_only")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Voting links handed to voters are PUBLIC_BASE_URL/vote/<token>
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:3000").rstrip("/")

CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]

# Credential widths in random bytes (hex output is twice as long)
VOTER_ID_BYTES = 4
VOTER_KEY_BYTES = 6
VOTING_TOKEN_BYTES = 8

# Regeneration attempts before giving up with a ConflictError
TOKEN_RETRIES = int(os.getenv("TOKEN_RETRIES", "5"))
CREDENTIAL_RETRIES = int(os.getenv("CREDENTIAL_RETRIES", "5"))

# Retries for transient storage failures (connection resets, failovers)
STORE_RETRIES = int(os.getenv("STORE_RETRIES", "3"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
