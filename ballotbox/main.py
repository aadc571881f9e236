# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import CORS_ORIGINS, LOG_LEVEL, STORAGE_BACKEND
from .database.connection import close_store
from .errors import ElectionError
from .routes.election_routes import router as election_router
from .routes.vote_routes import vote_router

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # shutdown
    close_store()


app = FastAPI(title="BallotBox - Closed-Roster Election API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(election_router)
app.include_router(vote_router)


@app.exception_handler(ElectionError)
async def election_error_handler(request: Request, exc: ElectionError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
    )


@app.get("/health", tags=["Root"])
async def health_check():
    return {"status": "healthy", "storage": STORAGE_BACKEND}


@app.get("/", tags=["Root"])
def read_root():
    return {"message": "Welcome to the BallotBox API"}


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return Response(status_code=204)


def run():
    import uvicorn
    uvicorn.run("ballotbox.main:app", host="0.0.0.0", port=8000)
