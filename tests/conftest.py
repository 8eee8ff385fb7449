# tests/conftest.py
import pytest
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from jobboard.core.config import settings
from jobboard.db import mongo
from jobboard.services.auth import Session, create_access_token

RECRUITER = Session(user_id="rec-1", display_name="Rita Recruiter", role="recruiter")
CANDIDATE = Session(user_id="cand-1", display_name="Jane Doe", role="candidate")
STRANGER = Session(user_id="cand-2", display_name="Sam Smith", role="candidate")


async def seed_people(db):
    await db["users"].insert_many([
        {"_id": "rec-1", "name": "Rita Recruiter", "email": "rita@acme.test", "role": "recruiter", "company": "Acme"},
        {"_id": "cand-1", "name": "Jane Doe", "email": "jane@example.com", "role": "candidate"},
        {"_id": "cand-2", "name": "Sam Smith", "email": "sam@example.com", "role": "candidate"},
    ])
    await db["candidateProfiles"].insert_one(
        {"_id": "cand-1", "name": "Jane Doe", "email": "jane@example.com", "title": "Backend Engineer"}
    )
    await db["jobs"].insert_one(
        {"_id": "job-1", "recruiterId": "rec-1", "title": "Backend Engineer", "company": "Acme", "status": "active"}
    )


@pytest.fixture(autouse=True)
def db(monkeypatch):
    """Fresh in-memory database per test; live queries poll quickly."""
    monkeypatch.setattr(settings, "LIVE_QUERY_MODE", "poll")
    monkeypatch.setattr(settings, "LIVE_QUERY_POLL_INTERVAL", 0.05)
    client = AsyncMongoMockClient()
    mongo.set_mongo_client(client)
    yield client[settings.MONGODB_DB]
    mongo.set_mongo_client(None)


@pytest.fixture
async def people(db):
    await seed_people(db)
    return db


def token_for(session: Session) -> str:
    return create_access_token(session.user_id, name=session.display_name, role=session.role)


@pytest.fixture
def auth_headers():
    def _headers(session: Session):
        return {"Authorization": f"Bearer {token_for(session)}"}
    return _headers


@pytest.fixture
async def client():
    from jobboard.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
