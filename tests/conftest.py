import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from finance_tracker.database import Base, get_db
from finance_tracker.default_categories import seed_default_categories
from finance_tracker.main import app
from finance_tracker.middleware import limiter
from finance_tracker.models import Category, User
from finance_tracker.security import create_access_token, hash_password

# hashing is slow on purpose, do it once for every test user
PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


@pytest.fixture(autouse=True)
def reset_rate_limits():
    # the request budget is per client address and TestClient always uses the same one
    limiter.reset()
    yield


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    seed_default_categories(session)
    yield session
    session.close()


@pytest.fixture
def client(db, session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def categories(db):
    return {cat.name: cat.id for cat in db.query(Category).all()}


@pytest.fixture
def make_user(db):
    def _make_user(name="Alice", email=None):
        user = User(
            name=name,
            email=email or f"{uuid.uuid4().hex[:8]}@example.com",
            password=PASSWORD_HASH,
        )
        db.add(user)
        db.commit()
        return user.id

    return _make_user


def auth_header(user_id):
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


@pytest.fixture
def alice(make_user):
    user_id = make_user("Alice", "alice@example.com")
    return user_id, auth_header(user_id)


@pytest.fixture
def bob(make_user):
    user_id = make_user("Bob", "bob@example.com")
    return user_id, auth_header(user_id)


@pytest.fixture
def create_txn(client, categories):
    def _create_txn(headers, **overrides):
        payload = {
            "description": "Groceries",
            "amount": "25.50",
            "type": "expense",
            "date": "2024-01-10",
            "categoryId": str(categories["Alimentação"]),
        }
        payload.update(overrides)
        resp = client.post("/api/transactions", json=payload, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create_txn
