from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from finance_tracker import crud
from finance_tracker.database import get_db
from finance_tracker.main import app


def test_store_failure_is_a_generic_500(caplog):
    # no tables were created, so every query fails inside the driver
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Session = sessionmaker(bind=engine)

    def broken_db():
        session = Session()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = broken_db
    try:
        resp = TestClient(app).get("/api/categories")
    finally:
        app.dependency_overrides.clear()
        engine.dispose()

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
    assert "no such table" not in resp.text
    assert "Database error on GET /api/categories" in caplog.text


def test_malformed_json_is_a_validation_error(client, alice):
    _, headers = alice
    resp = client.post(
        "/api/transactions",
        content=b"{not json",
        headers={**headers, "Content-Type": "application/json"},
    )

    assert resp.status_code == 400
    assert "errors" in resp.json()


def test_unexpected_error_is_a_generic_500(client, monkeypatch, caplog):
    def boom(db):
        raise RuntimeError("secret")

    monkeypatch.setattr(crud, "get_categories", boom)

    resp = TestClient(app, raise_server_exceptions=False).get("/api/categories")

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}
    assert "secret" not in resp.text
    assert "Unhandled error on GET /api/categories" in caplog.text
