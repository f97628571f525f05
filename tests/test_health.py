"""Tests for health check endpoints."""


def test_health_check(client):
    """Test basic health check."""
    response = client.get("/api/v1/health/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root_endpoint(client):
    """Test root endpoint returns API info."""
    response = client.get("/")

    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Inventory Insights API"
    assert "version" in data
    assert "docs" in data


def test_readiness_reports_redis_error(client, monkeypatch):
    """Test readiness is not_ready when Redis is unreachable."""
    import redis
    from app.api import health

    def failing_ping():
        raise redis.ConnectionError("connection refused")

    monkeypatch.setattr(health.redis_client, "ping", failing_ping)

    response = client.get("/api/v1/health/ready")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "not_ready"
    assert data["checks"]["redis"] is False
    assert "connection refused" in data["checks"]["redis_error"]



def test_readiness_ready(client, session_factory, monkeypatch):
    """Test readiness is ready when the schema exists and Redis answers."""
    from app.api import health

    monkeypatch.setattr(health, "engine", session_factory.kw["bind"])
    monkeypatch.setattr(health.redis_client, "ping", lambda: True)

    response = client.get("/api/v1/health/ready")

    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {"database": True, "redis": True}


def test_readiness_reports_missing_tables(client, session_factory, monkeypatch):
    """Test readiness names the tables that are missing."""
    from app.api import health
    from app.database import Base

    test_engine = session_factory.kw["bind"]
    Base.metadata.drop_all(bind=test_engine)
    monkeypatch.setattr(health, "engine", test_engine)
    monkeypatch.setattr(health.redis_client, "ping", lambda: True)

    response = client.get("/api/v1/health/ready")

    data = response.json()
    assert data["status"] == "not_ready"
    assert data["checks"]["database"] is False
    assert "products" in data["checks"]["database_error"]
