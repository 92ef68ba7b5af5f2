"""Error envelope: status from status_code, stack only outside production.

Invariants:
    - Body is {"error", "requestId"} plus "stack" when not in production
    - requestId matches the X-Request-ID response header
"""

import logging

import pytest

from app.core.errors import ConflictError, ErrorCategory, ErrorSeverity


class MissingThing(Exception):
    status_code = 404


def _add_failing_routes(application):
    @application.get("/api/test/missing")
    async def missing():
        raise MissingThing("thing not here")

    @application.get("/api/test/conflict")
    async def conflict():
        raise ConflictError("already there")

    @application.get("/api/test/crash")
    async def crash():
        raise RuntimeError("database password is hunter2")

    @application.get("/api/test/silent")
    async def silent():
        raise RuntimeError()


@pytest.fixture
def failing_app(app):
    _add_failing_routes(app)
    return app


@pytest.fixture
def failing_prod_app(prod_app):
    _add_failing_routes(prod_app)
    return prod_app


async def test_status_code_attribute_sets_status_with_stack_in_development(
    failing_app, client,
):
    res = await client.get("/api/test/missing")
    assert res.status_code == 404
    body = res.json()
    assert body["error"] == "thing not here"
    assert body["requestId"] == res.headers["x-request-id"]
    assert "MissingThing" in body["stack"]


async def test_status_code_attribute_without_stack_in_production(
    failing_prod_app, prod_client,
):
    res = await prod_client.get("/api/test/missing")
    assert res.status_code == 404
    body = res.json()
    assert set(body) == {"error", "requestId"}
    assert body["error"] == "thing not here"


async def test_app_error_uses_its_status(failing_app, client):
    res = await client.get("/api/test/conflict")
    assert res.status_code == 409
    assert res.json()["error"] == "already there"


async def test_unexpected_error_defaults_to_500(failing_app, client):
    res = await client.get("/api/test/crash")
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "database password is hunter2"
    assert "RuntimeError" in body["stack"]


async def test_unexpected_error_keeps_message_in_production(
    failing_prod_app, prod_client,
):
    res = await prod_client.get("/api/test/crash")
    assert res.status_code == 500
    assert res.json()["error"] == "database password is hunter2"
    assert "stack" not in res.json()


async def test_messageless_error_falls_back_to_generic_message(
    failing_prod_app, prod_client,
):
    res = await prod_client.get("/api/test/silent")
    assert res.status_code == 500
    assert res.json()["error"] == "Internal server error"


async def test_error_responses_keep_cors_and_security_headers(failing_app, client):
    res = await client.get(
        "/api/test/crash", headers={"Origin": "http://localhost:5173"},
    )
    assert res.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert res.headers["x-content-type-options"] == "nosniff"


async def test_unknown_route_is_enveloped(client):
    res = await client.get("/api/nowhere")
    assert res.status_code == 404
    assert res.json()["error"] == "Not Found"
    assert "requestId" in res.json()


async def test_incoming_request_id_is_reused(failing_app, client):
    res = await client.get("/api/test/missing", headers={"X-Request-ID": "abc123"})
    assert res.json()["requestId"] == "abc123"
    assert res.headers["x-request-id"] == "abc123"


async def test_query_validation_error_is_400(client):
    res = await client.get("/api/sleep", params={"limit": "0"})
    assert res.status_code == 400
    assert res.json()["error"].startswith("Invalid request data")


async def test_error_log_carries_category_and_severity(failing_app, client, caplog):
    caplog.set_level(logging.WARNING, logger="app.api.error_handlers")
    await client.get("/api/test/conflict")
    await client.get("/api/test/crash")
    conflict, crash = [
        r for r in caplog.records if r.name == "app.api.error_handlers"
    ]
    assert conflict.error_category == ErrorCategory.CONFLICT
    assert conflict.severity == ErrorSeverity.WARNING
    assert crash.error_category == ErrorCategory.INTERNAL
    assert crash.severity is None
