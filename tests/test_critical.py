"""
Critical Integration Tests for the Newsletter API
=================================================

Focused tests covering app wiring: routing, CORS, method handling and
storage bootstrapping.
Run with: pytest tests/test_critical.py -v

NOTE: pytest is listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import os
from unittest.mock import patch

from newsletter import create_app


# ---------------------------------------------------------------------------
# 1. App factory -- create_app registers the subscribers blueprint
# ---------------------------------------------------------------------------

def test_newsletter_route_registered(app):
    """/api/newsletter is in the URL map and accepts GET and POST."""
    rules = {rule.rule: rule.methods for rule in app.url_map.iter_rules()}
    assert "/api/newsletter" in rules, f"Routes: {sorted(rules)}"
    assert "GET" in rules["/api/newsletter"]
    assert "POST" in rules["/api/newsletter"]


def test_config_overrides_applied(app, tmp_db_dir):
    """Overrides passed to create_app win over environment-derived config."""
    assert app.config["TESTING"] is True
    assert app.config["SQLALCHEMY_DATABASE_URI"].endswith("newsletter.db")
    assert app.config["SUBSCRIBERS_TABLE"] == "newsletter_emails"


# ---------------------------------------------------------------------------
# 2. Preflight -- OPTIONS returns an empty 200 with CORS headers
# ---------------------------------------------------------------------------

def test_preflight_short_circuits(client):
    """OPTIONS never touches storage and returns an empty body."""
    with patch("newsletter.modules.subscribers.service.bootstrap") as bootstrap:
        response = client.options(
            "/api/newsletter",
            headers={
                "Origin": "https://example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )

    assert response.status_code == 200
    assert response.data == b""
    assert response.headers.get("Access-Control-Allow-Origin") == "*"
    bootstrap.assert_not_called()


def test_cors_header_on_json_responses(client):
    response = client.get("/api/newsletter?check", headers={"Origin": "https://example.com"})
    assert response.headers.get("Access-Control-Allow-Origin") == "*"


# ---------------------------------------------------------------------------
# 3. Unsupported methods -- 405 envelope, no storage access
# ---------------------------------------------------------------------------

def test_put_returns_405_without_storage_access(client, tmp_db_dir):
    with patch("newsletter.modules.subscribers.service.bootstrap") as bootstrap:
        response = client.put("/api/newsletter", json={"email": "a@example.com"})

    assert response.status_code == 405
    assert response.get_json() == {
        "success": False,
        "message": "unsupported HTTP method: PUT",
    }
    bootstrap.assert_not_called()
    assert not os.path.exists(os.path.join(tmp_db_dir, "newsletter.db"))


def test_delete_verb_returns_405(client):
    response = client.delete("/api/newsletter?id=1")
    assert response.status_code == 405
    assert response.get_json()["message"] == "unsupported HTTP method: DELETE"


def test_unlisted_verb_returns_json_405(client):
    """Verbs outside the route's method list still get the JSON envelope."""
    with patch("newsletter.modules.subscribers.service.bootstrap") as bootstrap:
        response = client.open("/api/newsletter", method="PROPFIND")

    assert response.status_code == 405
    assert response.is_json
    assert response.get_json() == {
        "success": False,
        "message": "unsupported HTTP method: PROPFIND",
    }
    bootstrap.assert_not_called()


# ---------------------------------------------------------------------------
# 4. Bootstrapping -- table is created on demand, failures are reported
# ---------------------------------------------------------------------------

def test_table_created_on_first_request(app, client):
    from sqlalchemy import inspect
    from newsletter.core import db

    response = client.get("/api/newsletter?check")
    assert response.status_code == 200

    with app.app_context():
        assert "newsletter_emails" in inspect(db.engine).get_table_names()


def test_storage_unreachable_returns_diagnostic_500(tmp_db_dir):
    """A database that cannot be opened yields 500 with debug_info and no crash."""
    missing = os.path.join(tmp_db_dir, "missing", "dir", "newsletter.db")
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///" + missing,
    })

    response = app.test_client().get("/api/newsletter?admin=view")

    assert response.status_code == 500
    data = response.get_json()
    assert data["success"] is False
    assert data["message"].startswith("database connection error:")
    assert data["debug_info"] == {
        "driver_available": True,
        "host": None,
        "database": missing,
    }


def test_unexpected_exception_becomes_json_500(client):
    with patch(
        "newsletter.modules.subscribers.service.dispatch",
        side_effect=RuntimeError("boom"),
    ):
        response = client.get("/api/newsletter?check")

    assert response.status_code == 500
    assert response.get_json() == {
        "success": False,
        "message": "error processing request: boom",
    }


def test_unexpected_exception_logged_once(client, caplog):
    with patch(
        "newsletter.modules.subscribers.service.dispatch",
        side_effect=RuntimeError("boom"),
    ):
        client.get("/api/newsletter?check")

    errors = [r for r in caplog.records if r.levelname == "ERROR"]
    assert len(errors) == 1
    assert errors[0].name == "newsletter.subscribers"
    assert "RuntimeError" in errors[0].getMessage()


def test_ensure_schema_is_repeatable(app):
    from sqlalchemy import inspect
    from newsletter.core import Database, db

    with app.app_context():
        Database.ensure_schema()
        Database.ensure_schema()
        assert "newsletter_emails" in inspect(db.engine).get_table_names()


def test_ensure_schema_tolerates_concurrent_creation(app):
    """Another worker created the table between the existence check and CREATE."""
    from sqlalchemy.dialects.sqlite.base import SQLiteDialect
    from newsletter.core import Database

    with app.app_context():
        Database.ensure_schema()
        with patch.object(SQLiteDialect, "has_table", return_value=False):
            Database.ensure_schema()


def test_driver_available():
    from newsletter.core import Database

    assert Database.driver_available("sqlite://") is True
    assert Database.driver_available("mysql+nosuchdriver://user@db.internal/news") is False
    assert Database.driver_available("not a url") is False


# ---------------------------------------------------------------------------
# 5. Logging -- one package handler however many apps are created
# ---------------------------------------------------------------------------

def test_logging_configure_is_idempotent(app):
    import logging
    from newsletter.core.logging_service import HANDLER_NAME, LoggingService

    LoggingService.configure(app)
    LoggingService.configure(app)

    handlers = [h for h in logging.getLogger("newsletter").handlers if h.get_name() == HANDLER_NAME]
    assert len(handlers) == 1
