"""
Shared fixtures: a fresh Flask app backed by a throwaway SQLite database.
"""

import os
import shutil
import tempfile

import pytest

from newsletter import create_app
from newsletter.core import Database, db
from newsletter.modules.subscribers.models import Subscriber


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="newsletter-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app(tmp_db_dir):
    """Flask app pointed at a SQLite file in tmp_db_dir."""
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///" + os.path.join(tmp_db_dir, "newsletter.db"),
    })
    yield app
    with app.app_context():
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def seed(app):
    """Insert subscribers directly, bypassing the API (lets tests pick created_at)."""
    def _seed(*rows):
        with app.app_context():
            Database.ensure_schema()
            for email, created_at in rows:
                db.session.add(Subscriber(email=email, created_at=created_at, ip_address="127.0.0.1"))
            db.session.commit()
    return _seed


@pytest.fixture
def row_count(app):
    def _count():
        with app.app_context():
            Database.ensure_schema()
            return db.session.scalar(db.select(db.func.count(Subscriber.id)))
    return _count
