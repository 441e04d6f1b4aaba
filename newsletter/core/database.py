from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError
from sqlalchemy.schema import CreateTable

db = SQLAlchemy()


class Database:

    @staticmethod
    def connect():
        """Open (or reuse) the session's connection for this request"""
        return db.session.connection()

    @staticmethod
    def ensure_schema():
        """
        Create the subscribers table if it does not exist yet.

        Uses CREATE TABLE IF NOT EXISTS so two workers bootstrapping the
        same empty database at once both succeed.
        """
        from newsletter.modules.subscribers.models import Subscriber

        with db.engine.begin() as conn:
            conn.execute(CreateTable(Subscriber.__table__, if_not_exists=True))

    @staticmethod
    def describe_target(uri):
        """
        Non-sensitive description of the configured storage target:
        host and database name only, never credentials.
        """
        try:
            url = make_url(uri)
        except ArgumentError:
            return {'host': None, 'database': None}
        return {'host': url.host, 'database': url.database}

    @staticmethod
    def driver_available(uri):
        """
        Check whether the DB-API driver for the configured URL can be imported.

        Flask-SQLAlchemy builds the engine in init_app, so a running app has
        already imported its driver and this reports True. A missing driver
        fails create_app itself; False only shows up when the check is run
        against some other URL.
        """
        try:
            make_url(uri).get_dialect().import_dbapi()
        except (ImportError, ArgumentError):
            return False
        return True

    @staticmethod
    def server_version():
        """Version string reported by the storage server"""
        info = db.engine.dialect.server_version_info
        if not info:
            return None
        return '.'.join(str(part) for part in info)
