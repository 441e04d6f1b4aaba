"""
Newsletter API - A Flask newsletter subscription endpoint
=========================================================

Collects newsletter signups into a single relational table and exposes
admin listing, CSV export, statistics and delete over the same table.

Usage:
    from newsletter import create_app

    app = create_app()
    app.run()

Tests and embedding apps can pass config overrides:

    app = create_app({'SQLALCHEMY_DATABASE_URI': 'sqlite:///newsletter.db'})
"""

from flask import Flask

from .core import Config, LoggingService, db

__version__ = '0.1.0'


def create_app(overrides=None):
    """Build the Flask app with config, logging, storage and routes wired up"""
    app = Flask(__name__)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    # Keep non-ASCII emails readable in responses
    app.json.ensure_ascii = False

    LoggingService.configure(app)
    db.init_app(app)

    from .modules.subscribers import subscribers_bp
    app.register_blueprint(subscribers_bp)

    return app


__all__ = ['create_app', 'db', '__version__']
