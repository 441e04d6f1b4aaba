"""
Subscribers Module
==================

Provides:
- Public API for newsletter subscriptions (POST)
- Admin listing, CSV export, stats and delete (GET selectors)
- Health check for smoke tests (GET ?check)
"""

from flask import Blueprint

subscribers_bp = Blueprint(
    'subscribers',
    __name__,
    url_prefix='/api/newsletter',
)

from . import routes
