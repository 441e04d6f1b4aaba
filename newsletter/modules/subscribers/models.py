from newsletter.core.config import Config
from newsletter.core.database import db

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'


def format_timestamp(value):
    """Render a stored timestamp the way the admin tools expect it"""
    if value is None:
        return None
    if hasattr(value, 'strftime'):
        return value.strftime(TIMESTAMP_FORMAT)
    return str(value)


class Subscriber(db.Model):
    """A newsletter subscriber. Rows are never updated, only created or deleted."""
    __tablename__ = Config.SUBSCRIBERS_TABLE
    __table_args__ = {
        'mysql_engine': 'InnoDB',
        'mysql_charset': 'utf8mb4',
        'mysql_collate': 'utf8mb4_unicode_ci',
    }

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    email = db.Column(db.String(255), unique=True, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())
    ip_address = db.Column(db.String(45))

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'created_at': format_timestamp(self.created_at),
            'ip_address': self.ip_address,
        }

    def to_summary(self):
        return {
            'email': self.email,
            'created_at': format_timestamp(self.created_at),
        }

    def __repr__(self):
        return f'<Subscriber {self.id} {self.email}>'
