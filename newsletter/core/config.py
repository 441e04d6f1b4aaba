import os
from dotenv import load_dotenv
from sqlalchemy.engine import URL

load_dotenv()


def _build_database_uri():
    """Compose the MySQL URL from the individual DB_* settings"""
    port = os.getenv('DB_PORT')
    return URL.create(
        'mysql+pymysql',
        username=os.getenv('DB_USER', 'root'),
        password=os.getenv('DB_PASSWORD') or None,
        host=os.getenv('DB_HOST', 'localhost'),
        port=int(port) if port else None,
        database=os.getenv('DB_NAME', 'newsletter'),
        query={'charset': 'utf8mb4'},
    ).render_as_string(hide_password=False)


class Config:
    """
    Base configuration for the newsletter API.
    Deployments provide database credentials via environment variables
    (or a .env file next to the app).
    """
    # DATABASE_URL wins over the individual DB_* settings
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or _build_database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Table names
    SUBSCRIBERS_TABLE = 'newsletter_emails'

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Port for local server
    PORT = int(os.getenv('PORT', '5000'))
