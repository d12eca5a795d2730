"""Base SQLAlchemy declarative base for all models"""

from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp used as the Python-side column default.

    Python-side defaults keep the models portable between PostgreSQL and
    SQLite (tests), unlike server defaults such as NOW().
    """
    return datetime.now(timezone.utc)


Base = declarative_base()
