from sqlalchemy import MetaData
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import declarative_base

convention = {
    "ix": "ix__%(column_0_label)s",
    "uq": "uq__%(table_name)s__%(column_0_name)s",
    "fk": "fk__%(table_name)s__%(column_0_name)s__%(referred_table_name)s",
    "pk": "pk__%(table_name)s",
}

OrmBase = declarative_base(metadata=MetaData(naming_convention=convention))


def to_dict(obj, exclude=()):
    return {c.name: getattr(obj, c.name) for c in obj.__table__.columns if c.name not in exclude}


def insert_for(session, table):
    """INSERT construct of the session's dialect, so ON CONFLICT clauses are available."""
    if session.bind.dialect.name == 'postgresql':
        return postgresql.insert(table)
    return sqlite.insert(table)
