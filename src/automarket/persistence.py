"""Thin statement gateway over the Flask-SQLAlchemy session.

Handlers build parameterized SQLAlchemy statements and run them here; nothing
in this module interpolates request values into SQL text.
"""
from datetime import datetime
from sqlalchemy import event, func, select, update
from .extensions import db

# Storage-level codes for a unique-constraint violation
PG_UNIQUE_VIOLATION = "23505"
MYSQL_DUPLICATE_ENTRY = 1062


def _sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def enable_sqlite_foreign_keys(engine):
    """SQLite ignores ON DELETE CASCADE unless the pragma is set on every connection."""
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _sqlite_foreign_keys)


def execute(statement):
    return db.session.execute(statement)


def count(model, *conditions):
    return db.session.scalar(select(func.count()).select_from(model).where(*conditions))


def build_update(model, row_id, changes):
    """UPDATE for ``changes`` only; column names must exist on the table."""
    columns = model.__table__.columns
    writable = set(columns.keys()) - {"id"}
    unknown = sorted(set(changes) - writable)
    if unknown:
        raise ValueError(f"Cannot update {model.__tablename__}: {', '.join(unknown)}")
    values = dict(changes)
    if "updated_at" in columns:
        values["updated_at"] = datetime.utcnow()
    return (
        update(model)
        .where(model.id == row_id)
        .values(**values)
        .execution_options(synchronize_session=False)
    )


def paginate(query, page, limit):
    return query.offset((page - 1) * limit).limit(limit).all()


def is_unique_violation(exc):
    orig = getattr(exc, "orig", exc)
    if getattr(orig, "pgcode", None) == PG_UNIQUE_VIOLATION:
        return True
    if getattr(orig, "sqlstate", None) == PG_UNIQUE_VIOLATION:
        return True
    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DUPLICATE_ENTRY:
        return True
    return "UNIQUE constraint failed" in str(orig)
