"""Dialect-specific statement builders."""

from sqlalchemy.dialects import postgresql, sqlite

from ..errors import StoreError

_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def insert_if_absent(dialect: str, model):
    """INSERT ... ON CONFLICT DO NOTHING for the given dialect.

    Conflicts on the primary key are skipped inside the database, so
    concurrent inserts of one key resolve to exactly one row.
    """
    try:
        insert = _INSERTS[dialect]
    except KeyError:
        raise StoreError(f"no insert-if-absent statement for dialect {dialect!r}") from None
    return insert(model).on_conflict_do_nothing()
