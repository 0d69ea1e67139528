"""Record store gateway: select/insert/delete with filters over the three gallery tables."""
import logging
import uuid

from sqlalchemy import Uuid, delete, exc, select
from sqlalchemy.orm import selectinload

from errors import ConflictError, NotFoundError, StoreError
from models import Duplicate, Rating, Tree

log = logging.getLogger(__name__)

NIL_UUID = "00000000-0000-0000-0000-000000000000"


class NotEqual:
    """Filter value matching every row whose field differs from ``value``."""

    def __init__(self, value):
        self.value = value

    def __repr__(self):
        return f"NotEqual({self.value!r})"


class RecordStore:
    TABLES = {
        "trees": Tree,
        "duplicates": Duplicate,
        "ratings": Rating,
    }

    def __init__(self, db):
        self.db = db

    # --- Queries --------------------------------------------------------

    def select(self, table, embed=(), **filters):
        model = self._model(table)
        stmt = select(model).where(*self._where(model, filters))
        for relation in embed:
            stmt = stmt.options(selectinload(getattr(model, relation)))
        rows = self._run(lambda: self.db.session.scalars(stmt).all())
        return [row.to_dict(embed) for row in rows]

    def select_one(self, table, embed=(), **filters):
        rows = self.select(table, embed=embed, **filters)
        if not rows:
            raise NotFoundError(f"No row in {table} matching {filters}")
        return rows[0]

    # --- Mutations ------------------------------------------------------

    def insert(self, table, record):
        model = self._model(table)
        values = {field: self._coerce(model, field, value) for field, value in record.items()}

        def _insert():
            row = model(**values)
            self.db.session.add(row)
            self.db.session.commit()
            return row.to_dict()

        stored = self._run(_insert)
        log.info("Inserted into %s: %s", table, stored["id"])
        return stored

    def delete(self, table, **filters):
        model = self._model(table)
        stmt = delete(model).where(*self._where(model, filters))

        def _delete():
            result = self.db.session.execute(stmt)
            self.db.session.commit()
            return result.rowcount

        count = self._run(_delete)
        log.info("Deleted %d row(s) from %s where %s", count, table, filters)
        return count

    # --- Helpers --------------------------------------------------------

    def _model(self, table):
        try:
            return self.TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    def _where(self, model, filters):
        clauses = []
        for field, value in filters.items():
            column = getattr(model, field)
            if isinstance(value, NotEqual):
                clauses.append(column != self._coerce(model, field, value.value))
            else:
                clauses.append(column == self._coerce(model, field, value))
        return clauses

    def _coerce(self, model, field, value):
        column = model.__table__.columns[field]
        if isinstance(column.type, Uuid) and isinstance(value, str):
            try:
                return uuid.UUID(value)
            except ValueError:
                raise StoreError(f'invalid input syntax for type uuid: "{value}"') from None
        return value

    def _run(self, work):
        try:
            return work()
        except exc.IntegrityError as e:
            self.db.session.rollback()
            raise ConflictError(_driver_message(e)) from e
        except exc.SQLAlchemyError as e:
            self.db.session.rollback()
            log.error("Store error: %s", e)
            raise StoreError(_driver_message(e)) from e


def _driver_message(e):
    # str(e) also holds the SQL statement and bound parameters
    return str(getattr(e, "orig", None) or e)
