"""Query helpers that translate driver failures into the error taxonomy.

The engine's connection pool is the only shared resource; each call checks
out a connection for its own duration. No retries and no timeouts are
applied beyond what the pool itself enforces.
"""

import logging
import re
from collections.abc import Sequence
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from innokit.errors import InternalError

logger = logging.getLogger(__name__)

ONE_ROW_WARNING = "WARNING_DB_GET_ROW. Expected 1 row. Got %d %s"

Row = dict[str, Any]

# Single-quoted SQL string literal, with '' as an escaped quote.
QUOTED = r"'(?:[^']|'')*'"


def _named_bind(match: re.Match[str]) -> str:
    # Quoted literals match without a group and are kept as they are.
    if match.group(1) is None:
        return match.group(0)
    return f":p{match.group(1)}"


class DbService:
    """Runs queries written with ``:p1, :p2, ...`` binds against positional params."""

    placeholder: re.Pattern[str] | None = None

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def bind(self, query: str, params: Sequence[Any] | None) -> tuple[str, dict[str, Any]]:
        """Rewrite positional placeholders into named binds ``:p1, :p2, ...``."""
        values = {f"p{index}": value for index, value in enumerate(params or (), start=1)}
        if self.placeholder is None:
            return query, values
        return self.placeholder.sub(_named_bind, query), values

    def run(self, query: str, params: Sequence[Any] | None = None) -> bool:
        """Execute a query and discard its rows."""
        self._execute(query, params)
        return True

    def get_rows(self, query: str, params: Sequence[Any] | None = None) -> list[Row]:
        """Execute a query and return all result rows."""
        return self._execute(query, params)

    def get_row(self, query: str, params: Sequence[Any] | None = None) -> Row | None:
        """
        Execute a query and return its first row, or None when there is none.

        More than one row is logged as a warning; the first row is still returned.
        """
        rows = self._execute(query, params)
        if not rows:
            return None
        if len(rows) > 1:
            logger.warning(ONE_ROW_WARNING, len(rows), query)
        return rows[0]

    def must_get_row(self, error_code: str, query: str, params: Sequence[Any] | None = None) -> Row:
        """
        Like :meth:`get_row`, but a missing row is an error.

        Raises:
            InternalError: With ``error_code`` (usually ``DB_NO_SUCH_<X>``) when no row is found.
        """
        row = self.get_row(query, params)
        if row is None:
            raise InternalError(error_code, inner_details={})
        return row

    def _execute(self, query: str, params: Sequence[Any] | None) -> list[Row]:
        statement, values = self.bind(query, params)
        try:
            with self.engine.begin() as connection:
                result = connection.execute(text(statement), values)
                if not result.returns_rows:
                    return []
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as exc:
            logger.error("DB query failed: %s", query)
            raise InternalError(InternalError.DB_QUERY, inner_details=query) from exc


class PgService(DbService):
    """PostgreSQL flavour: ``$1, $2, ...`` placeholders."""

    placeholder = re.compile(QUOTED + r"|\$(\d+)")


class OracleService(DbService):
    """Oracle flavour: ``:1, :2, ...`` placeholders."""

    placeholder = re.compile(QUOTED + r"|(?<![:\w]):(\d+)\b")
