"""Interpretation of the text ``publication_date`` column as a timestamp.

Feeds publish loosely formatted dates, so the column stays text and every
temporal comparison goes through :func:`as_timestamp`. Values that cannot be
read as a timestamp evaluate to NULL and therefore never match a range
predicate.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import String, literal
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.functions import FunctionElement

ISO_TIMESTAMP_PATTERN = (
    "^[0-9]{4}-[0-9]{2}-[0-9]{2}"
    "([T ][0-9]{2}:[0-9]{2}(:[0-9]{2}([.][0-9]+)?)?)?"
    "(Z|[+-][0-9]{2}(:?[0-9]{2})?)?$"
)
_DATE_PREFIX_GLOB = "[0-9][0-9][0-9][0-9]-[0-9][0-9]-[0-9][0-9]*"


class as_timestamp(FunctionElement):
    name = "as_timestamp"
    inherit_cache = True


@compiles(as_timestamp)
def _compile_default(element, compiler, **kw):
    # SQLite understands ISO-8601 with an optional "Z" or "+HH:MM" suffix, but
    # also "now" and bare julian day numbers, hence the date prefix check.
    value = compiler.process(element.clauses, **kw)
    return (
        f"CASE WHEN {value} GLOB '{_DATE_PREFIX_GLOB}' "
        f"THEN julianday({value}) END"
    )


@compiles(as_timestamp, "postgresql")
def _compile_postgresql(element, compiler, **kw):
    # The shape check keeps out inputs PostgreSQL would accept but feeds never
    # mean ("now", "epoch"); pg_input_is_valid (PostgreSQL 16+) rejects
    # impossible dates such as 2024-13-40, so the CAST itself never raises.
    value = compiler.process(element.clauses, **kw)
    return (
        f"CASE WHEN {value} ~ '{ISO_TIMESTAMP_PATTERN}' "
        f"AND pg_input_is_valid({value}, 'timestamptz') "
        f"THEN CAST({value} AS TIMESTAMPTZ) END"
    )


def to_utc_text(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat()


def published_after(column: ColumnElement, moment: datetime) -> ColumnElement[bool]:
    return as_timestamp(column) > as_timestamp(literal(to_utc_text(moment), String()))


def published_before(column: ColumnElement, moment: datetime) -> ColumnElement[bool]:
    return as_timestamp(column) < as_timestamp(literal(to_utc_text(moment), String()))
