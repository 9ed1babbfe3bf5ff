"""SQLite database client wrapper with CRUD operations.

Records are plain dicts. Queries use a small filter language shared by every
service::

    user_id = "u1" && task_date < "2025-01-01" && routine_id != null
    (priority = "high" || priority = "medium")
    title ~ "milk"
"""

import asyncio
import json
import logging
import re
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any

import aiosqlite

from src.core.config import settings


logger = logging.getLogger(__name__)


class DatabaseError(RuntimeError):
    """Raised when a database operation fails."""


class RecordNotFoundError(KeyError):
    """Raised when a record does not exist."""


class DuplicateRecordError(DatabaseError):
    """Raised when an insert or update violates a uniqueness constraint."""


_IDENTIFIER = r"[A-Za-z_][A-Za-z0-9_]*"


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(rf"^{_IDENTIFIER}$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


def _validate_field_names(fields: list[str]) -> None:
    for field in fields:
        if not re.match(rf"^{_IDENTIFIER}$", field):
            msg = f"Invalid field name: {field}"
            raise ValueError(msg)


def sanitize_param(value: str | int | float | bool | None) -> str:
    """Escape a value for safe embedding inside a quoted filter value."""
    return str(value).replace("\\", "\\\\").replace('"', '\\"').replace("'", "\\'")


def in_filter(field: str, values: list[str] | set[str]) -> str:
    """Build a set-membership filter as a parenthesized OR group."""
    if not values:
        msg = f"in_filter requires at least one value for {field}"
        raise ValueError(msg)
    parts = [f'{field} = "{sanitize_param(value)}"' for value in sorted(values)]
    return f"({' || '.join(parts)})"


def _convert_record_ids(record: dict[str, Any]) -> dict[str, Any]:
    """Convert integer ID and foreign key fields to strings for Pydantic compatibility."""
    converted = record.copy()
    for key, value in converted.items():
        if isinstance(value, int) and not isinstance(value, bool) and (key == "id" or key.endswith("_id")):
            converted[key] = str(value)
    return converted


def _serialize_value(value: Any) -> Any:
    """Convert a Python value into something sqlite3 can bind."""
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, dict | list | set | tuple):
        return json.dumps(sorted(value) if isinstance(value, set) else value)
    return value


def get_db_path(db_path: str | None = None) -> Path:
    """Get the resolved SQLite database file path."""
    path_str = db_path or settings.sqlite_db_path
    return Path(path_str).resolve()


def _parse_value(value: str, *, is_like: bool = False) -> str:
    """Prepare a quoted filter value for SQLite. Quoted values are always text."""
    if is_like:
        escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        return f"%{escaped}%"
    return value


def _parse_literal(literal: str) -> int | float | bool:
    """Parse an unquoted literal: true, false or a number."""
    lowered = literal.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if re.fullmatch(r"-?\d+", literal):
        return int(literal)
    return float(literal)


def _get_sql_operator(op: str) -> str:
    """Map filter operator to SQL operator."""
    op_map = {
        "=": "=",
        "!=": "!=",
        ">": ">",
        "<": "<",
        ">=": ">=",
        "<=": "<=",
        "~": "LIKE",
    }
    sql_op = op_map.get(op)
    if not sql_op:
        msg = f"Unsupported operator: {op}"
        raise ValueError(msg)
    return sql_op


_NULL_COMPARISON = re.compile(rf"^({_IDENTIFIER})\s*(!=|=)\s*null$", re.IGNORECASE)
_VALUE_COMPARISON = re.compile(
    rf"""^({_IDENTIFIER})\s*(>=|<=|!=|=|>|<|~)\s*(['"])((?:\\.|(?!\3).)*)\3$""",
    re.DOTALL,
)
_LITERAL_COMPARISON = re.compile(
    rf"^({_IDENTIFIER})\s*(>=|<=|!=|=|>|<)\s*(true|false|-?\d+(?:\.\d+)?)$",
    re.IGNORECASE,
)


def _parse_single_comparison(comparison: str) -> tuple[str, list[str | int | float | bool | None]]:
    """Parse a single comparison expression into a SQL condition and its parameters."""
    comparison = comparison.strip()

    null_match = _NULL_COMPARISON.match(comparison)
    if null_match:
        field, op = null_match.group(1), null_match.group(2)
        return (f"{field} IS NULL" if op == "=" else f"{field} IS NOT NULL"), []

    literal_match = _LITERAL_COMPARISON.match(comparison)
    if literal_match:
        field, op = literal_match.group(1), literal_match.group(2)
        return f"{field} {_get_sql_operator(op)} ?", [_parse_literal(literal_match.group(3))]

    match = _VALUE_COMPARISON.match(comparison)
    if not match:
        msg = f"Invalid filter syntax: {comparison}"
        raise ValueError(msg)

    field = match.group(1)
    op = match.group(2)
    raw_value = re.sub(r"\\(.)", r"\1", match.group(4))

    sql_op = _get_sql_operator(op)
    is_like = sql_op == "LIKE"
    value = _parse_value(raw_value, is_like=is_like)

    if is_like:
        return f"{field} LIKE ? ESCAPE '\\'", [value]
    return f"{field} {sql_op} ?", [value]


def _split_top_level(expression: str, separator: str) -> list[str]:
    """Split on a separator outside quotes and parentheses."""
    parts = []
    current = ""
    paren_depth = 0
    quote: str | None = None
    i = 0

    while i < len(expression):
        char = expression[i]

        if quote:
            current += char
            if char == "\\" and i + 1 < len(expression):
                current += expression[i + 1]
                i += 2
                continue
            if char == quote:
                quote = None
            i += 1
            continue

        if char in ("'", '"'):
            quote = char
        elif char == "(":
            paren_depth += 1
        elif char == ")":
            paren_depth -= 1

        if paren_depth == 0 and expression.startswith(separator, i):
            parts.append(current.strip())
            current = ""
            i += len(separator)
            continue

        current += char
        i += 1

    if quote or paren_depth != 0:
        msg = f"Invalid filter syntax: {expression}"
        raise ValueError(msg)

    if current.strip():
        parts.append(current.strip())

    return parts


def _parse_or_group(or_group: str) -> tuple[str, list[str | int | float | bool | None]]:
    """Parse a parenthesized OR group into a SQL condition and parameters."""
    inner = or_group[1:-1]  # Remove parentheses
    or_conditions = []
    or_params: list[str | int | float | bool | None] = []

    for part in _split_top_level(inner, "||"):
        cond, values = _parse_single_comparison(part)
        or_conditions.append(cond)
        or_params.extend(values)

    return f"({' OR '.join(or_conditions)})", or_params


def parse_filter(filter_query: str) -> tuple[str, list[str | int | float | bool | None]]:
    """Parse filter syntax into a SQL WHERE clause and parameter list."""
    if not filter_query:
        return "", []

    conditions = []
    params: list[str | int | float | bool | None] = []

    for part in _split_top_level(filter_query, "&&"):
        # Handle parenthesized OR groups
        if part.startswith("(") and part.endswith(")"):
            cond, cond_params = _parse_or_group(part)
        else:
            cond, cond_params = _parse_single_comparison(part)
        conditions.append(cond)
        params.extend(cond_params)

    return " AND ".join(conditions), params


def parse_sort(sort: str) -> str:
    """Translate a sort expression into an ORDER BY clause.

    Accepts comma-separated keys written either as ``-field``/``+field`` or
    ``field [ASC|DESC]``. Falls back to ``id ASC`` on anything unrecognized.
    """
    if not sort:
        return "id ASC"

    clauses = []
    for raw_key in sort.split(","):
        key = raw_key.strip()
        prefixed = re.match(rf"^([+-])({_IDENTIFIER})$", key)
        if prefixed:
            direction = "DESC" if prefixed.group(1) == "-" else "ASC"
            clauses.append(f"{prefixed.group(2)} {direction}")
            continue

        plain = re.match(rf"^({_IDENTIFIER})(?:\s+(ASC|DESC))?$", key, re.IGNORECASE)
        if not plain:
            logger.warning("Invalid sort parameter, using default", extra={"sort": sort})
            return "id ASC"
        clauses.append(f"{plain.group(1)} {(plain.group(2) or 'ASC').upper()}")

    # Tie-break on id so paging is deterministic
    clauses.append("id ASC")
    return ", ".join(clauses)


_db_connections: dict[tuple[int, int, str], aiosqlite.Connection] = {}
_db_lock = asyncio.Lock()


async def get_connection(*, db_path: str | None = None) -> aiosqlite.Connection:
    """Get or create a cached connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop = asyncio.get_event_loop()
    loop_id = id(loop)
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    # Check if we have a cached connection and verify the loop is still valid
    if cache_key in _db_connections:
        cached_conn = _db_connections[cache_key]
        if not loop.is_closed():
            return cached_conn
        # Loop is closed, remove stale connection
        async with _db_lock:
            _db_connections.pop(cache_key, None)

    # Create new connection with async lock to prevent races
    async with _db_lock:
        # Double-check after acquiring lock
        if cache_key in _db_connections:
            return _db_connections[cache_key]

        path.parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(str(path))
        await conn.execute("PRAGMA foreign_keys = ON")
        await conn.execute("PRAGMA journal_mode = WAL")

        _db_connections[cache_key] = conn

        logger.info(
            "Created new SQLite connection",
            extra={"db_path": str(path), "thread_id": thread_id, "loop_id": loop_id},
        )
        return conn


async def close_connection(*, db_path: str | None = None) -> None:
    """Close the cached SQLite connection for the current thread, loop, and db path."""
    thread_id = threading.get_ident()
    loop = asyncio.get_event_loop()
    loop_id = id(loop)
    path = get_db_path(db_path)
    cache_key = (thread_id, loop_id, str(path))

    if cache_key not in _db_connections:
        return

    try:
        async with _db_lock:
            if cache_key in _db_connections:
                conn = _db_connections[cache_key]
                await conn.close()
                del _db_connections[cache_key]
                logger.info(
                    "Closed SQLite connection",
                    extra={"thread_id": thread_id, "loop_id": loop_id, "db_path": str(path)},
                )
    except Exception as e:
        logger.warning(
            "Error closing SQLite connection",
            extra={"error": str(e), "thread_id": thread_id, "loop_id": loop_id},
        )


async def init_db(*, db_path: str | None = None) -> None:
    """Initialize the database schema by delegating to schema.init_db()."""
    schema = __import__("src.core.schema", fromlist=["init_db"])
    await schema.init_db(db_path=db_path)


def _wrap_error(e: Exception, *, action: str, collection: str) -> DatabaseError:
    """Translate a driver error into the client's error hierarchy."""
    if isinstance(e, aiosqlite.IntegrityError) and "UNIQUE" in str(e).upper():
        return DuplicateRecordError(f"Duplicate record in {collection}: {e}")
    if isinstance(e, aiosqlite.OperationalError) and "no such table" in str(e):
        return DatabaseError(f"Table '{collection}' does not exist. Call init_db() first.")
    return DatabaseError(f"Failed to {action} {collection}: {e}")


async def _insert(conn: aiosqlite.Connection, collection: str, data: dict[str, Any]) -> int:
    columns = list(data.keys())
    _validate_field_names(columns)
    columns_str = ", ".join(columns)
    placeholders_str = ", ".join("?" for _ in columns)
    values = [_serialize_value(data[key]) for key in columns]

    query = f"INSERT INTO {collection} ({columns_str}) VALUES ({placeholders_str})"  # noqa: S608 - collection is validated
    cursor = await conn.execute(query, values)
    return cursor.lastrowid


async def create_record(*, collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Insert a new record and return it with its assigned id."""
    _validate_collection_name(collection)
    conn = await get_connection()

    try:
        record_id = await _insert(conn, collection, data)
        await conn.commit()
    except Exception as e:
        await conn.rollback()
        error = _wrap_error(e, action="create record in", collection=collection)
        logger.error("create_record_failed", extra={"collection": collection, "error": str(e)})
        raise error from e

    logger.info("Created record", extra={"collection": collection, "record_id": record_id})
    return await get_record(collection=collection, record_id=str(record_id))


async def create_records(*, collection: str, records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Insert several records in one transaction; either all are stored or none."""
    if not records:
        return []

    _validate_collection_name(collection)
    conn = await get_connection()

    try:
        record_ids = [await _insert(conn, collection, data) for data in records]
        await conn.commit()
    except Exception as e:
        await conn.rollback()
        error = _wrap_error(e, action="create records in", collection=collection)
        logger.error("create_records_failed", extra={"collection": collection, "error": str(e)})
        raise error from e

    logger.info("Created records", extra={"collection": collection, "count": len(record_ids)})
    return [await get_record(collection=collection, record_id=str(record_id)) for record_id in record_ids]


async def get_record(*, collection: str, record_id: str) -> dict[str, Any]:
    """Fetch a single record by ID, raising RecordNotFoundError if not found."""
    _validate_collection_name(collection)
    if not str(record_id).isdigit():
        raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")

    try:
        conn = await get_connection()

        query = f"SELECT * FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, (int(record_id),))
        row = await cursor.fetchone()
        columns = [description[0] for description in cursor.description]
    except Exception as e:
        logger.error("get_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        raise _wrap_error(e, action="get record from", collection=collection) from e

    if row is None:
        raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")

    record = dict(zip(columns, row, strict=True))
    logger.debug("Retrieved record", extra={"collection": collection, "record_id": record_id})
    return _convert_record_ids(record)


async def update_record(*, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Update a record by ID and return the updated record."""
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)

    _validate_collection_name(collection)
    _validate_field_names(list(data))
    if not str(record_id).isdigit():
        raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")

    conn = await get_connection()

    try:
        changed = await _update(conn, collection, record_id, data)
        await conn.commit()
    except Exception as e:
        await conn.rollback()
        logger.error("update_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        raise _wrap_error(e, action="update record in", collection=collection) from e

    if changed == 0:
        raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")

    logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
    return await get_record(collection=collection, record_id=record_id)


async def _update(conn: aiosqlite.Connection, collection: str, record_id: str, data: dict[str, Any]) -> int:
    set_clause = ", ".join(f"{key} = ?" for key in data)
    values = [_serialize_value(val) for val in data.values()]
    values.append(int(record_id))

    query = f"UPDATE {collection} SET {set_clause} WHERE id = ?"  # noqa: S608 - collection is validated
    cursor = await conn.execute(query, values)
    return cursor.rowcount


async def update_records_by_id(*, collection: str, updates: dict[str, dict[str, Any]]) -> int:
    """Apply per-record updates in one transaction; either all are stored or none.

    Args:
        collection: Table to update
        updates: Column values to set, keyed by record id

    Returns:
        Number of rows changed.
    """
    if not updates:
        return 0

    _validate_collection_name(collection)
    for record_id, data in updates.items():
        if not data:
            msg = "Empty update payload"
            raise ValueError(msg)
        _validate_field_names(list(data))
        if not str(record_id).isdigit():
            raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")

    conn = await get_connection()

    try:
        missing = [
            record_id for record_id, data in updates.items() if await _update(conn, collection, record_id, data) == 0
        ]
        if missing:
            await conn.rollback()
        else:
            await conn.commit()
    except Exception as e:
        await conn.rollback()
        logger.error("update_records_by_id_failed", extra={"collection": collection, "error": str(e)})
        raise _wrap_error(e, action="update records in", collection=collection) from e

    if missing:
        raise RecordNotFoundError(f"Record not found in {collection}: {missing[0]}")

    logger.info("Updated records", extra={"collection": collection, "count": len(updates)})
    return len(updates)


async def update_records(
    *,
    collection: str,
    filter_query: str,
    data: dict[str, Any],
    skip_conflicts: bool = False,
) -> int:
    """Update every record matching the filter in a single statement.

    Args:
        collection: Table to update
        filter_query: Which records to update (required)
        data: Column values to set
        skip_conflicts: Leave rows untouched when updating them would violate a
            uniqueness constraint (``UPDATE OR IGNORE``) instead of failing the
            whole statement

    Returns:
        Number of rows changed.
    """
    if not data:
        msg = "Empty update payload"
        raise ValueError(msg)
    if not filter_query:
        msg = "update_records requires a filter"
        raise ValueError(msg)

    _validate_collection_name(collection)
    _validate_field_names(list(data))
    where_clause, params = parse_filter(filter_query)

    conn = await get_connection()
    set_clause = ", ".join(f"{key} = ?" for key in data)
    values = [_serialize_value(val) for val in data.values()]

    verb = "UPDATE OR IGNORE" if skip_conflicts else "UPDATE"

    try:
        query = f"{verb} {collection} SET {set_clause} WHERE {where_clause}"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, [*values, *params])
        await conn.commit()
    except Exception as e:
        await conn.rollback()
        logger.error("update_records_failed", extra={"collection": collection, "error": str(e)})
        raise _wrap_error(e, action="update records in", collection=collection) from e

    logger.info("Updated records", extra={"collection": collection, "count": cursor.rowcount})
    return cursor.rowcount


async def delete_record(*, collection: str, record_id: str) -> None:
    """Delete a record by ID, raising RecordNotFoundError if not found."""
    _validate_collection_name(collection)
    if not str(record_id).isdigit():
        raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")

    conn = await get_connection()
    try:
        query = f"DELETE FROM {collection} WHERE id = ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, (int(record_id),))
        await conn.commit()
    except Exception as e:
        await conn.rollback()
        logger.error("delete_record_failed", extra={"collection": collection, "record_id": record_id, "error": str(e)})
        raise _wrap_error(e, action="delete record from", collection=collection) from e

    if cursor.rowcount == 0:
        raise RecordNotFoundError(f"Record not found in {collection}: {record_id}")

    logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})


async def list_records(
    *,
    collection: str,
    page: int = 1,
    per_page: int = 50,
    filter_query: str = "",
    sort: str = "",
) -> list[dict[str, Any]]:
    """List records with optional filtering, sorting, and pagination."""
    _validate_collection_name(collection)

    where_clause = ""
    params: list[Any] = []
    if filter_query:
        where_clause, params = parse_filter(filter_query)
        where_clause = f"WHERE {where_clause}"

    order_by = parse_sort(sort)
    offset = (page - 1) * per_page

    try:
        conn = await get_connection()

        query = f"SELECT * FROM {collection} {where_clause} ORDER BY {order_by} LIMIT ? OFFSET ?"  # noqa: S608 - collection is validated
        cursor = await conn.execute(query, [*params, per_page, offset])
        rows = await cursor.fetchall()
        columns = [description[0] for description in cursor.description]
    except Exception as e:
        logger.error("list_records_failed", extra={"collection": collection, "error": str(e)})
        raise _wrap_error(e, action="list records from", collection=collection) from e

    records = [_convert_record_ids(dict(zip(columns, row, strict=True))) for row in rows]
    logger.debug("Listed records", extra={"collection": collection, "count": len(records)})
    return records


async def get_first_record(*, collection: str, filter_query: str, sort: str = "") -> dict[str, Any] | None:
    """Return the first record matching the filter, or None."""
    records = await list_records(collection=collection, per_page=1, filter_query=filter_query, sort=sort)
    return records[0] if records else None
