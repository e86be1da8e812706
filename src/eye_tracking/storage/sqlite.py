"""
SQLite session store.

A single `session` table keyed by session id. Nested values (device info,
scan path, signals) are stored as JSON text in the exchange format.

Usage:
    store = SessionStore(Path("./eyeTracking.sqlite"))
    store.write_one(session)
    store.fetch_one(session.id)
    store.erase_store()
"""
import logging
import threading
from pathlib import Path
from typing import Iterable, Optional

from pydantic import ConfigDict, TypeAdapter, ValidationError
from sqlalchemy import (
    Column,
    Float,
    MetaData,
    String,
    Table,
    Text,
    create_engine,
    delete,
    select,
)
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

from ..errors import PersistenceError, PersistenceErrorKind
from ..models import DeviceInfo, Gaze, Session, SignalSample

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "eyeTracking.sqlite"

metadata = MetaData()

session_table = Table(
    "session",
    metadata,
    Column("id", String, primary_key=True, nullable=False, unique=True),
    Column("appID", Text, nullable=False),
    Column("beginTime", Float, nullable=False),
    Column("deviceInfo", Text, nullable=False),
    Column("endTime", Float, nullable=True),
    Column("scanPath", Text, nullable=False),
    Column("signals", Text, nullable=False),
)

_json_config = ConfigDict(ser_json_inf_nan="constants")
_device_info_adapter = TypeAdapter(DeviceInfo)
_scan_path_adapter = TypeAdapter(tuple[Gaze, ...], config=_json_config)
_signals_adapter = TypeAdapter(dict[str, tuple[SignalSample, ...]], config=_json_config)


def _to_row(session: Session) -> dict:
    return {
        "id": session.id,
        "appID": session.app_id,
        "beginTime": session.begin_time,
        "deviceInfo": _device_info_adapter.dump_json(session.device_info, by_alias=True).decode(),
        "endTime": session.end_time,
        "scanPath": _scan_path_adapter.dump_json(session.scan_path, by_alias=True).decode(),
        "signals": _signals_adapter.dump_json(dict(session.signals), by_alias=True).decode(),
    }


def _from_row(row) -> Session:
    return Session(
        id=row.id,
        app_id=row.appID,
        begin_time=row.beginTime,
        device_info=_device_info_adapter.validate_json(row.deviceInfo),
        end_time=row.endTime,
        scan_path=_scan_path_adapter.validate_json(row.scanPath),
        signals=_signals_adapter.validate_json(row.signals),
    )


class SessionStore:
    """
    Durable keyed store of finalized sessions.

    Every operation runs under one lock per store, so a write in flight is
    never interleaved with a read of the same row from another thread.
    Reads absorb failures (logged, None returned); writes raise
    `PersistenceError`.
    """

    def __init__(self, path: Path | str = DEFAULT_FILENAME, echo: bool = False):
        self.path = path if path == ":memory:" else Path(path)
        self._lock = threading.RLock()
        self._engine: Engine = self._create_engine(echo)
        logger.info(f"Session store initialized: {self.path}")

    def _create_engine(self, echo: bool) -> Engine:
        if self.path == ":memory:":
            # One shared connection, otherwise every checkout sees an empty database
            return create_engine(
                "sqlite://",
                echo=echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )

        self.path.parent.mkdir(parents=True, exist_ok=True)
        return create_engine(
            f"sqlite:///{self.path}",
            echo=echo,
            connect_args={"check_same_thread": False},
        )

    def _create_tables(self, conn: Connection) -> None:
        try:
            metadata.create_all(conn, checkfirst=True)
        except SQLAlchemyError as e:
            raise PersistenceError(PersistenceErrorKind.SCHEMA, e) from e

    # --- Writing ---

    def write_one(self, session: Session) -> None:
        """Inserts the session, or replaces the stored one with the same id."""
        self.write_many([session])

    def write_many(self, sessions: Iterable[Session]) -> None:
        """Upserts every session in a single transaction."""
        rows = [_to_row(s) for s in sessions]
        if not rows:
            return

        stmt = sqlite_insert(session_table)
        stmt = stmt.on_conflict_do_update(
            index_elements=[session_table.c.id],
            set_={c.name: stmt.excluded[c.name] for c in session_table.columns if c.name != "id"},
        )

        with self._lock:
            try:
                with self._engine.begin() as conn:
                    self._create_tables(conn)
                    conn.execute(stmt, rows)
            except SQLAlchemyError as e:
                raise PersistenceError(PersistenceErrorKind.WRITE, e) from e

        logger.debug(f"Wrote {len(rows)} session(s).")

    # --- Reading ---

    def fetch_one(self, session_id: str) -> Optional[Session]:
        """Returns the stored session, or None if it is absent or unreadable."""
        stmt = select(session_table).where(session_table.c.id == session_id)
        with self._lock:
            try:
                with self._engine.begin() as conn:
                    self._create_tables(conn)
                    row = conn.execute(stmt).first()
                return _from_row(row) if row is not None else None
            except (SQLAlchemyError, PersistenceError, ValidationError) as e:
                logger.error(f"Fetching session '{session_id}' failed: {e}")
                return None

    def fetch_all(self) -> Optional[list[Session]]:
        """
        Returns every stored session.

        None means the store could not be read; an empty list means it is
        empty.
        """
        stmt = select(session_table).order_by(session_table.c.beginTime)
        with self._lock:
            try:
                with self._engine.begin() as conn:
                    self._create_tables(conn)
                    rows = conn.execute(stmt).all()
                return [_from_row(row) for row in rows]
            except (SQLAlchemyError, PersistenceError, ValidationError) as e:
                logger.error(f"Fetching sessions failed: {e}")
                return None

    # --- Deleting ---

    def delete_one(self, session: Session) -> None:
        stmt = delete(session_table).where(session_table.c.id == session.id)
        self._execute_write(stmt)

    def delete_all(self) -> None:
        """Deletes every session. The table itself is kept."""
        self._execute_write(delete(session_table))

    def erase_store(self) -> None:
        """Drops everything in the database, schema included."""
        with self._lock:
            try:
                with self._engine.begin() as conn:
                    existing = MetaData()
                    existing.reflect(conn)
                    existing.drop_all(conn)
            except SQLAlchemyError as e:
                raise PersistenceError(PersistenceErrorKind.SCHEMA, e) from e
        logger.info(f"Session store erased: {self.path}")

    def close(self) -> None:
        with self._lock:
            self._engine.dispose()

    def _execute_write(self, stmt) -> None:
        with self._lock:
            try:
                with self._engine.begin() as conn:
                    self._create_tables(conn)
                    conn.execute(stmt)
            except SQLAlchemyError as e:
                raise PersistenceError(PersistenceErrorKind.WRITE, e) from e
