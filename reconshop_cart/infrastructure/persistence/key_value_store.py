"""
Key/value string stores

Minimal ``get_item`` / ``set_item`` / ``remove_item`` storage media for the
cart repository. Every failure of the underlying medium is raised as
``PersistenceError``.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Generator, Optional
from urllib.parse import quote

from sqlalchemy import DateTime, String, Text, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.sql import func

from reconshop_cart.config import Settings
from reconshop_cart.infrastructure.utilities.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """String key/value storage medium"""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent"""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value"""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete ``key``; absent keys are ignored"""


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store; ``quota_bytes`` limits the total stored size"""

    def __init__(self, quota_bytes: Optional[int] = None):
        self._data: Dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if used + len(value.encode("utf-8")) > self._quota_bytes:
                raise PersistenceError(
                    f"Storage quota of {self._quota_bytes} bytes exceeded", operation="set_item"
                )
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class FileKeyValueStore(KeyValueStore):
    """One UTF-8 file per key under ``storage_dir``, named by the percent-encoded key"""

    def __init__(self, storage_dir: str):
        self.storage_dir = Path(storage_dir)

    def _file_path(self, key: str) -> Path:
        return self.storage_dir / f"{quote(key, safe='')}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._file_path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceError(f"Cannot read {path}: {e}", operation="get_item") from e

    def set_item(self, key: str, value: str) -> None:
        path = self._file_path(key)
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            # Write to a sibling temp file, then swap it in atomically
            fd, tmp_name = tempfile.mkstemp(dir=self.storage_dir, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Cannot write {path}: {e}", operation="set_item") from e

    def remove_item(self, key: str) -> None:
        path = self._file_path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot remove {path}: {e}", operation="remove_item") from e


class Base(DeclarativeBase):
    """Declarative base for storage tables"""


class KeyValueEntry(Base):
    """Stored key/value pair"""
    __tablename__ = "key_value_entries"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=True,
    )


class SQLAlchemyKeyValueStore(KeyValueStore):
    """
    Key/value pairs in a ``key_value_entries`` table

    The database is opened on first use, so an unreachable database surfaces
    as ``PersistenceError`` from the failing operation, not from the
    constructor.
    """

    def __init__(self, database_url: str):
        self._logger = logging.getLogger(self.__class__.__name__)
        self._database_url = database_url
        self._engine = None
        self._session_factory = None

    def _get_session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            url = self._database_url
            try:
                if url.startswith("sqlite:///") and url != "sqlite:///:memory:":
                    Path(url[len("sqlite:///"):]).parent.mkdir(parents=True, exist_ok=True)
                engine = create_engine(url)
                Base.metadata.create_all(engine)
            except (SQLAlchemyError, OSError) as e:
                raise PersistenceError(f"Cannot open database: {e}", operation="connect") from e
            self._engine = engine
            self._session_factory = sessionmaker(bind=engine)
            self._logger.info("Key/value table ready")
        return self._session_factory

    @contextmanager
    def managed_session(self, operation: str) -> Generator[Session, None, None]:
        """Session that commits on success and rolls back on failure"""
        session = self._get_session_factory()()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            self._logger.error("DATABASE ERROR during %s: %s", operation, e)
            session.rollback()
            raise PersistenceError(str(e), operation=operation) from e
        finally:
            session.close()

    def get_item(self, key: str) -> Optional[str]:
        with self.managed_session("get_item") as session:
            entry = session.get(KeyValueEntry, key)
            return entry.value if entry else None

    def set_item(self, key: str, value: str) -> None:
        with self.managed_session("set_item") as session:
            entry = session.get(KeyValueEntry, key)
            if entry is None:
                session.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value

    def remove_item(self, key: str) -> None:
        with self.managed_session("remove_item") as session:
            entry = session.get(KeyValueEntry, key)
            if entry is not None:
                session.delete(entry)

    def dispose(self) -> None:
        """Release pooled connections"""
        if self._engine is not None:
            self._engine.dispose()


def create_key_value_store(settings: Settings) -> KeyValueStore:
    """Build the store selected by ``settings.storage_backend``"""
    logger.info("Creating %s key/value store", settings.storage_backend)
    if settings.storage_backend == "memory":
        return InMemoryKeyValueStore()
    if settings.storage_backend == "database":
        return SQLAlchemyKeyValueStore(settings.database_url)
    return FileKeyValueStore(settings.storage_dir)
