from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from functools import lru_cache
from threading import RLock
from typing import Dict, Iterator, List, Optional
from uuid import uuid4

from pydantic import ValidationError

from .errors import (
    IncompleteReminderError,
    StoreCorruptError,
    StoreError,
    StoreIOError,
    UnsavedChangesError,
)
from .models import ReminderEntity, is_complete
from .schemas import ReminderCreate, dump_records, parse_records
from .settings import get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class ReminderStore:
    """
    Ordered, file-backed collection of reminders.

    Reminders are kept in insertion order and addressed by the id assigned in
    `add`. All mutations are in-memory only; `save` writes the whole sequence
    to the backing JSON file. The store is the only writer of that file.

    Access is guarded by a re-entrant lock. `exclusive()` holds it for a whole
    check/deliver cycle so other callers cannot interleave.
    """

    def __init__(self, path: str) -> None:
        self._lock = RLock()
        self._path = path
        self._items: Dict[str, ReminderEntity] = {}
        self._dirty = False
        self._halted: Optional[StoreError] = None

    @classmethod
    def load(cls, path: str) -> "ReminderStore":
        """
        Build a store from the backing file.

        - Missing file: empty store.
        - Zero-byte file: empty store.
        - Anything else must parse as a JSON array of reminders.

        Raises:
            StoreCorruptError if the content exists but does not parse.
            StoreIOError if the file cannot be read.
        """
        store = cls(path)
        store._items = cls._read(path)
        logger.info("Loaded %d reminder(s) from %s", len(store._items), path)
        return store

    @classmethod
    def open(cls, path: str) -> "ReminderStore":
        """
        Process-start entry point. Like `load`, but a file that cannot be
        loaded yields an empty store with writes halted, so the bad file is
        never overwritten. Call `reload` once the file has been fixed.
        """
        try:
            return cls.load(path)
        except StoreError as e:
            logger.error("%s; writes are halted until the file is fixed and reloaded", e)
            store = cls(path)
            store._halted = e
            return store

    @staticmethod
    def _read(path: str) -> Dict[str, ReminderEntity]:
        if not os.path.exists(path):
            return {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except UnicodeDecodeError as e:
            raise StoreCorruptError(path, f"not UTF-8 text ({e.reason})") from e
        except OSError as e:
            raise StoreIOError(path, e.strerror or str(e)) from e

        if raw == "":
            # A zero-byte file is not valid JSON but is a normal starting state
            return {}

        try:
            entities = parse_records(raw)
        except ValidationError as e:
            first = e.errors()[0]
            loc = ".".join(str(p) for p in first.get("loc", ()))
            reason = f"{first.get('msg')} at {loc}" if loc else str(first.get("msg"))
            raise StoreCorruptError(path, reason) from e

        items: Dict[str, ReminderEntity] = {}
        for entity in entities:
            if entity["id"] in items:
                logger.warning("Duplicate reminder id %s in %s; assigning a new id", entity["id"], path)
                entity["id"] = uuid4().hex
            # "Due now" has no meaning across restarts
            entity["should_notify"] = False
            items[entity["id"]] = entity
        return items

    @property
    def path(self) -> str:
        return self._path

    @property
    def dirty(self) -> bool:
        """True when in-memory changes have not reached the file yet."""
        return self._dirty

    @property
    def writes_halted(self) -> bool:
        return self._halted is not None

    @property
    def halt_reason(self) -> Optional[str]:
        return None if self._halted is None else str(self._halted)

    @contextlib.contextmanager
    def exclusive(self) -> Iterator["ReminderStore"]:
        """Hold the store lock for the duration of the block."""
        with self._lock:
            yield self

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def add(self, data: ReminderCreate) -> ReminderEntity:
        """
        Append a new reminder and return a copy of it. Duplicate content is
        allowed; every reminder gets its own id.

        Raises:
            IncompleteReminderError if title or description is blank.
        """
        if not is_complete(data.title, data.description):
            raise IncompleteReminderError("A reminder needs both a title and a description")
        entity: ReminderEntity = {
            "id": uuid4().hex,
            "title": data.title,
            "description": data.description,
            "date": data.date,
            "time": data.time.replace(microsecond=0),
            "notify_when": data.notify_when,
            "should_notify": False,
            "did_notify": False,
        }
        with self._lock:
            self._items[entity["id"]] = entity
            self._dirty = True
        return entity.copy()

    def get(self, reminder_id: str) -> Optional[ReminderEntity]:
        with self._lock:
            item = self._items.get(reminder_id)
            return None if item is None else item.copy()

    def list(self) -> List[ReminderEntity]:
        """Return copies of all reminders in insertion order."""
        with self._lock:
            return [t.copy() for t in self._items.values()]

    def remove(self, reminder_id: str) -> bool:
        """
        Remove a reminder by id. An unknown id is reported and leaves the
        store unchanged. Return True if removed, False if not found.
        """
        with self._lock:
            if self._items.pop(reminder_id, None) is None:
                logger.warning("Reminder %s not found; nothing removed", reminder_id)
                return False
            self._dirty = True
            return True

    def mark_due(self, reminder_id: str) -> bool:
        """Flag a reminder as due. Delivered reminders are never flagged again."""
        with self._lock:
            item = self._items.get(reminder_id)
            if item is None or item["did_notify"]:
                return False
            item["should_notify"] = True
            return True

    def clear_due(self, reminder_id: str) -> bool:
        with self._lock:
            item = self._items.get(reminder_id)
            if item is None:
                return False
            item["should_notify"] = False
            return True

    def mark_delivered(self, reminder_id: str) -> bool:
        with self._lock:
            item = self._items.get(reminder_id)
            if item is None:
                return False
            item["should_notify"] = False
            item["did_notify"] = True
            self._dirty = True
            return True

    def save(self) -> None:
        """
        Replace the backing file with the full current sequence, creating it
        if absent. The new content is written to a temporary file in the same
        directory and moved over the old one, so a reader never sees a
        partial write.

        Raises:
            StoreCorruptError/StoreIOError while writes are halted.
            StoreIOError if writing fails; in-memory state is kept and the
            store stays dirty so a later save retries.
        """
        with self._lock:
            if self._halted is not None:
                raise type(self._halted)(self._halted.path, self._halted.reason)

            payload = dump_records(list(self._items.values()), indent=2)
            directory = os.path.dirname(os.path.abspath(self._path))
            try:
                os.makedirs(directory, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(prefix=".reminders-", suffix=".tmp", dir=directory)
                try:
                    with os.fdopen(fd, "wb") as f:
                        f.write(payload)
                        f.flush()
                        os.fsync(f.fileno())
                    os.replace(tmp_path, self._path)
                except OSError:
                    with contextlib.suppress(OSError):
                        os.unlink(tmp_path)
                    raise
            except OSError as e:
                self._dirty = True
                logger.error("Saving reminders to %s failed: %s", self._path, e)
                raise StoreIOError(self._path, e.strerror or str(e)) from e

            self._dirty = False
            logger.debug("Saved %d reminder(s) to %s", len(self._items), self._path)

    def reload(self) -> int:
        """
        Re-read the backing file and lift a write halt. Reminders held in
        memory while writes were halted win over the file's version of the
        same id; the rest are kept after the file's reminders. Return the
        number of reminders now held.

        Raises:
            UnsavedChangesError if the store has changes the file lacks and
            writes are not halted; save first.
            StoreCorruptError/StoreIOError if the file still cannot be loaded.
        """
        with self._lock:
            if self._dirty and self._halted is None:
                raise UnsavedChangesError(self._path, "unsaved changes would be lost; save before reloading")
            loaded = self._read(self._path)
            pending = [e for i, e in self._items.items() if i not in loaded]
            for reminder_id, entity in self._items.items():
                loaded[reminder_id] = entity
            self._items = loaded
            self._halted = None
            self._dirty = self._dirty or bool(pending)
            logger.info(
                "Reloaded %d reminder(s) from %s (%d pending in memory)",
                len(loaded),
                self._path,
                len(pending),
            )
            return len(loaded)


@lru_cache(maxsize=1)
def _store_for(path: str) -> ReminderStore:
    return ReminderStore.open(path)


# PUBLIC_INTERFACE
def get_store() -> ReminderStore:
    """
    Return the process-wide store for the configured reminders file. The
    store is opened once per path and lives for the process lifetime.
    """
    settings = get_settings()
    return _store_for(settings.reminders_file)
