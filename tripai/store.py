"""Repositories for users, destinations and bookings.

Records cross this boundary as plain dicts keyed by their wire names
(``walletBalance``, ``customerName``...). Identifiers are always strings;
``canonical_id`` is applied to every id a caller hands in.
"""
import copy
import logging
import threading
import uuid
import weakref
from abc import ABC, abstractmethod
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .errors import ConflictError, InternalError
from .models import db, User, Destination, Booking, utc_now_iso

logger = logging.getLogger(__name__)


def new_id():
    return uuid.uuid4().hex


def canonical_id(value):
    """Coerce a client supplied identifier (``1``, ``1.0``, ``" 1 "``) to ``"1"``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    value = str(value).strip()
    return value or None


def _split_order(order_by):
    descending = order_by.startswith('-')
    return order_by.lstrip('-'), descending


class Repository(ABC):
    """Storage operations for one collection."""

    @abstractmethod
    def get(self, record_id, for_update=False):
        """Return the record with ``record_id`` or None."""

    @abstractmethod
    def list(self, order_by=None, **filters):
        """Return records whose fields equal ``filters``.

        ``order_by`` names a field; prefix it with ``-`` for descending order.
        """

    @abstractmethod
    def insert(self, record):
        """Store a new record and return it as stored."""

    @abstractmethod
    def update(self, record_id, changes):
        """Apply ``changes`` and return the updated record, or None if absent."""

    @abstractmethod
    def delete(self, record_id):
        """Remove the record. Returns False when there was nothing to delete."""

    def find_one(self, **filters):
        matches = self.list(**filters)
        return matches[0] if matches else None

    def count(self, **filters):
        return len(self.list(**filters))

    @staticmethod
    def _prepare(record):
        record = dict(record)
        record['id'] = canonical_id(record.get('id')) or new_id()
        record.setdefault('createdAt', utc_now_iso())
        return record


class InMemoryRepository(Repository):

    def __init__(self, lock):
        self._lock = lock
        self._records = {}

    def get(self, record_id, for_update=False):
        with self._lock:
            record = self._records.get(canonical_id(record_id))
            return copy.deepcopy(record)

    def list(self, order_by=None, **filters):
        with self._lock:
            records = [
                record for record in self._records.values()
                if all(record.get(key) == value for key, value in filters.items())
            ]
            if order_by:
                key, descending = _split_order(order_by)
                records.sort(key=lambda r: (r.get(key) is None, r.get(key)), reverse=descending)
            return copy.deepcopy(records)

    def insert(self, record):
        record = self._prepare(record)
        with self._lock:
            if record['id'] in self._records:
                raise InternalError(f"Duplicate identifier {record['id']}")
            self._records[record['id']] = copy.deepcopy(record)
        return record

    def update(self, record_id, changes):
        with self._lock:
            record = self._records.get(canonical_id(record_id))
            if record is None:
                return None
            record.update({k: copy.deepcopy(v) for k, v in changes.items() if k != 'id'})
            return copy.deepcopy(record)

    def delete(self, record_id):
        with self._lock:
            return self._records.pop(canonical_id(record_id), None) is not None

    def snapshot(self):
        return copy.deepcopy(self._records)

    def restore(self, records):
        self._records = records


class SQLAlchemyRepository(Repository):

    def __init__(self, model):
        self.model = model

    def _query(self, **filters):
        query = db.session.query(self.model)
        for key, value in filters.items():
            query = query.filter(self.model.column_for(key) == value)
        return query

    def get(self, record_id, for_update=False):
        query = self._query(id=canonical_id(record_id))
        if for_update:
            query = query.with_for_update()
        obj = query.first()
        return obj.to_dict() if obj else None

    def list(self, order_by=None, **filters):
        query = self._query(**filters)
        if order_by:
            key, descending = _split_order(order_by)
            column = self.model.column_for(key)
            query = query.order_by(column.desc() if descending else column.asc())
        return [obj.to_dict() for obj in query.all()]

    def insert(self, record):
        obj = self.model().apply(self._prepare(record))
        db.session.add(obj)
        db.session.flush()
        return obj.to_dict()

    def update(self, record_id, changes):
        obj = db.session.get(self.model, canonical_id(record_id))
        if obj is None:
            return None
        obj.apply({k: v for k, v in changes.items() if k != 'id'})
        db.session.flush()
        return obj.to_dict()

    def delete(self, record_id):
        obj = db.session.get(self.model, canonical_id(record_id))
        if obj is None:
            return False
        db.session.delete(obj)
        db.session.flush()
        return True


class DataStore(ABC):
    """The three collections plus transaction and wallet locking primitives."""

    users = None
    destinations = None
    bookings = None

    def __init__(self):
        # Entries vanish once no request holds the lock
        self._wallet_locks = weakref.WeakValueDictionary()
        self._wallet_locks_guard = threading.Lock()

    @contextmanager
    def wallet_lock(self, user_id):
        """Serialise balance read-modify-write cycles for one user."""
        key = canonical_id(user_id)
        with self._wallet_locks_guard:
            lock = self._wallet_locks.setdefault(key, threading.RLock())
        with lock:
            yield

    @abstractmethod
    def atomic(self):
        """Context manager: every write inside commits together or not at all."""


class InMemoryStore(DataStore):

    def __init__(self):
        super().__init__()
        self._lock = threading.RLock()
        self._depth = 0
        self.users = InMemoryRepository(self._lock)
        self.destinations = InMemoryRepository(self._lock)
        self.bookings = InMemoryRepository(self._lock)

    def _repositories(self):
        return (self.users, self.destinations, self.bookings)

    @contextmanager
    def atomic(self):
        with self._lock:
            snapshot = None
            if self._depth == 0:
                snapshot = [repo.snapshot() for repo in self._repositories()]
            self._depth += 1
            try:
                yield self
            except Exception:
                if snapshot is not None:
                    for repo, records in zip(self._repositories(), snapshot):
                        repo.restore(records)
                raise
            finally:
                self._depth -= 1


class SQLAlchemyStore(DataStore):

    def __init__(self):
        super().__init__()
        self._local = threading.local()
        self.users = SQLAlchemyRepository(User)
        self.destinations = SQLAlchemyRepository(Destination)
        self.bookings = SQLAlchemyRepository(Booking)

    @contextmanager
    def atomic(self):
        depth = getattr(self._local, 'depth', 0)
        self._local.depth = depth + 1
        try:
            yield self
            if depth == 0:
                db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            logger.warning('Transaction rolled back on a constraint violation: %s', str(e.orig))
            raise ConflictError() from e
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error('Transaction rolled back: %s', str(e))
            raise InternalError('The data store is unavailable. Please try again later.') from e
        except Exception:
            if depth == 0:
                db.session.rollback()
            raise
        finally:
            self._local.depth = depth


def build_store(backend):
    if backend == 'memory':
        return InMemoryStore()
    if backend == 'sql':
        return SQLAlchemyStore()
    raise ValueError(f"Unknown store backend {backend!r}; expected 'sql' or 'memory'")
