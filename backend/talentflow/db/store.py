"""
Entity Store.

Keyed persistence for the four entity kinds backed by SQLAlchemy. Each
operation runs in its own session and commits on its own, unless it runs inside
``transaction()``, in which case everything commits or rolls back together.

The store enforces identifier uniqueness (and the job slug unique index) but no
cross-entity integrity: deleting or re-pointing a job never touches candidates.
"""

from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence, Union

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from talentflow.core.errors import DuplicateKey, NotFound
from talentflow.core.logging import get_logger
from talentflow.db.base import Base
from talentflow.db.session import create_engine_for, make_session_factory
from talentflow.models import Assessment, Candidate, Job, TimelineEntry

logger = get_logger(__name__)


class EntityKind(str, Enum):
    JOB = "jobs"
    CANDIDATE = "candidates"
    ASSESSMENT = "assessments"
    TIMELINE = "timeline"


MODELS: dict[EntityKind, type] = {
    EntityKind.JOB: Job,
    EntityKind.CANDIDATE: Candidate,
    EntityKind.ASSESSMENT: Assessment,
    EntityKind.TIMELINE: TimelineEntry,
}

RecordInput = Union[Base, Mapping[str, Any]]

BULK_CHUNK = 500


def column_keys(model: type) -> set[str]:
    """Attribute names of the mapped columns of ``model``."""
    return {attr.key for attr in inspect(model).column_attrs}


class EntityStore:
    """Durable keyed storage for jobs, candidates, assessments and timeline entries."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory
        self._active: Optional[Session] = None

    # ------------------------------------------------------------------
    # Session handling
    # ------------------------------------------------------------------
    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        if self._active is not None:
            # Inside transaction(): the outer scope commits
            yield self._active
            return

        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @contextmanager
    def transaction(self) -> Iterator["EntityStore"]:
        """Run a group of operations all-or-nothing."""
        if self._active is not None:
            yield self
            return

        session = self._session_factory()
        self._active = session
        try:
            yield self
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            self._active = None
            session.close()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _model(kind: EntityKind) -> type:
        return MODELS[EntityKind(kind)]

    def _build(self, kind: EntityKind, record: RecordInput) -> Base:
        model = self._model(kind)
        if isinstance(record, model):
            return record
        keys = column_keys(model)
        return model(**{k: v for k, v in dict(record).items() if k in keys})

    # ------------------------------------------------------------------
    # Keyed access
    # ------------------------------------------------------------------
    def get(self, kind: EntityKind, record_id: str) -> Optional[Base]:
        with self._session_scope() as session:
            return session.get(self._model(kind), record_id)

    def count(self, kind: EntityKind) -> int:
        model = self._model(kind)
        with self._session_scope() as session:
            return session.scalar(select(func.count()).select_from(model)) or 0

    def add(self, kind: EntityKind, record: RecordInput) -> Base:
        """Insert one record; fails with DuplicateKey if its id (or slug) is taken."""
        kind = EntityKind(kind)
        obj = self._build(kind, record)
        with self._session_scope() as session:
            if session.get(type(obj), obj.id) is not None:
                logger.debug("duplicate %s id %s", kind.value, obj.id)
                raise DuplicateKey(kind.value, obj.id)
            session.add(obj)
            try:
                session.flush()
            except IntegrityError as exc:
                raise DuplicateKey(kind.value, obj.id) from exc
            return obj

    def update(self, kind: EntityKind, record_id: str, fields: Mapping[str, Any]) -> Base:
        """
        Merge ``fields`` into the stored record and return it.

        Only mapped columns are applied; values are not validated here.
        """
        kind = EntityKind(kind)
        model = self._model(kind)
        keys = column_keys(model) - {"id"}
        with self._session_scope() as session:
            obj = session.get(model, record_id)
            if obj is None:
                logger.debug("update of unknown %s %s", kind.value, record_id)
                raise NotFound(kind.value, record_id)
            for key, value in fields.items():
                if key in keys:
                    setattr(obj, key, value)
            try:
                session.flush()
            except IntegrityError as exc:
                raise DuplicateKey(kind.value, record_id) from exc
            return obj

    def bulk_add(self, kind: EntityKind, records: Iterable[RecordInput]) -> int:
        """Insert a batch; any duplicate fails the whole batch."""
        kind = EntityKind(kind)
        objs = [self._build(kind, record) for record in records]
        ids = [obj.id for obj in objs]
        model = self._model(kind)

        with self._session_scope() as session:
            seen: set[str] = set()
            for record_id in ids:
                if record_id in seen:
                    raise DuplicateKey(kind.value, record_id)
                seen.add(record_id)

            # Chunked to stay under SQLite's bound-parameter limit
            for start in range(0, len(ids), BULK_CHUNK):
                chunk = ids[start:start + BULK_CHUNK]
                existing = session.scalars(
                    select(model.id).where(model.id.in_(chunk)).limit(1)
                ).first()
                if existing is not None:
                    raise DuplicateKey(kind.value, existing)

            session.add_all(objs)
            try:
                session.flush()
            except IntegrityError as exc:
                raise DuplicateKey(kind.value, "<batch>") from exc
            return len(objs)

    # ------------------------------------------------------------------
    # Secondary lookups
    # ------------------------------------------------------------------
    def find_first(self, kind: EntityKind, **equals: Any) -> Optional[Base]:
        """First record whose columns equal the given values (lowest id wins)."""
        model = self._model(kind)
        stmt = select(model).filter_by(**equals).order_by(model.id).limit(1)
        with self._session_scope() as session:
            return session.scalars(stmt).first()

    def find_all(
        self,
        kind: EntityKind,
        order_by: Sequence[Any] = (),
        **equals: Any,
    ) -> Sequence[Base]:
        model = self._model(kind)
        stmt = select(model).filter_by(**equals).order_by(*order_by, model.id)
        with self._session_scope() as session:
            return session.scalars(stmt).all()

    def scalars(self, stmt) -> Sequence[Any]:
        """Run a caller-built SELECT and return all scalar rows."""
        with self._session_scope() as session:
            return session.scalars(stmt).all()

    def scalar(self, stmt) -> Any:
        with self._session_scope() as session:
            return session.scalar(stmt)

    def list(self, kind: EntityKind) -> Sequence[Base]:
        model = self._model(kind)
        with self._session_scope() as session:
            return session.scalars(select(model).order_by(model.id)).all()


def open_store(database_url: Optional[str] = None) -> EntityStore:
    """Create the engine and tables for ``database_url`` and return a store on it."""
    engine = create_engine_for(database_url)
    Base.metadata.create_all(bind=engine)
    logger.debug("opened store on %s", engine.url)
    return EntityStore(make_session_factory(engine))
