"""Unit-of-work scope and pessimistic row locks.

Every write enters through ``process``: the command's handler runs inside a
Protean ``UnitOfWork``, so its changes commit together or not at all. Handlers
that read-modify-write shared rows (variant stock, order status, cart lines)
load those rows with ``lock_for_update``.

Relational providers take a ``SELECT ... FOR UPDATE`` lock in the unit of
work's session, so concurrent requests touching the same row queue up behind
each other until the holder commits. The memory provider copies the whole
store when a unit of work opens and swaps it back on commit; it stays
consistent only if writers run one at a time, so ``process`` holds a
store-wide mutex whenever such a provider is configured.
"""

import threading
from contextlib import contextmanager

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError
from protean.utils.globals import current_domain
from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError

from marketplace.config import get_settings
from marketplace.exceptions import ConcurrentUpdateError, InternalError, NotFoundError

logger = structlog.get_logger(__name__)

_RELATIONAL_PROVIDERS = ("postgresql", "sqlite")

_store_mutex = threading.RLock()


def _is_relational(provider) -> bool:
    return provider.conn_info["provider"] in _RELATIONAL_PROVIDERS


def _snapshots_whole_store() -> bool:
    return any(not _is_relational(provider) for _, provider in current_domain.providers.items())


@contextmanager
def _writer_slot():
    if _snapshots_whole_store():
        with _store_mutex:
            yield
    else:
        yield


def _dispatch(command):
    name = command.__class__.__name__
    try:
        with _writer_slot():
            return current_domain.process(command, asynchronous=False)
    except ExpectedVersionError as exc:
        raise ConcurrentUpdateError(
            "The record was changed by another request, please retry",
            command=name,
        ) from exc
    except (OperationalError, IntegrityError) as exc:
        # Lock/statement timeouts and unique collisions detected at commit
        raise ConcurrentUpdateError(
            "The request conflicted with a concurrent update, please retry",
            command=name,
        ) from exc
    except SQLAlchemyError as exc:
        logger.exception("Unexpected storage failure", command=name)
        raise InternalError("Unexpected storage failure") from exc


def process(command, retries: int | None = None):
    """Run ``command`` synchronously as one unit of work and return its result.

    Transient conflicts are re-run up to ``retries`` times (``CONFLICT_RETRIES``
    by default). Business errors propagate on the first attempt.
    """
    if retries is None:
        retries = get_settings().conflict_retries

    attempt = 0
    while True:
        attempt += 1
        try:
            return _dispatch(command)
        except ConcurrentUpdateError:
            if attempt > retries:
                raise
            logger.warning(
                "Retrying after concurrent update",
                command=command.__class__.__name__,
                attempt=attempt,
            )


def find(aggregate_cls, identifier):
    """Load an aggregate without locking it."""
    try:
        return current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError:
        raise NotFoundError(
            f"{aggregate_cls.__name__} not found",
            **{f"{aggregate_cls.__name__.lower()}_id": str(identifier)},
        ) from None


def lock_for_update(aggregate_cls, identifier):
    """Load an aggregate for a read-modify-write in the current unit of work.

    On relational providers the aggregate's row stays locked until the unit of
    work commits or rolls back.
    """
    dao = current_domain.repository_for(aggregate_cls)._dao
    if _is_relational(dao.provider):
        session = dao._get_session()
        session.query(dao.database_model_cls).filter_by(id=str(identifier)).with_for_update().first()

    return find(aggregate_cls, identifier)
