"""
Transactional unit of work over a SQLAlchemy session.

Two shapes:
- `unit_of_work(session)`: run a block as one transaction on a session the
  caller already owns (the request session from `get_db`). Commit on clean
  exit, roll back on any exception.
- `session_scope(factory)`: same, but also opens the session and closes it
  on every exit path.

A rollback that itself fails is logged and swallowed so the ORIGINAL error
propagates; the session is still released.
"""
import logging
from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


class UnitOfWork:
    """Explicit open/commit/rollback/release handle around one session."""

    def __init__(self, session: Session, owns_session: bool = False):
        self.session = session
        self.owns_session = owns_session
        self._finished = False

    def commit(self) -> None:
        self.session.commit()
        self._finished = True

    def rollback(self) -> None:
        self._finished = True
        try:
            self.session.rollback()
        except Exception:
            logger.exception("Rollback failed; releasing session anyway")

    def release(self) -> None:
        if not self.owns_session:
            return
        try:
            self.session.close()
        except Exception:
            logger.exception("Session close failed")

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            if exc_type is not None:
                self.rollback()
            elif not self._finished:
                try:
                    self.commit()
                except Exception:
                    self.rollback()
                    raise
        finally:
            self.release()
        return False


@contextmanager
def unit_of_work(session: Session) -> Iterator[Session]:
    with UnitOfWork(session) as uow:
        yield uow.session


@contextmanager
def session_scope(session_factory: Callable[[], Session]) -> Iterator[Session]:
    with UnitOfWork(session_factory(), owns_session=True) as uow:
        yield uow.session
