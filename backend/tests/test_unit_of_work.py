from unittest.mock import MagicMock

import pytest

from invoice_server.db.unit_of_work import UnitOfWork, session_scope, unit_of_work
from invoice_server.models.client import Client


def test_commits_on_clean_exit(db, session_factory):
    with unit_of_work(db):
        db.add(Client(name="Committed"))

    other = session_factory()
    try:
        assert other.query(Client).filter(Client.name == "Committed").count() == 1
    finally:
        other.close()


def test_rolls_back_and_reraises(db):
    with pytest.raises(ValueError):
        with unit_of_work(db):
            db.add(Client(name="Discarded"))
            db.flush()
            raise ValueError("boom")

    assert db.query(Client).filter(Client.name == "Discarded").count() == 0


def test_failing_rollback_does_not_mask_original_error():
    session = MagicMock()
    session.rollback.side_effect = RuntimeError("connection gone")

    with pytest.raises(ValueError, match="original"):
        with UnitOfWork(session, owns_session=True):
            raise ValueError("original")

    session.rollback.assert_called_once()
    session.close.assert_called_once()


def test_failing_commit_rolls_back():
    session = MagicMock()
    session.commit.side_effect = RuntimeError("commit failed")

    with pytest.raises(RuntimeError, match="commit failed"):
        with UnitOfWork(session):
            pass

    session.rollback.assert_called_once()
    session.close.assert_not_called()


def test_session_scope_closes_session():
    session = MagicMock()

    with session_scope(lambda: session) as scoped:
        assert scoped is session

    session.commit.assert_called_once()
    session.close.assert_called_once()
