"""Transactional scope tests for the unit of work."""

from __future__ import annotations

import pytest
from sqlmodel import select

from monifly.infra import UnitOfWork, session_scope
from monifly.models.wallet import Wallet


def test_clean_exit_commits(app):
    with UnitOfWork(app.engine) as uow:
        uow.wallets.create(Wallet(name="Committed", currency="USD"))

    assert [w.name for w in app.list_wallets()] == ["Committed"]


def test_exception_rolls_back_every_write(app):
    with pytest.raises(RuntimeError):
        with UnitOfWork(app.engine) as uow:
            uow.wallets.create(Wallet(name="First", currency="USD"))
            uow.flush()
            uow.wallets.create(Wallet(name="Second", currency="USD"))
            raise RuntimeError("boom")

    assert app.list_wallets() == []


def test_session_is_released_after_exit(app):
    unit = UnitOfWork(app.engine)
    with unit:
        assert unit.session is not None
    assert unit.session is None


def test_session_scope_round_trip(app):
    with session_scope(app.engine) as session:
        session.add(Wallet(name="Scoped", currency="EUR"))

    with session_scope(app.engine) as session:
        names = [w.name for w in session.exec(select(Wallet)).all()]

    assert names == ["Scoped"]
