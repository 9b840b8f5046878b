"""Shared fixtures for the authcore test suite"""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from authcore.app import create_app
from authcore.extensions import db
from authcore.services import AccountStore, AuthService, ResetService

STRONG_PASSWORD = 'Str0ng!Pass'


class FakeClock:
    """Controllable naive-UTC clock"""

    def __init__(self, start=datetime(2024, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def outbox(app):
    return app.extensions['reset_token_sender']


@pytest.fixture
def store(app):
    return AccountStore()


@pytest.fixture
def auth(app, store, clock):
    return AuthService(store=store, clock=clock)


@pytest.fixture
def resets(app, store, outbox, clock):
    return ResetService(store=store, sender=outbox, clock=clock)


@pytest.fixture
def alice(auth):
    return auth.register('alice', 'a@x.com', STRONG_PASSWORD)


@pytest.fixture
def failing_sql(app):
    """
    List of predicates over SQL text; a matching statement fails as if the
    database connection dropped.
    """
    rules = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if any(rule(statement) for rule in rules):
            raise OperationalError(statement, parameters, Exception('database is unavailable'))

    event.listen(db.engine, 'before_cursor_execute', before_cursor_execute)
    yield rules
    event.remove(db.engine, 'before_cursor_execute', before_cursor_execute)


def fails_after_commit(table):
    """Predicate failing every SELECT on table once an UPDATE of it was sent"""
    state = {'updated': False}

    def rule(statement):
        if statement.startswith(f'UPDATE {table}'):
            state['updated'] = True
            return False
        return state['updated'] and statement.startswith('SELECT') and f'FROM {table}' in statement

    return rule
