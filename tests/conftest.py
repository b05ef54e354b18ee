"""
Pytest Configuration and Fixtures
"""
import os
from datetime import datetime

import pytest

from stkbilling import create_app
from stkbilling.config import MpesaSettings
from stkbilling.extensions import db as _db
from stkbilling.models import Subscriber
from stkbilling.providers import TokenCache

_token_cache = TokenCache()


@pytest.fixture(scope='session')
def app():
    """Create application for testing"""
    os.environ['FLASK_ENV'] = 'testing'

    app = create_app('testing', token_cache=_token_cache)

    # Establish application context
    ctx = app.app_context()
    ctx.push()

    yield app

    ctx.pop()


@pytest.fixture(scope='function')
def db(app):
    """Fresh schema for every test"""
    _db.create_all()

    yield _db

    _db.session.remove()
    _db.drop_all()


@pytest.fixture(autouse=True)
def clear_token_cache():
    _token_cache.clear()
    yield
    _token_cache.clear()


@pytest.fixture(scope='function')
def client(app, db):
    """Create a test client"""
    return app.test_client()


@pytest.fixture
def settings():
    return MpesaSettings(
        consumer_key='test_consumer_key',
        consumer_secret='test_consumer_secret',
        shortcode='174379',
        passkey='test_passkey',
        callback_base_url='https://billing.example.com',
    )


@pytest.fixture
def fixed_now():
    return datetime(2024, 1, 15, 9, 30, 5)


@pytest.fixture(scope='function')
def sample_subscriber(db):
    """An inactive subscriber keyed by a canonical phone"""
    subscriber = Subscriber(
        phone='254712345678',
        name='Test Host',
        subscription_active=False
    )

    db.session.add(subscriber)
    db.session.commit()

    return subscriber
