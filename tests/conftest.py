import itertools

import pytest

from skillswap import create_app, db
from skillswap.auth import generate_token
from skillswap.config import TestingConfig
from skillswap.models import Skill, User
from skillswap.utils import hash_password


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = itertools.count(1)

    def _make_user(first_name='Test', last_name='User', login=None, password='secret123', verified=True):
        user = User(
            first_name=first_name,
            last_name=last_name,
            login=login or f'user{next(counter)}@example.com',
            password_hash=hash_password(password),
            verified=verified,
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make_user


@pytest.fixture
def add_skill(app):
    def _add_skill(user, name, skill_type='offer'):
        skill = Skill(user_id=user.id, name=name, type=skill_type)
        db.session.add(skill)
        db.session.commit()
        return skill

    return _add_skill


@pytest.fixture
def auth_headers(app):
    def _auth_headers(user):
        return {'Authorization': f'Bearer {generate_token(user)}'}

    return _auth_headers


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing email instead of handing it to a backend."""
    from skillswap import mailer

    outbox = []
    monkeypatch.setattr(mailer, 'send_email', lambda to, subject, html: outbox.append(
        {'to': to, 'subject': subject, 'html': html}
    ))
    return outbox
