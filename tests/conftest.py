import pytest

from app import create_app
from config import Settings
from models import db

ADMIN_KEY = "test-admin-key"


class FakeMedia:
    def __init__(self):
        self.uploads = []

    def store(self, blob, filename=None, content_type=None):
        self.uploads.append((blob.read(), filename, content_type))
        return f"https://media.test/trees/{len(self.uploads)}.png"


@pytest.fixture
def media():
    return FakeMedia()


@pytest.fixture
def app(media):
    settings = Settings(database_url="sqlite://", admin_key=ADMIN_KEY)
    app = create_app(settings, media=media)
    app.config.update(TESTING=True)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions["tree_gallery"].ingestion.store


@pytest.fixture
def admin():
    return {"x-admin-key": ADMIN_KEY}


def tree_payload(**overrides):
    payload = {
        "name": "Oak1",
        "species": "Oak",
        "description": "d",
        "image": "http://x/img.png",
        "css_style": "s1",
        "student_id": "S1",
    }
    payload.update(overrides)
    return payload
