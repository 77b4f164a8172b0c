# tests/conftest.py
import io, os, sys
import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_ACCESS_MINUTES", "15")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-at-least-32-bytes-long")
# SQLite en mémoire par défaut ; TEST_DATABASE_URL pour une base Postgres dédiée
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

from app import create_app
from app.extensions import db

@pytest.fixture(scope="session")
def app():
    app = create_app()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()

@pytest.fixture(autouse=True)
def _fresh_tables(app):
    # tables propres pour chaque test
    with app.app_context():
        db.drop_all()
        db.create_all()
    yield
    with app.app_context():
        db.session.remove()

@pytest.fixture()
def client(app):
    return app.test_client()

@pytest.fixture()
def register(client):
    """Crée un utilisateur et renvoie les headers Authorization de son access token."""
    def _register(username, email=None, password="SuperSecret123"):
        email = email or f"{username}@example.com"
        r = client.post("/api/v1/auth/register",
                        json={"email": email, "username": username, "password": password})
        assert r.status_code == 201, r.get_json()
        return {"Authorization": f"Bearer {r.get_json()['access_token']}"}
    return _register

@pytest.fixture()
def jpeg():
    """Fabrique un tuple (stream, nom, content-type) pour un champ fichier du test client."""
    # JPEG minimal (SOI/APP0 + EOI), suffisant pour stocker/servir des octets
    payload = (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )
    def _jpeg(name="photo.jpg"):
        return (io.BytesIO(payload), name, "image/jpeg")
    _jpeg.payload = payload
    return _jpeg
