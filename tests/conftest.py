import pytest

from hifz import create_app
from hifz.extensions import db
from hifz.models import Competitor, User
from hifz.utils.levels import LEVELS

PASSWORD = "correct-horse-9"


@pytest.fixture
def app():
    app = create_app("config.TestConfig")
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(username, role="viewer", password=PASSWORD):
        with app.app_context():
            u = User(username=username, role=role)
            u.set_password(password)
            db.session.add(u)
            db.session.commit()
            return u.id
    return _make


@pytest.fixture
def login_as(app, make_user):
    """Returns a fresh test client signed in with the given role."""
    def _login(role, username=None):
        username = username or f"{role}1"
        make_user(username, role)
        c = app.test_client()
        resp = c.post("/api/auth/login", json={"username": username, "password": PASSWORD})
        assert resp.status_code == 200, resp.get_json()
        return c
    return _login


@pytest.fixture
def admin(login_as):
    return login_as("admin")


@pytest.fixture
def evaluator(login_as):
    return login_as("evaluator")


@pytest.fixture
def viewer(login_as):
    return login_as("viewer")


@pytest.fixture
def add_competitor(app):
    counter = {"n": 0}

    def _add(full_name=None, gender="male", level=LEVELS[0], city="مسقط", mobile=None, status="not_evaluated"):
        counter["n"] += 1
        with app.app_context():
            c = Competitor(
                full_name=full_name or f"متسابق {counter['n']}",
                gender=gender,
                level=level,
                city=city,
                mobile=mobile or f"9{counter['n']:07d}",
                status=status,
            )
            db.session.add(c)
            db.session.commit()
            return c.id
    return _add
