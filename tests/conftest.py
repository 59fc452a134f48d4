import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.routes.auth import create_access_token
from app import app
from core.database import get_db
from models.base import Base
from models.question import QuestionModel
from models.user import UserModel
from schemas.user import ExternalIdentity
from utils.user_manager import UserManager


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def user_manager(db):
    return UserManager(db)


@pytest.fixture
def make_user(user_manager):
    counter = {"n": 0}

    def _make_user(name="Ada", referral_code=None):
        counter["n"] += 1
        n = counter["n"]
        identity = ExternalIdentity(
            google_id=f"google-{n}",
            email=f"user{n}@example.com",
            name=name,
            picture=f"https://example.com/avatar/{n}.png",
        )
        return user_manager.create_account(identity, referral_code)

    return _make_user


@pytest.fixture
def set_points(db):
    def _set_points(user_id, points):
        db.query(UserModel).filter(UserModel.user_id == user_id).update(
            {"fika_points": points}
        )
        db.commit()

    return _set_points


@pytest.fixture
def get_points(db):
    def _get_points(user_id):
        db.expire_all()
        return db.query(UserModel).filter(UserModel.user_id == user_id).one().fika_points

    return _get_points


@pytest.fixture
def auth_headers(user_manager):
    def _auth_headers(user):
        login_session = user_manager.create_login_session(user.user_id)
        token = create_access_token(user.user_id, login_session.session_id)
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def add_questions(db):
    def _add_questions(chapter, count):
        for i in range(1, count + 1):
            db.add(
                QuestionModel(
                    chapter=chapter,
                    question=f"Chapter {chapter} question {i}?",
                    option_a=f"a{i}",
                    option_b=f"b{i}",
                    option_c=f"c{i}",
                    option_d=f"d{i}",
                    answer=f"b{i}",
                )
            )
        db.commit()

    return _add_questions
