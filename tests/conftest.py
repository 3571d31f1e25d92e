import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from teamspace.database import Base, get_db
from teamspace.main import create_app
from teamspace.models import MemberRole, Project, User, UserRole
from teamspace.realtime import Broadcaster
from teamspace.repositories import projects as project_repo
from teamspace.repositories import users as user_repo
from teamspace.security import hash_password
from teamspace.services.storage import LocalFileStorage

TEST_DATABASE_URL = "sqlite://"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class RecordingBroadcaster(Broadcaster):
    """Keeps every emitted event instead of sending it."""

    def __init__(self):
        super().__init__(sio=None)
        self.events = []

    async def emit(self, event, payload, room=None):
        self.events.append((event, payload, room))

    def named(self, event):
        return [(payload, room) for name, payload, room in self.events if name == event]


@pytest.fixture(autouse=True)
def db_session() -> Session:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def session_factory():
    return TestingSessionLocal


@pytest.fixture
def broadcaster() -> RecordingBroadcaster:
    return RecordingBroadcaster()


@pytest.fixture
def make_user(db_session: Session):
    def _make_user(name: str, email: str, role: UserRole = UserRole.EDITOR, password: str = "secret123") -> User:
        return user_repo.create_user(db_session, email, hash_password(password), name, role)

    return _make_user


@pytest.fixture
def admin(make_user) -> User:
    return make_user("Alice Admin", "alice@example.com", role=UserRole.ADMIN)


@pytest.fixture
def editor(make_user) -> User:
    return make_user("Bob Builder", "bob@example.com")


@pytest.fixture
def make_project(db_session: Session):
    def _make_project(creator: User, name: str = "Launch", members=()) -> Project:
        project = project_repo.create_project(db_session, creator, name=name)
        for member in members:
            project = project_repo.add_member(db_session, project, member.id, MemberRole.MEMBER)
        return project

    return _make_project


def _override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def app_factory(broadcaster, tmp_path):
    def _build(max_file_size: int = 1024 * 1024):
        storage = LocalFileStorage(tmp_path / "uploads", max_file_size)
        app = create_app(session_factory=TestingSessionLocal, broadcaster=broadcaster, file_storage=storage)
        app.dependency_overrides[get_db] = _override_get_db
        return app

    return _build


@pytest.fixture
def client(app_factory):
    with TestClient(app_factory()) as test_client:
        yield test_client


@pytest.fixture
def signup(client):
    """Register through the API and return ``(user, headers)``."""

    def _signup(name: str, email: str, password: str = "secret123"):
        response = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return data["user"], {"Authorization": f"Bearer {data['token']}"}

    return _signup
