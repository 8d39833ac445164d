import os

# must be set before canteen.utils.settings is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["TAX_RATE"] = "0.05"
os.environ["DELIVERY_FEE"] = "0.00"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from canteen.data.database import get_db, init_db
from canteen.main import create_app
from canteen.services.order_service import OrderService
from tests.helpers import RecordingNotifications


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def order_service(db, notifications):
    return OrderService(db, notification_service=notifications)


@pytest.fixture
def client(session_factory):
    app = create_app()

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)
