import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import timedelta
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database import Base, get_db
from auth.services import AuthService
from auth.models import User, UserRole
from payment.gateway import GatewaySession, GatewayValidation, SSLCommerzGateway
from payment.models import Payment  # noqa: F401  registers the table
from foodspot.models import ApprovalStatus, FoodCategory, FoodSpot
import review.models  # noqa: F401
import vote.models  # noqa: F401
from subscription.services import SubscriptionService
from utils.dates import utcnow
from main import app


@pytest.fixture
def engine(tmp_path):
    # File backed so that several sessions see each other's commits
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


def bearer(user):
    token = AuthService.create_access_token({"sub": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(session_factory):
    """Test client on the per-test database; authenticate with bearer()."""
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, email, role=UserRole.USER, is_premium=False, expiry=None):
    user = User(
        name=email.split("@")[0].title(),
        email=email,
        password_hash="not-a-real-hash",
        role=role,
        is_premium=is_premium,
        subscription_expiry_date=expiry,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_food_spot(db, creator, title="Fuchka Corner", approval_status=ApprovalStatus.APPROVED, is_premium=False,
                   min_price=50, max_price=150, category=FoodCategory.STREET_FOOD):
    spot = FoodSpot(
        title=title,
        description=f"{title} near the lake",
        location="Dhanmondi",
        min_price=min_price,
        max_price=max_price,
        category=category,
        image="https://example.com/spot.jpg",
        is_premium=is_premium,
        approval_status=approval_status,
        creator_id=creator.id,
    )
    db.add(spot)
    db.commit()
    db.refresh(spot)
    return spot


@pytest.fixture
def user(db):
    return make_user(db, "user@example.com")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role=UserRole.ADMIN)


@pytest.fixture
def expired_premium_user(db):
    return make_user(
        db,
        "lapsed@example.com",
        role=UserRole.PREMIUM,
        is_premium=True,
        expiry=utcnow() - timedelta(days=1),
    )


@pytest.fixture
def gateway():
    gateway = Mock(spec=SSLCommerzGateway)
    gateway.create_session.return_value = GatewaySession(
        redirect_url="https://sandbox.sslcommerz.com/EasyCheckOut/testsession",
        raw_payload={
            "status": "SUCCESS",
            "sessionkey": "testsession",
            "GatewayPageURL": "https://sandbox.sslcommerz.com/EasyCheckOut/testsession",
        },
    )
    return gateway


@pytest.fixture
def service(gateway):
    return SubscriptionService(gateway=gateway)


@pytest.fixture
def validation_for():
    """Build the gateway's answer for a given payment."""
    def build(payment, valid=True, **overrides):
        payload = {
            "status": "VALID" if valid else "INVALID_TRANSACTION",
            "tran_id": payment.transaction_id,
            "val_id": "val-123",
            "amount": f"{payment.amount:.2f}",
        }
        payload.update(overrides)
        return GatewayValidation(valid=valid, raw_payload=payload)
    return build
