# tests/conftest.py
import itertools
import os
from datetime import date, timedelta

os.environ["ENVIRONMENT"] = "development"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import NullPool

from app import create_app
from core.get_db import Base, get_db_async
from models.enums import (
    LeaseStatus,
    MaintenancePriority,
    MaintenanceStatus,
    PaymentMethod,
    PaymentStatus,
    PaymentType,
    PropertyType,
    UnitStatus,
    UserRole,
)
from models.models import Lease, Maintenance, Payment, Property, Unit, User
from security.security_generate import user_generate

PASSWORD = "Secret123"


class Seeder:
    """Writes fixture rows straight to the test database."""

    def __init__(self, session: Session):
        self.session = session
        self._seq = itertools.count(1)

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        return obj

    def user(
        self,
        role=UserRole.TENANT,
        *,
        name=None,
        email=None,
        created_by=None,
        is_active=True,
    ) -> User:
        n = next(self._seq)
        user = User(
            name=name or f"{role.value.title()} {n}",
            email=email or f"{role.value}{n}@angaza.co.ke",
            role=role,
            created_by=created_by.id if created_by else None,
            is_active=is_active,
        )
        user.set_password(PASSWORD)
        return self._save(user)

    def property(self, landlord, *, total_units=2, available_units=None, **extra):
        prop = Property(
            name=extra.pop("name", f"Block {next(self._seq)}"),
            address=extra.pop("address", "12 Moi Avenue, Nairobi"),
            type=extra.pop("type", PropertyType.RESIDENTIAL),
            total_units=total_units,
            available_units=total_units if available_units is None else available_units,
            landlord_id=landlord.id,
            **extra,
        )
        return self._save(prop)

    def unit(self, prop, *, status=UnitStatus.VACANT, rent=15000.0):
        unit = Unit(
            unit_number=f"A{next(self._seq)}",
            type="1br",
            rent=rent,
            status=status,
            property_id=prop.id,
        )
        return self._save(unit)

    def lease(self, tenant, unit, *, status=LeaseStatus.ACTIVE):
        lease = Lease(
            start_date=date.today(),
            end_date=date.today() + timedelta(days=365),
            rent_amount=unit.rent,
            security_deposit=unit.rent,
            status=status,
            tenant_id=tenant.id,
            unit_id=unit.id,
        )
        return self._save(lease)

    def occupied_lease(self, tenant, unit):
        """An active lease with the unit and property already marked occupied."""
        lease = self.lease(tenant, unit)
        unit.status = UnitStatus.OCCUPIED
        prop = self.session.get(Property, unit.property_id)
        prop.available_units = max(0, prop.available_units - 1)
        self.session.commit()
        return lease

    def maintenance(self, requester, unit, *, status=MaintenanceStatus.PENDING):
        request = Maintenance(
            title="Leaking tap",
            description="Kitchen tap drips all night",
            status=status,
            priority=MaintenancePriority.NORMAL,
            created_by=requester.id,
            unit_id=unit.id,
        )
        return self._save(request)

    def payment(self, lease, *, amount=15000.0, status=PaymentStatus.COMPLETED):
        payment = Payment(
            amount=amount,
            payment_type=PaymentType.RENT,
            payment_method=PaymentMethod.MOBILE_MONEY,
            status=status,
            tenant_id=lease.tenant_id,
            lease_id=lease.id,
        )
        return self._save(payment)

    def reload(self, model, pk):
        self.session.expire_all()
        return self.session.get(model, pk)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "angaza_test.db"


@pytest.fixture
def sync_engine(db_path):
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def seed(sync_engine):
    with Session(sync_engine, expire_on_commit=False) as session:
        yield Seeder(session)


@pytest.fixture
def async_session_factory(db_path, sync_engine):
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", poolclass=NullPool)
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )
    yield factory


@pytest.fixture
async def db(async_session_factory):
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def app(async_session_factory):
    app = create_app()

    async def override_get_db():
        session = async_session_factory()
        try:
            yield session
        finally:
            await session.close()

    app.dependency_overrides[get_db_async] = override_get_db
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth():
    def headers_for(user):
        return {"Authorization": f"Bearer {user_generate.generate_access_token(user)}"}

    return headers_for


@pytest.fixture
def admin(seed):
    return seed.user(UserRole.ADMIN)


@pytest.fixture
def manager(seed):
    return seed.user(UserRole.PROPERTY_MANAGER)


@pytest.fixture
def landlord(seed):
    return seed.user(UserRole.LANDLORD)


@pytest.fixture
def other_landlord(seed):
    return seed.user(UserRole.LANDLORD)


@pytest.fixture
def tenant(seed):
    return seed.user(UserRole.TENANT)
