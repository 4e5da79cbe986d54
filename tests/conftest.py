"""Pytest fixtures for testing"""

import pytest
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Generator, List, Optional, Sequence
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from commission_schedule.api.main import create_app
from commission_schedule.infrastructure.database.models import Base
from commission_schedule.infrastructure.database.session import get_db
from commission_schedule.domain.models import Installment, Sale


# Test database
TEST_DATABASE_URL = "sqlite:///./test_commission_schedule.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

FIXED_NOW = datetime(2024, 3, 1, 9, 30, 0)


class InMemoryInstallmentStore:
    """Dict-backed InstallmentStore for exercising the reconciler without a database"""

    def __init__(self, installments: Sequence[Installment] = ()):
        self.rows = {}
        self.next_id = 1
        for inst in installments:
            self._put(inst)

    def _put(self, inst: Installment) -> Installment:
        if inst.id is None:
            inst = replace(inst, id=self.next_id)
        self.next_id = max(self.next_id, inst.id + 1)
        self.rows[inst.id] = inst
        return inst

    def load_active_installments(self, sale_id: int) -> List[Installment]:
        active = [i for i in self.rows.values() if i.sale_id == sale_id and not i.is_deleted]
        return sorted(active, key=lambda i: (i.due_date or date.min, i.id))

    def get_installment(self, installment_id: int) -> Optional[Installment]:
        inst = self.rows.get(installment_id)
        return inst if inst is not None and not inst.is_deleted else None

    def insert_installments(self, installments: Sequence[Installment]) -> List[Installment]:
        return [self._put(replace(inst, id=None, is_deleted=False)) for inst in installments]

    def soft_delete_installments(self, installment_ids, deleted_at, updated_at) -> None:
        for installment_id in installment_ids:
            self.rows[installment_id] = replace(
                self.rows[installment_id], is_deleted=True, deleted_at=deleted_at, updated_at=updated_at
            )

    def update_installment(self, installment: Installment) -> None:
        self.rows[installment.id] = installment

    def purge_installments(self, installment_ids) -> None:
        for installment_id in installment_ids:
            del self.rows[installment_id]

    def active(self) -> List[Installment]:
        return sorted((i for i in self.rows.values() if not i.is_deleted), key=lambda i: i.id)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def sample_sale() -> Sale:
    """Sale from the reference scenario: 999.00 at 10% on 2024-01-01"""
    return Sale(
        id=1,
        client_id=10,
        contact_id=20,
        invoice_number="INV-1001",
        sale_date=date(2024, 1, 1),
        amount=Decimal("999.00"),
        commission_percent=Decimal("10"),
    )


@pytest.fixture
def store() -> InMemoryInstallmentStore:
    return InMemoryInstallmentStore()


@pytest.fixture
def make_store():
    """Build an in-memory store pre-loaded with installments"""
    return InMemoryInstallmentStore
