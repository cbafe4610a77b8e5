"""Shared fixtures: in-memory SQLite database, an owner account and seed data."""
import os

# Settings are read once per process, so the test environment is fixed first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["DATA_MODE"] = "real"
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import date, datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from database import SessionLocal, engine
from errors import DatabaseError
from main import app
from models import (
     Base,
     Expense,
     Invoice,
     InvoiceStatus,
     PaymentStatus,
     Property,
     PropertyStatus,
     Receipt,
     ReceiptStatus,
     ReceiptType,
     Tenant,
     User,
)
from services.data_source import FinancialDataSource

VALID_NIF = "123456789"


def make_token(user_id, secret="test-secret") -> str:
     return jwt.encode({"id": user_id}, secret, algorithm="HS256")


@pytest.fixture
def db():
     Base.metadata.create_all(bind=engine)
     session = SessionLocal()
     try:
          yield session
     finally:
          session.close()
          Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db):
     with TestClient(app, raise_server_exceptions=False) as test_client:
          yield test_client


@pytest.fixture
def user(db):
     owner = User(email="owner@example.com", name="Ana Proprietária")
     db.add(owner)
     db.commit()
     return owner


@pytest.fixture
def other_user(db):
     other = User(email="other@example.com", name="Outro Senhorio")
     db.add(other)
     db.commit()
     return other


@pytest.fixture
def auth_headers(user):
     return {"Authorization": f"Bearer {make_token(user.id)}"}


@pytest.fixture
def seed(db, user):
     """
     Two properties, two tenants and Q1 2025 activity:

     - invoices INV-2025-00001 (January) and INV-2025-00002 (February), 1200.00 each
     - three paid rent receipts and one pending receipt
     - two expenses
     """
     lisbon = Property(user_id=user.id, name="Rua Augusta 120", address="Rua Augusta 120, Lisboa",
                       rent=Decimal("1200.00"), status=PropertyStatus.OCCUPIED)
     porto = Property(user_id=user.id, name="Avenida da Boavista 45", address="Avenida da Boavista 45, Porto",
                      rent=Decimal("950.00"), status=PropertyStatus.VACANT)
     db.add_all([lisbon, porto])
     db.flush()

     ana = Tenant(user_id=user.id, property_id=lisbon.id, name="Ana Silva", email="ana@example.com",
                  tax_id=VALID_NIF, rent=Decimal("1200.00"), lease_start=date(2024, 1, 1),
                  lease_end=date(2026, 12, 31), payment_status=PaymentStatus.PAID)
     bruno = Tenant(user_id=user.id, property_id=None, name="Bruno Costa", email="bruno@example.com",
                    rent=Decimal("950.00"), lease_start=date(2023, 1, 1), lease_end=date(2023, 12, 31))
     db.add_all([ana, bruno])
     db.flush()

     created = datetime(2025, 1, 1, 9, 0, 0)
     january = Invoice(
          user_id=user.id, number="INV-2025-00001", tenant_id=ana.id, property_id=lisbon.id,
          amount=Decimal("1200.00"), issue_date=date(2025, 1, 1), due_date=date(2025, 1, 8),
          paid_date=date(2025, 1, 5), status=InvoiceStatus.PAID, description="Rent January 2025",
          line_items=[{"description": "Monthly Rent", "quantity": "1", "unit_price": "1200.00",
                       "total": "1200.00"}],
          details={}, created_at=created, updated_at=created,
     )
     february = Invoice(
          user_id=user.id, number="INV-2025-00002", tenant_id=ana.id, property_id=lisbon.id,
          amount=Decimal("1200.00"), issue_date=date(2025, 2, 1), due_date=date(2025, 2, 8),
          status=InvoiceStatus.PENDING, description="Rent February 2025",
          line_items=[], details={},
          created_at=datetime(2025, 2, 1, 9, 0, 0), updated_at=datetime(2025, 2, 1, 9, 0, 0),
     )
     db.add_all([january, february])
     db.flush()

     db.add_all([
          Receipt(user_id=user.id, tenant_id=ana.id, property_id=lisbon.id, invoice_id=january.id,
                  amount=Decimal("1200.00"), date=date(2025, 1, 5), type=ReceiptType.RENT,
                  status=ReceiptStatus.PAID, description="Rent January"),
          Receipt(user_id=user.id, tenant_id=ana.id, property_id=lisbon.id,
                  amount=Decimal("1200.00"), date=date(2025, 2, 6), type=ReceiptType.RENT,
                  status=ReceiptStatus.PAID, description="Rent February"),
          Receipt(user_id=user.id, tenant_id=ana.id, property_id=lisbon.id,
                  amount=Decimal("600.00"), date=date(2025, 3, 1), type=ReceiptType.DEPOSIT,
                  status=ReceiptStatus.PAID, description="Deposit top-up"),
          Receipt(user_id=user.id, tenant_id=ana.id, property_id=lisbon.id,
                  amount=Decimal("1200.00"), date=date(2025, 3, 7), type=ReceiptType.RENT,
                  status=ReceiptStatus.PENDING, description="Rent March"),
          Expense(user_id=user.id, property_id=lisbon.id, amount=Decimal("300.00"),
                  date=date(2025, 1, 20), category="maintenance", description="Boiler repair"),
          Expense(user_id=user.id, property_id=porto.id, amount=Decimal("100.00"),
                  date=date(2025, 2, 15), category="insurance", description="Home insurance"),
     ])
     db.commit()

     return {
          "user": user,
          "properties": {"lisbon": lisbon, "porto": porto},
          "tenants": {"ana": ana, "bruno": bruno},
          "invoices": {"january": january, "february": february},
     }


@pytest.fixture
def company_info():
     return {
          "nif": VALID_NIF,
          "name": "Ana Proprietária",
          "address": {
               "addressDetail": "Rua Augusta 120",
               "city": "Lisboa",
               "postalCode": "1100-053",
               "country": "PT",
          },
     }


class FailingDataSource(FinancialDataSource):
     """Every read fails the way a lost database connection does."""

     def _fail(self, *args, **kwargs):
          raise DatabaseError("connection refused")

     list_receipts = list_expenses = list_invoices = list_properties = list_tenants = _fail


@pytest.fixture
def failing_data_source(client, monkeypatch):
     monkeypatch.setattr(app.state, "data_source_factory", lambda db: FailingDataSource())
     return client
