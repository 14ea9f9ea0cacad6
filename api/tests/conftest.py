"""
Shared fixtures for the ledger tests.

The API tests run against an in-memory record store that stands in for
LedgerRepository, so no database is needed.
"""
import uuid
from datetime import date, datetime
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient

from ledger.main import app
from ledger.repositories.records import RecordNotFound
from ledger.schemas.expenses import Expense
from ledger.schemas.sales import Sale, SaleItem
from ledger.services.deps import get_business_tz, get_repository, get_today

TODAY = date(2025, 3, 14)
UTC = ZoneInfo("UTC")


class InMemoryRepository:
    def __init__(self, sales=None, expenses=None):
        self.sales: list[Sale] = list(sales or [])
        self.expenses: list[Expense] = list(expenses or [])

    def list_sales(self, since=None, before=None):
        def in_range(sale):
            if sale.created_at is None:
                return since is None and before is None
            if since is not None and sale.created_at < since:
                return False
            if before is not None and sale.created_at >= before:
                return False
            return True

        return [sale for sale in self.sales if in_range(sale)]

    def get_sale(self, sale_id):
        for sale in self.sales:
            if sale.id == sale_id:
                return sale
        raise RecordNotFound(f"Sale not found: {sale_id}")

    def create_sale(self, payload):
        subtotal = sum((item.unit_price * item.qty for item in payload.items), Decimal("0"))
        sale = Sale(
            id=str(uuid.uuid4()),
            customer_name=payload.customer_name,
            customer_phone=payload.customer_phone,
            total=payload.total if payload.total is not None else subtotal,
            dtf_cost=payload.dtf_cost,
            created_at=datetime(2025, 3, 14, 12, 0, tzinfo=UTC),
            items=[
                SaleItem(
                    id=str(uuid.uuid4()),
                    product_name=item.product_name,
                    quantity=item.qty,
                    unit_price=item.unit_price,
                    unit_cost=item.unit_cost,
                )
                for item in payload.items
            ],
        )
        self.sales.append(sale)
        return sale

    def toggle_sale_status(self, sale_id):
        sale = self.get_sale(sale_id)
        updated = sale.model_copy(update={"status": sale.status.toggled()})
        self.sales[self.sales.index(sale)] = updated
        return updated

    def delete_sale(self, sale_id):
        self.sales.remove(self.get_sale(sale_id))

    def list_expenses(self, on=None):
        return [e for e in self.expenses if on is None or e.expense_date == on]

    def create_expense(self, payload):
        expense = Expense(
            id=str(uuid.uuid4()),
            description=payload.description.strip(),
            amount=payload.amount,
            expense_date=payload.expense_date,
        )
        self.expenses.append(expense)
        return expense

    def delete_expense(self, expense_id):
        for expense in self.expenses:
            if expense.id == expense_id:
                self.expenses.remove(expense)
                return
        raise RecordNotFound(f"Expense not found: {expense_id}")


@pytest.fixture
def repo():
    return InMemoryRepository()


@pytest.fixture
def client(repo):
    app.dependency_overrides[get_repository] = lambda: repo
    app.dependency_overrides[get_business_tz] = lambda: UTC
    app.dependency_overrides[get_today] = lambda: TODAY
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
