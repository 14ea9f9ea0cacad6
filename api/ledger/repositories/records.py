"""
Record store for sales, sale items and expenses.

Reads return validated ``Sale`` / ``Expense`` snapshots; the aggregation code
never talks to the database.
"""
import logging
from collections import defaultdict
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import DataError
from sqlalchemy.orm import Session

from ledger.schemas.expenses import Expense, ExpenseCreateRequest
from ledger.schemas.sales import CreateSaleRequest, Sale, SaleItem, SaleStatus

logger = logging.getLogger(__name__)


class LedgerError(Exception):
    pass


class RecordNotFound(LedgerError):
    pass


SALE_COLUMNS = """
    s.id::text AS id,
    s.customer_name,
    s.customer_phone,
    s.total,
    s.dtf_cost,
    s.status::text AS status,
    s.created_at
"""


class LedgerRepository:
    def __init__(self, db: Session):
        self.db = db

    def _items_by_sale(self, sale_ids: list[str]) -> dict[str, list[SaleItem]]:
        items: dict[str, list[SaleItem]] = defaultdict(list)
        if not sale_ids:
            return items

        rows = self.db.execute(
            text(
                """
                SELECT
                  id::text AS id,
                  sale_id::text AS sale_id,
                  product_name,
                  qty,
                  unit_price,
                  unit_cost
                FROM sale_items
                WHERE sale_id = ANY(CAST(:sale_ids AS uuid[]))
                ORDER BY created_at ASC, id ASC
                """
            ),
            {"sale_ids": sale_ids},
        ).mappings().all()

        for row in rows:
            items[row["sale_id"]].append(
                SaleItem(
                    id=row["id"],
                    product_name=row["product_name"],
                    quantity=int(row["qty"]),
                    unit_price=Decimal(str(row["unit_price"])),
                    unit_cost=Decimal(str(row["unit_cost"])),
                )
            )
        return items

    def _build_sales(self, rows: list[Any]) -> list[Sale]:
        items = self._items_by_sale([row["id"] for row in rows])
        return [
            Sale(
                id=row["id"],
                customer_name=row["customer_name"] or "",
                customer_phone=row["customer_phone"],
                total=Decimal(str(row["total"])),
                dtf_cost=Decimal(str(row["dtf_cost"] or 0)),
                status=SaleStatus(row["status"]),
                created_at=row["created_at"],
                items=items.get(row["id"], []),
            )
            for row in rows
        ]

    def list_sales(self, since: datetime | None = None, before: datetime | None = None) -> list[Sale]:
        conditions = []
        params: dict[str, Any] = {}
        if since is not None:
            conditions.append("s.created_at >= :since")
            params["since"] = since
        if before is not None:
            conditions.append("s.created_at < :before")
            params["before"] = before
        where = f"WHERE {' AND '.join(conditions)}" if conditions else ""

        rows = self.db.execute(
            text(f"SELECT {SALE_COLUMNS} FROM sales s {where} ORDER BY s.created_at DESC"),
            params,
        ).mappings().all()
        return self._build_sales(rows)

    def get_sale(self, sale_id: str) -> Sale:
        try:
            row = self.db.execute(
                text(f"SELECT {SALE_COLUMNS} FROM sales s WHERE s.id = CAST(:id AS uuid)"),
                {"id": sale_id},
            ).mappings().first()
        except DataError as exc:
            self.db.rollback()
            raise RecordNotFound(f"Sale not found: {sale_id}") from exc
        if not row:
            raise RecordNotFound(f"Sale not found: {sale_id}")
        return self._build_sales([row])[0]

    def create_sale(self, payload: CreateSaleRequest) -> Sale:
        items_subtotal = sum(
            (item.unit_price * Decimal(item.qty) for item in payload.items), Decimal("0")
        )
        total = payload.total if payload.total is not None else items_subtotal

        try:
            sale = self.db.execute(
                text(
                    """
                    INSERT INTO sales (customer_name, customer_phone, total, dtf_cost, status)
                    VALUES (:customer_name, :customer_phone, :total, :dtf_cost, CAST(:status AS sale_status))
                    RETURNING id::text AS id
                    """
                ),
                {
                    "customer_name": payload.customer_name,
                    "customer_phone": payload.customer_phone,
                    "total": total,
                    "dtf_cost": payload.dtf_cost,
                    "status": SaleStatus.PENDING.value,
                },
            ).mappings().first()

            for item in payload.items:
                self.db.execute(
                    text(
                        """
                        INSERT INTO sale_items (sale_id, product_name, qty, unit_price, unit_cost)
                        VALUES (CAST(:sale_id AS uuid), :product_name, :qty, :unit_price, :unit_cost)
                        """
                    ),
                    {
                        "sale_id": sale["id"],
                        "product_name": item.product_name,
                        "qty": item.qty,
                        "unit_price": item.unit_price,
                        "unit_cost": item.unit_cost,
                    },
                )

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Registered sale %s (%d items, total %s)", sale["id"], len(payload.items), total)
        return self.get_sale(sale["id"])

    def set_sale_status(self, sale_id: str, status: SaleStatus) -> Sale:
        try:
            updated = self.db.execute(
                text(
                    """
                    UPDATE sales
                    SET status = CAST(:status AS sale_status)
                    WHERE id = CAST(:id AS uuid)
                    RETURNING id::text AS id
                    """
                ),
                {"id": sale_id, "status": status.value},
            ).mappings().first()
            if not updated:
                raise RecordNotFound(f"Sale not found: {sale_id}")
            self.db.commit()
        except DataError as exc:
            self.db.rollback()
            raise RecordNotFound(f"Sale not found: {sale_id}") from exc
        except Exception:
            self.db.rollback()
            raise
        logger.info("Sale %s marked %s", sale_id, status.value)
        return self.get_sale(sale_id)

    def toggle_sale_status(self, sale_id: str) -> Sale:
        sale = self.get_sale(sale_id)
        return self.set_sale_status(sale_id, sale.status.toggled())

    def delete_sale(self, sale_id: str) -> None:
        try:
            self.db.execute(
                text("DELETE FROM sale_items WHERE sale_id = CAST(:id AS uuid)"),
                {"id": sale_id},
            )
            deleted = self.db.execute(
                text("DELETE FROM sales WHERE id = CAST(:id AS uuid) RETURNING id::text AS id"),
                {"id": sale_id},
            ).mappings().first()
            if not deleted:
                raise RecordNotFound(f"Sale not found: {sale_id}")
            self.db.commit()
        except DataError as exc:
            self.db.rollback()
            raise RecordNotFound(f"Sale not found: {sale_id}") from exc
        except Exception:
            self.db.rollback()
            raise
        logger.info("Deleted sale %s", sale_id)

    def list_expenses(self, on: date | None = None) -> list[Expense]:
        where = "WHERE expense_date = :on" if on is not None else ""
        rows = self.db.execute(
            text(
                f"""
                SELECT id::text AS id, description, amount, expense_date
                FROM expenses
                {where}
                ORDER BY created_at DESC
                """
            ),
            {"on": on} if on is not None else {},
        ).mappings().all()

        return [
            Expense(
                id=row["id"],
                description=row["description"],
                amount=Decimal(str(row["amount"])),
                expense_date=row["expense_date"],
            )
            for row in rows
        ]

    def create_expense(self, payload: ExpenseCreateRequest) -> Expense:
        try:
            row = self.db.execute(
                text(
                    """
                    INSERT INTO expenses (description, amount, expense_date)
                    VALUES (:description, :amount, :expense_date)
                    RETURNING id::text AS id, description, amount, expense_date
                    """
                ),
                {
                    "description": payload.description.strip(),
                    "amount": payload.amount,
                    "expense_date": payload.expense_date,
                },
            ).mappings().first()
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Registered expense %s on %s", row["id"], row["expense_date"])
        return Expense(
            id=row["id"],
            description=row["description"],
            amount=Decimal(str(row["amount"])),
            expense_date=row["expense_date"],
        )

    def delete_expense(self, expense_id: str) -> None:
        try:
            deleted = self.db.execute(
                text("DELETE FROM expenses WHERE id = CAST(:id AS uuid) RETURNING id::text AS id"),
                {"id": expense_id},
            ).mappings().first()
            if not deleted:
                raise RecordNotFound(f"Expense not found: {expense_id}")
            self.db.commit()
        except DataError as exc:
            self.db.rollback()
            raise RecordNotFound(f"Expense not found: {expense_id}") from exc
        except Exception:
            self.db.rollback()
            raise
        logger.info("Deleted expense %s", expense_id)
