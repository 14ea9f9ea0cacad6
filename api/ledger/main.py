import logging
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Literal

from fastapi import Depends, FastAPI, HTTPException, Query, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ledger.core.config import settings
from ledger.core.logging_config import configure_logging
from ledger.repositories.records import LedgerRepository, RecordNotFound
from ledger.schemas.expenses import ExpenseCreateRequest, ExpenseOut
from ledger.schemas.sales import CreateSaleRequest, LedgerRow
from ledger.schemas.summary import CashSummary, DashboardSummary
from ledger.services.deps import get_business_tz, get_repository, get_today
from ledger.services.scopes import DateScope
from ledger.services.views import daily_cash, dashboard, expense_out, ledger_row, ledger_rows

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="DTF Ledger API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def load_failed(exc: Exception) -> HTTPException:
    logger.error("Could not load records: %s", exc)
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Could not load records")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/cash/daily", response_model=CashSummary)
def cash_daily(
    day: date | None = Query(default=None),
    repo: LedgerRepository = Depends(get_repository),
    tz: tzinfo = Depends(get_business_tz),
    today: date = Depends(get_today),
):
    day = day or today
    try:
        sales = repo.list_sales(
            since=datetime.combine(day, time.min, tzinfo=tz),
            before=datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz),
        )
        expenses = repo.list_expenses(on=day)
    except SQLAlchemyError as exc:
        raise load_failed(exc)

    return daily_cash(sales, expenses, day, settings.currency_symbol, tz)


@app.get("/dashboard/summary", response_model=DashboardSummary)
def dashboard_summary(
    date_from: date | None = Query(default=None),
    date_to: date | None = Query(default=None),
    preset: Literal["today", "month", "all"] | None = Query(default=None),
    repo: LedgerRepository = Depends(get_repository),
    tz: tzinfo = Depends(get_business_tz),
    today: date = Depends(get_today),
):
    if preset == "today":
        scope = DateScope.today(today)
    elif preset == "month":
        scope = DateScope.month_to_date(today)
    elif preset == "all":
        scope = DateScope.unbounded()
    else:
        scope = DateScope.between(date_from, date_to)

    if scope.is_inverted:
        raise HTTPException(status_code=400, detail="date_from must not be after date_to")

    try:
        sales = repo.list_sales()
        expenses = repo.list_expenses()
    except SQLAlchemyError as exc:
        raise load_failed(exc)

    return dashboard(sales, expenses, scope, settings.currency_symbol, tz)


@app.get("/sales", response_model=list[LedgerRow])
def list_sales(repo: LedgerRepository = Depends(get_repository)):
    try:
        sales = repo.list_sales()
    except SQLAlchemyError as exc:
        raise load_failed(exc)
    return ledger_rows(sales)


@app.post("/sales", response_model=LedgerRow, status_code=status.HTTP_201_CREATED)
def create_sale(payload: CreateSaleRequest, repo: LedgerRepository = Depends(get_repository)):
    if not payload.items:
        raise HTTPException(status_code=400, detail="Sale has no items")

    try:
        sale = repo.create_sale(payload)
    except IntegrityError as exc:
        raise HTTPException(status_code=400, detail=f"Failed to register sale: {exc.orig}")
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to register sale: {exc}")
    return ledger_row(sale)


@app.post("/sales/{sale_id}/toggle-status", response_model=LedgerRow)
def toggle_sale_status(sale_id: str, repo: LedgerRepository = Depends(get_repository)):
    try:
        sale = repo.toggle_sale_status(sale_id)
    except RecordNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to update sale: {exc}")
    return ledger_row(sale)


@app.delete("/sales/{sale_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_sale(sale_id: str, repo: LedgerRepository = Depends(get_repository)):
    try:
        repo.delete_sale(sale_id)
    except RecordNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to delete sale: {exc}")


@app.get("/expenses", response_model=list[ExpenseOut])
def list_expenses(
    day: date | None = Query(default=None),
    repo: LedgerRepository = Depends(get_repository),
):
    try:
        expenses = repo.list_expenses(on=day)
    except SQLAlchemyError as exc:
        raise load_failed(exc)
    return [expense_out(expense) for expense in expenses]


@app.post("/expenses", response_model=ExpenseOut, status_code=status.HTTP_201_CREATED)
def create_expense(payload: ExpenseCreateRequest, repo: LedgerRepository = Depends(get_repository)):
    if not payload.description.strip() or payload.amount <= 0:
        raise HTTPException(status_code=400, detail="Provide a description and a positive amount")

    try:
        expense = repo.create_expense(payload)
    except IntegrityError as exc:
        raise HTTPException(status_code=400, detail=f"Failed to register expense: {exc.orig}")
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to register expense: {exc}")
    return expense_out(expense)


@app.delete("/expenses/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(expense_id: str, repo: LedgerRepository = Depends(get_repository)):
    try:
        repo.delete_expense(expense_id)
    except RecordNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=500, detail=f"Failed to delete expense: {exc}")
