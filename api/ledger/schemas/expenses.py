from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Expense(BaseModel):
    id: str | None = None
    description: str = ""
    amount: Decimal = Field(ge=0)
    expense_date: date | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("expense_date", mode="before")
    @classmethod
    def unreadable_date_is_missing(cls, value):
        if isinstance(value, str):
            try:
                return date.fromisoformat(value[:10])
            except ValueError:
                return None
        return value


class ExpenseCreateRequest(BaseModel):
    description: str = Field(max_length=500)
    amount: Decimal
    expense_date: date


class ExpenseOut(BaseModel):
    id: str | None
    description: str
    amount: float
    expense_date: date | None
