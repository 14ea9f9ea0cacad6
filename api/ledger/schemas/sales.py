from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class SaleStatus(str, Enum):
    PENDING = "pendiente"
    SHIPPED = "enviado"

    def toggled(self) -> "SaleStatus":
        return SaleStatus.SHIPPED if self is SaleStatus.PENDING else SaleStatus.PENDING


class SaleItem(BaseModel):
    id: str | None = None
    product_name: str = ""
    quantity: int = Field(gt=0)
    unit_price: Decimal = Field(default=Decimal("0"), ge=0)
    unit_cost: Decimal = Field(ge=0)

    model_config = ConfigDict(frozen=True)


class Sale(BaseModel):
    id: str | None = None
    customer_name: str = ""
    customer_phone: str | None = None
    total: Decimal = Field(ge=0)
    dtf_cost: Decimal = Field(default=Decimal("0"), ge=0)
    status: SaleStatus = SaleStatus.PENDING
    created_at: datetime | None = None
    items: tuple[SaleItem, ...] = ()

    model_config = ConfigDict(frozen=True)

    @field_validator("created_at", mode="wrap")
    @classmethod
    def unreadable_timestamp_is_missing(cls, value, handler):
        # Unparseable timestamps become None so the date filter can report them.
        try:
            return handler(value)
        except ValidationError:
            return None


class SaleItemInput(BaseModel):
    product_name: str = Field(min_length=1, max_length=250)
    qty: int = Field(gt=0)
    unit_price: Decimal = Field(ge=0)
    unit_cost: Decimal = Field(ge=0)


class CreateSaleRequest(BaseModel):
    customer_name: str = Field(min_length=1, max_length=250)
    customer_phone: str | None = None
    total: Decimal | None = Field(default=None, ge=0)
    dtf_cost: Decimal = Field(default=Decimal("0"), ge=0)
    items: list[SaleItemInput]


class LedgerItem(BaseModel):
    id: str | None
    product_name: str
    qty: int
    unit_price: float
    unit_cost: float


class LedgerRow(BaseModel):
    id: str | None
    customer_name: str
    customer_phone: str | None
    total: float
    dtf_cost: float
    status: SaleStatus
    created_at: datetime | None
    items: list[LedgerItem]
    items_subtotal: float
    discount: float
    cost_of_goods: float
    profit: float
