from datetime import datetime
from typing import Optional, List
from pydantic import Field, field_validator

from orderdesk.schemas.common import CamelModel, as_money

MAX_LINE_QUANTITY = 1000

class OrderItemIn(CamelModel):
    menu_item_id: str
    quantity: int = Field(ge=1, le=MAX_LINE_QUANTITY)
    # accepted for compatibility with older clients; the canonical menu price always wins
    name: Optional[str] = None
    price: Optional[str] = None

class OrderIn(CamelModel):
    vendor_id: str
    table_id: Optional[str] = None  # table id or printed table number (QR codes carry the number)
    items: List[OrderItemIn]
    customer_name: Optional[str] = None

class StatusIn(CamelModel):
    status: str

class ItemsIn(CamelModel):
    items: List[OrderItemIn]

class OrderItemOut(CamelModel):
    menu_item_id: str
    name: str
    price: str
    quantity: int

    @field_validator("price", mode="before")
    @classmethod
    def price_as_money(cls, v):
        return as_money(v)

class OrderOut(CamelModel):
    id: str
    vendor_id: str
    table_id: Optional[str] = None
    order_number: int
    status: str
    items: List[OrderItemOut]
    total_amount: str
    customer_name: Optional[str] = None
    archived: bool
    created_at: datetime
    completed_at: Optional[datetime] = None

    @field_validator("total_amount", mode="before")
    @classmethod
    def total_as_money(cls, v):
        return as_money(v)

    @field_validator("status", mode="before")
    @classmethod
    def status_value(cls, v):
        return getattr(v, "value", v)

class BillItemOut(CamelModel):
    name: str
    price: str
    quantity: int

    @field_validator("price", mode="before")
    @classmethod
    def price_as_money(cls, v):
        return as_money(v)

class BillOut(CamelModel):
    id: str
    order_id: str
    vendor_id: str
    order_number: int
    table_number: Optional[str] = None
    items: List[BillItemOut]
    total_amount: str
    customer_name: Optional[str] = None
    created_at: datetime

    @field_validator("total_amount", mode="before")
    @classmethod
    def total_as_money(cls, v):
        return as_money(v)
