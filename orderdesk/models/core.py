from sqlalchemy import (
    String, Boolean, Numeric, Enum, Text, DateTime, Integer, JSON, UniqueConstraint, Index
)
from sqlalchemy.orm import Mapped, mapped_column
from enum import Enum as PyEnum
from datetime import datetime
from decimal import Decimal
from orderdesk.db import Base
from orderdesk.models.common import IdMixin, TSMixin

# ── Enums ───────────────────────────────────────────────────────────────────
class OrderStatus(str, PyEnum):
    NEW = "new"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"

# pipeline order; a status may only advance to the next entry
STATUS_SEQUENCE = (
    OrderStatus.NEW,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.COMPLETED,
)
ACTIVE_STATUSES = (OrderStatus.NEW, OrderStatus.PREPARING, OrderStatus.READY)

class VendorRole(str, PyEnum):
    OWNER = "owner"
    WAITER = "waiter"    # table-service staff
    KITCHEN = "kitchen"

class SubscriptionTier(str, PyEnum):
    STARTER = "starter"
    PRO = "pro"
    ELITE = "elite"

# ── Collaborator data (managed outside the order core, read here) ───────────
class Vendor(Base, IdMixin, TSMixin):
    __tablename__ = "vendors"
    business_name: Mapped[str] = mapped_column(String(200))
    role: Mapped[VendorRole] = mapped_column(Enum(VendorRole, values_callable=lambda e: [m.value for m in e]), default=VendorRole.OWNER)
    parent_vendor_id: Mapped[str | None] = mapped_column(String(36))  # owning account for staff logins
    subscription_tier: Mapped[SubscriptionTier] = mapped_column(
        Enum(SubscriptionTier, values_callable=lambda e: [m.value for m in e]), default=SubscriptionTier.STARTER
    )

class MenuItem(Base, IdMixin, TSMixin):
    __tablename__ = "menu_items"
    vendor_id: Mapped[str] = mapped_column(String(36), index=True)
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str | None] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    category: Mapped[str] = mapped_column(String(60), default="mains")
    is_available: Mapped[bool] = mapped_column(Boolean, default=True)

class DiningTable(Base, IdMixin, TSMixin):
    __tablename__ = "dining_tables"
    __table_args__ = (UniqueConstraint("vendor_id", "table_number", name="uq_table_vendor_number"),)
    vendor_id: Mapped[str] = mapped_column(String(36), index=True)
    table_number: Mapped[str] = mapped_column(String(30))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

# ── Orders / Bills ──────────────────────────────────────────────────────────
class Order(Base, IdMixin, TSMixin):
    __tablename__ = "orders"
    __table_args__ = (
        UniqueConstraint("vendor_id", "order_number", name="uq_order_vendor_number"),
        Index("ix_order_vendor_table", "vendor_id", "table_id"),
    )
    vendor_id: Mapped[str] = mapped_column(String(36), index=True)
    table_id: Mapped[str | None] = mapped_column(String(36))  # null for street vendors / takeaway
    order_number: Mapped[int] = mapped_column(Integer)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, values_callable=lambda e: [m.value for m in e]), default=OrderStatus.NEW
    )
    # [{"menu_item_id", "name", "price": "2.00", "quantity"}], snapshot at time of adding
    items: Mapped[list[dict]] = mapped_column(JSON)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    customer_name: Mapped[str | None] = mapped_column(String(160))
    archived: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    @property
    def is_active(self) -> bool:
        return not self.archived and self.status in ACTIVE_STATUSES

class Bill(Base, IdMixin, TSMixin):
    __tablename__ = "bills"
    order_id: Mapped[str] = mapped_column(String(36), unique=True)
    vendor_id: Mapped[str] = mapped_column(String(36), index=True)
    order_number: Mapped[int] = mapped_column(Integer)
    table_number: Mapped[str | None] = mapped_column(String(30))  # copied, not a reference
    items: Mapped[list[dict]] = mapped_column(JSON)               # name / price / quantity only
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    customer_name: Mapped[str | None] = mapped_column(String(160))
