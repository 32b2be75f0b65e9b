"""
Status workflow and item editing for existing orders.

Statuses only move forward one step at a time
(new → preparing → ready → completed). Re-asserting the current status is
accepted as a no-op so retried requests succeed; reaching ``completed`` cuts
the bill and arms the archival timer.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.errors import (
    EmptyOrderError, InvalidStatusError, OrderArchivedError, OrderNotEditableError,
)
from orderdesk.models.core import Order, OrderStatus, STATUS_SEQUENCE
from orderdesk.realtime.events import order_update_event
from orderdesk.realtime.notifier import notifier
from orderdesk.services.archival import archival_scheduler
from orderdesk.services.billing import generate_bill
from orderdesk.services.locks import vendor_locks
from orderdesk.services.pricing import order_total, price_lines
from orderdesk.services.store import require_order, save_order

logger = logging.getLogger(__name__)


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidStatusError(f"Invalid status: {value!r}") from None


def check_transition(current: OrderStatus, target: OrderStatus):
    if target == current:
        return
    pos = STATUS_SEQUENCE.index(current)
    if pos + 1 < len(STATUS_SEQUENCE) and STATUS_SEQUENCE[pos + 1] == target:
        return
    raise InvalidStatusError(f"cannot move order from {current.value} to {target.value}")


async def set_status(db: AsyncSession, order_id: str, new_status) -> Order:
    target = parse_status(new_status)
    order = await require_order(db, order_id)
    vendor_id = order.vendor_id

    async with vendor_locks.for_vendor(vendor_id):
        order = await require_order(db, order_id, fresh=True)
        if order.archived:
            raise OrderArchivedError()
        check_transition(order.status, target)

        order.status = target
        if target == OrderStatus.COMPLETED and order.completed_at is None:
            order.completed_at = datetime.now(timezone.utc)
        order = await save_order(db, order)
        logger.info(f"Order {order.id} (#{order.order_number}) is now {target.value}")

        if target == OrderStatus.COMPLETED:
            await _complete(db, order)
            await db.refresh(order)

        event = order_update_event(order)

    await notifier.broadcast(vendor_id, event)
    return order


async def _complete(db: AsyncSession, order: Order):
    # rollback expires ``order``; keep the id loaded
    order_id = order.id
    try:
        await generate_bill(db, order)
    except Exception:
        # the status change is already committed; GET /bills regenerates a missing bill
        logger.exception(f"Bill generation failed for order {order_id}")
        await db.rollback()
    archival_scheduler.arm(order_id)


async def update_items(db: AsyncSession, order_id: str, items) -> Order:
    """Replace the order's lines, pricing each from the current menu."""
    if not items:
        raise EmptyOrderError()

    order = await require_order(db, order_id)
    vendor_id = order.vendor_id

    async with vendor_locks.for_vendor(vendor_id):
        order = await require_order(db, order_id, fresh=True)
        if order.archived:
            raise OrderArchivedError()
        if not order.is_active:
            raise OrderNotEditableError()

        lines = await price_lines(db, vendor_id, items)
        total = order_total(lines)
        order.items = lines
        order.total_amount = total
        order = await save_order(db, order)
        logger.info(f"Order {order.id} (#{order.order_number}) items replaced ({len(lines)} line(s))")
        event = order_update_event(order)

    await notifier.broadcast(vendor_id, event)
    return order
