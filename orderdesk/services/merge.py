"""
Order placement with table-scoped merging.

A table keeps a single running ticket: while its order is active, later
placements for the same table (another QR scan, a waiter adding a round)
are folded into that order instead of opening a second ticket.
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.errors import EmptyOrderError
from orderdesk.models.core import Order, OrderStatus
from orderdesk.realtime.events import new_order_event, order_update_event
from orderdesk.realtime.notifier import notifier
from orderdesk.services.collaborators import resolve_table
from orderdesk.services.locks import vendor_locks
from orderdesk.services.numbering import next_order_number
from orderdesk.services.pricing import merge_lines, order_total, price_lines
from orderdesk.services.store import find_active_table_order, insert_order, save_order

logger = logging.getLogger(__name__)

NUMBER_ATTEMPTS = 3


async def place_order(
    db: AsyncSession,
    vendor_id: str,
    table_ref: Optional[str],
    items,
    customer_name: Optional[str] = None,
) -> Order:
    if not items:
        raise EmptyOrderError()

    async with vendor_locks.for_vendor(vendor_id):
        table = await resolve_table(db, vendor_id, table_ref) if table_ref else None
        lines = await price_lines(db, vendor_id, items, require_available=True)

        if table is not None:
            existing = await find_active_table_order(db, vendor_id, table.id)
            if existing is not None:
                merged = merge_lines(existing.items, lines)
                total = order_total(merged)
                existing.items = merged
                existing.total_amount = total
                if not existing.customer_name and customer_name:
                    existing.customer_name = customer_name
                order = await save_order(db, existing)
                logger.info(f"Merged {len(lines)} line(s) into order {order.id} (#{order.order_number}) on table {table.table_number}")
                event = order_update_event(order)
            else:
                order = await _create_order(db, vendor_id, table.id, lines, customer_name)
                event = new_order_event(order)
        else:
            order = await _create_order(db, vendor_id, None, lines, customer_name)
            event = new_order_event(order)

    await notifier.broadcast(vendor_id, event)
    return order


async def _create_order(db: AsyncSession, vendor_id: str, table_id, lines: list[dict], customer_name) -> Order:
    total = order_total(lines)
    attempts = 0
    while True:
        number = await next_order_number(db, vendor_id)
        order = Order(
            vendor_id=vendor_id,
            table_id=table_id,
            order_number=number,
            status=OrderStatus.NEW,
            items=lines,
            total_amount=total,
            customer_name=customer_name,
            archived=False,
        )
        try:
            order = await insert_order(db, order)
        except IntegrityError:
            # the unique (vendor, number) constraint caught a writer outside this process
            await db.rollback()
            attempts += 1
            if attempts >= NUMBER_ATTEMPTS:
                raise
            logger.warning(f"Order number {number} for vendor {vendor_id} taken; retrying")
            continue
        logger.info(f"Created order {order.id} (#{order.order_number}) for vendor {vendor_id}")
        return order
