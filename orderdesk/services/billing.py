import logging
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.models.core import Bill, Order, OrderStatus
from orderdesk.services.collaborators import get_table
from orderdesk.services.store import get_order
from orderdesk.util.money import money_str, to_money

logger = logging.getLogger(__name__)


async def get_bill_for_order(db: AsyncSession, order_id: str) -> Bill | None:
    q = select(Bill).where(Bill.order_id == order_id)
    return (await db.execute(q)).scalars().first()


async def generate_bill(db: AsyncSession, order: Order) -> Bill:
    """
    Snapshot a completed order into its bill. Write-once: when a bill already
    exists for the order it is returned untouched.
    """
    existing = await get_bill_for_order(db, order.id)
    if existing:
        return existing

    table_number = None
    if order.table_id:
        table = await get_table(db, order.table_id)
        table_number = table.table_number if table else None

    bill = Bill(
        order_id=order.id,
        vendor_id=order.vendor_id,
        order_number=order.order_number,
        table_number=table_number,
        items=[
            {"name": i["name"], "price": money_str(i["price"]), "quantity": int(i["quantity"])}
            for i in order.items
        ],
        total_amount=to_money(order.total_amount),
        customer_name=order.customer_name,
    )
    try:
        db.add(bill)
        await db.commit()
    except IntegrityError:
        # another request cut the bill first
        await db.rollback()
        existing = await get_bill_for_order(db, order.id)
        if existing is None:
            raise
        return existing

    await db.refresh(bill)
    logger.info(f"Bill {bill.id} generated for order {order.id} (#{order.order_number})")
    return bill


async def get_bill(db: AsyncSession, order_id: str) -> Bill | None:
    """
    Bill of an order, or None while it has not been generated yet.

    A completed order with no bill (generation failed on the completion path)
    gets its bill regenerated here.
    """
    bill = await get_bill_for_order(db, order_id)
    if bill:
        return bill

    order = await get_order(db, order_id)
    if order is not None and order.status == OrderStatus.COMPLETED:
        logger.warning(f"Order {order_id} completed without a bill; regenerating")
        return await generate_bill(db, order)
    return None
