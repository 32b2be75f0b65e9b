from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.models.core import Order


async def next_order_number(db: AsyncSession, vendor_id: str) -> int:
    """
    max(order_number) + 1 over every order of the vendor, archived ones included,
    so a number is never called out twice. Callers hold the vendor lock.
    """
    q = select(func.max(Order.order_number)).where(Order.vendor_id == vendor_id)
    current = (await db.execute(q)).scalar()
    return int(current or 0) + 1
