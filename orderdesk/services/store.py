from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.errors import OrderNotFoundError
from orderdesk.models.core import Order, OrderStatus, ACTIVE_STATUSES


async def get_order(db: AsyncSession, order_id: str, *, fresh: bool = False) -> Order | None:
    # fresh=True bypasses the identity map so a value read before taking a lock is not reused
    return await db.get(Order, order_id, populate_existing=fresh)


async def require_order(db: AsyncSession, order_id: str, *, fresh: bool = False) -> Order:
    o = await get_order(db, order_id, fresh=fresh)
    if o is None:
        raise OrderNotFoundError()
    return o


async def list_orders(
    db: AsyncSession,
    vendor_id: str,
    *,
    include_archived: bool = False,
    archived_only: bool = False,
) -> list[Order]:
    """Orders of a vendor, newest first. Archived orders are history and hidden by default."""
    q = select(Order).where(Order.vendor_id == vendor_id)
    if archived_only:
        q = q.where(Order.archived.is_(True))
    elif not include_archived:
        q = q.where(Order.archived.is_(False))
    q = q.order_by(Order.created_at.desc(), Order.order_number.desc())
    return list((await db.execute(q)).scalars().all())


async def find_active_table_order(db: AsyncSession, vendor_id: str, table_id: str) -> Order | None:
    q = (
        select(Order)
        .where(
            Order.vendor_id == vendor_id,
            Order.table_id == table_id,
            Order.status.in_(ACTIVE_STATUSES),
            Order.archived.is_(False),
        )
        .order_by(Order.order_number.desc())
        .execution_options(populate_existing=True)
    )
    return (await db.execute(q)).scalars().first()


async def list_unarchived_completed(db: AsyncSession) -> list[Order]:
    q = select(Order).where(
        Order.status == OrderStatus.COMPLETED,
        Order.archived.is_(False),
    )
    return list((await db.execute(q)).scalars().all())


async def insert_order(db: AsyncSession, order: Order) -> Order:
    db.add(order)
    await db.commit()
    await db.refresh(order)
    return order


async def save_order(db: AsyncSession, order: Order) -> Order:
    await db.commit()
    await db.refresh(order)
    return order
