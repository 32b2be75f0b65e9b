"""Read-only lookups of records owned by the menu, table and vendor modules."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.errors import InvalidTableError
from orderdesk.models.core import DiningTable, MenuItem, Vendor, VendorRole


async def get_table(db: AsyncSession, table_id: str) -> DiningTable | None:
    return await db.get(DiningTable, table_id)


async def get_table_by_number(db: AsyncSession, vendor_id: str, table_number: str) -> DiningTable | None:
    q = select(DiningTable).where(
        DiningTable.vendor_id == vendor_id,
        DiningTable.table_number == table_number,
    )
    return (await db.execute(q)).scalars().first()


async def get_menu_item(db: AsyncSession, menu_item_id: str) -> MenuItem | None:
    return await db.get(MenuItem, menu_item_id)


async def get_vendor(db: AsyncSession, vendor_id: str) -> Vendor | None:
    return await db.get(Vendor, vendor_id)


async def resolve_table(db: AsyncSession, vendor_id: str, table_ref: str) -> DiningTable:
    """
    Resolve a table reference to a table of ``vendor_id``.

    The reference is tried as a table id first, then as a printed table
    number within the vendor (QR codes encode the human-readable number).
    """
    table = await get_table(db, table_ref)
    if table is None:
        table = await get_table_by_number(db, vendor_id, table_ref)
    if table is None:
        raise InvalidTableError(f"table {table_ref!r} not found")
    if table.vendor_id != vendor_id:
        raise InvalidTableError(f"table {table_ref!r} belongs to a different vendor")
    if not table.is_active:
        raise InvalidTableError(f"table {table_ref!r} is disabled")
    return table


async def channel_vendor_id(db: AsyncSession, vendor_id: str) -> str:
    """Staff accounts (waiter, kitchen) share the owning vendor's event channel."""
    vendor = await get_vendor(db, vendor_id)
    if vendor and vendor.role != VendorRole.OWNER and vendor.parent_vendor_id:
        return vendor.parent_vendor_id
    return vendor_id
