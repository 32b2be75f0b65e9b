from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from orderdesk.db import get_db
from orderdesk.schemas.common import ErrorOut
from orderdesk.schemas.orders import OrderIn, OrderOut, StatusIn, ItemsIn
from orderdesk.services import lifecycle, merge, store

router = APIRouter(
    prefix="/orders",
    tags=["orders"],
    responses={400: {"model": ErrorOut}, 404: {"model": ErrorOut}},
)


@router.post("", response_model=OrderOut)
async def place_order(body: OrderIn, db: AsyncSession = Depends(get_db)):
    """
    Place an order, or add to the running order of the same table.

    ``tableId`` may be the table's id or its printed number. The response is
    the new order, or the existing one with the lines merged in.
    """
    return await merge.place_order(
        db,
        vendor_id=body.vendor_id,
        table_ref=body.table_id,
        items=body.items,
        customer_name=body.customer_name,
    )


@router.patch("/{order_id}/status", response_model=OrderOut)
async def set_status(order_id: str, body: StatusIn, db: AsyncSession = Depends(get_db)):
    return await lifecycle.set_status(db, order_id, body.status)


@router.patch("/{order_id}/items", response_model=OrderOut)
async def update_items(order_id: str, body: ItemsIn, db: AsyncSession = Depends(get_db)):
    return await lifecycle.update_items(db, order_id, body.items)


@router.get("/{vendor_id}", response_model=List[OrderOut])
async def list_orders(
    vendor_id: str,
    include_archived: bool = Query(False, alias="includeArchived"),
    db: AsyncSession = Depends(get_db),
):
    """Active board for a vendor, newest first. ``?includeArchived=true`` adds history."""
    return await store.list_orders(db, vendor_id, include_archived=include_archived)


@router.get("/{vendor_id}/archived", response_model=List[OrderOut])
async def list_archived_orders(vendor_id: str, db: AsyncSession = Depends(get_db)):
    return await store.list_orders(db, vendor_id, archived_only=True)
