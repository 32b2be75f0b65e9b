from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.db import get_db
from orderdesk.schemas.orders import BillOut
from orderdesk.services.billing import get_bill

router = APIRouter(prefix="/bills", tags=["bills"])


@router.get("/{order_id}", response_model=BillOut)
async def read_bill(order_id: str, db: AsyncSession = Depends(get_db)):
    # 404 also covers "order not completed yet"; clients poll until the bill exists
    bill = await get_bill(db, order_id)
    if not bill:
        raise HTTPException(404, detail="bill not generated")
    return bill
