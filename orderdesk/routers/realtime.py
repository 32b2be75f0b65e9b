import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from orderdesk import db as database
from orderdesk.realtime.notifier import notifier
from orderdesk.services.collaborators import channel_vendor_id

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def order_events(websocket: WebSocket, vendorId: str | None = Query(None)):
    """
    Push channel for order events of one vendor.

    Connect with ``/ws?vendorId=<id>``. Waiter and kitchen accounts are mapped
    onto their owning vendor's channel. The server only pushes; anything the
    client sends is read and ignored so disconnects are noticed.
    """
    if not vendorId:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="vendorId is required")
        return

    async with database.SessionLocal() as db:
        channel = await channel_vendor_id(db, vendorId)

    await websocket.accept()
    handle = notifier.subscribe(channel, websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected from vendor {channel}")
    finally:
        notifier.unsubscribe(handle)
