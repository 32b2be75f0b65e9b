"""
Delayed archival of completed orders.

A completed order leaves the active board a fixed delay after completion.
Timers are in-memory asyncio tasks keyed by order id, at most one per order;
``recover`` re-arms them at startup for completed orders a restart left behind.
"""

import asyncio
import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk import db as database
from orderdesk.config import settings
from orderdesk.models.core import OrderStatus
from orderdesk.realtime.events import order_archived_event
from orderdesk.realtime.notifier import notifier
from orderdesk.services.locks import vendor_locks
from orderdesk.services.store import get_order, list_unarchived_completed, save_order

logger = logging.getLogger(__name__)


class ArchivalScheduler:
    def __init__(self):
        self._timers: dict[str, asyncio.Task] = {}

    def arm(self, order_id: str, delay: float | None = None) -> asyncio.Task:
        """Schedule archival of an order, replacing any timer already pending for it."""
        if delay is None:
            delay = settings.ARCHIVE_DELAY_SECONDS
        self.cancel(order_id)
        task = asyncio.create_task(self._run(order_id, delay), name=f"archive-{order_id}")
        self._timers[order_id] = task
        logger.debug(f"Archival of order {order_id} armed in {delay:.1f}s")
        return task

    def cancel(self, order_id: str) -> bool:
        task = self._timers.pop(order_id, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def pending(self, order_id: str) -> asyncio.Task | None:
        task = self._timers.get(order_id)
        if task is None or task.done():
            return None
        return task

    def pending_count(self) -> int:
        return sum(1 for t in self._timers.values() if not t.done())

    async def _run(self, order_id: str, delay: float):
        try:
            await asyncio.sleep(delay)
            await self.archive_if_due(order_id)
        except asyncio.CancelledError:
            raise
        except Exception:
            # nobody waits on an archival outcome; the order stays completed
            logger.exception(f"Archival of order {order_id} failed")
        finally:
            if self._timers.get(order_id) is asyncio.current_task():
                del self._timers[order_id]

    async def archive_if_due(self, order_id: str) -> bool:
        """Archive the order if it is still completed and not yet archived."""
        async with database.SessionLocal() as db:
            order = await get_order(db, order_id)
            if order is None:
                logger.info(f"Archival skipped: order {order_id} no longer exists")
                return False

            vendor_id = order.vendor_id
            async with vendor_locks.for_vendor(vendor_id):
                order = await get_order(db, order_id, fresh=True)
                if order is None or order.archived or order.status != OrderStatus.COMPLETED:
                    logger.info(f"Archival skipped: order {order_id} is not an unarchived completed order")
                    return False
                order.archived = True
                await save_order(db, order)

        logger.info(f"Order {order_id} archived")
        await notifier.broadcast(vendor_id, order_archived_event(order_id))
        return True

    async def recover(self, db: AsyncSession) -> int:
        """Re-arm timers for completed orders that were never archived."""
        delay = settings.ARCHIVE_DELAY_SECONDS
        now = datetime.now(timezone.utc)
        orders = await list_unarchived_completed(db)
        for o in orders:
            remaining = 0.0
            if o.completed_at is not None:
                completed_at = o.completed_at
                if completed_at.tzinfo is None:
                    # SQLite hands timestamps back naive; they are stored in UTC
                    completed_at = completed_at.replace(tzinfo=timezone.utc)
                remaining = max(0.0, delay - (now - completed_at).total_seconds())
            self.arm(o.id, remaining)
        if orders:
            logger.info(f"Re-armed archival for {len(orders)} completed order(s)")
        return len(orders)

    async def shutdown(self):
        tasks = [t for t in self._timers.values() if not t.done()]
        self._timers.clear()
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)


archival_scheduler = ArchivalScheduler()
