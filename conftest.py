# conftest.py
import asyncio
import json
import os
import tempfile

# point the app at a throwaway database before orderdesk reads its settings
_TMP = tempfile.mkdtemp(prefix="orderdesk-test-")
os.environ["DB_URL"] = f"sqlite+aiosqlite:///{_TMP}/test.db"
os.environ["RECOVER_ARCHIVAL_ON_STARTUP"] = "false"
os.environ.setdefault("LOG_LEVEL", "WARNING")

from decimal import Decimal
from types import SimpleNamespace

import httpx
import pytest
import pytest_asyncio

from orderdesk.config import settings
from orderdesk.db import SessionLocal, drop_models, init_models
from orderdesk.main import app
from orderdesk.models.core import DiningTable, MenuItem, Vendor, VendorRole
from orderdesk.realtime.notifier import notifier
from orderdesk.services.archival import archival_scheduler
from orderdesk.services.locks import vendor_locks


class FakeWebSocket:
    """Records what the notifier pushes; ``fail=True`` simulates a dead socket, ``stall=True`` one that never drains."""

    def __init__(self, fail=False, stall=False):
        self.sent = []
        self.fail = fail
        self.stall = stall
        self.closed = False

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("socket closed")
        if self.stall:
            await asyncio.sleep(30)
        self.sent.append(json.loads(text))

    async def close(self):
        self.closed = True

    def types(self):
        return [m["type"] for m in self.sent]


@pytest_asyncio.fixture(autouse=True)
async def fresh_database():
    await drop_models()
    await init_models()
    vendor_locks.reset()
    notifier.active_connections.clear()
    yield
    await archival_scheduler.shutdown()
    notifier.active_connections.clear()


@pytest_asyncio.fixture
async def db():
    async with SessionLocal() as s:
        yield s


@pytest.fixture
def short_archive_delay(monkeypatch):
    monkeypatch.setattr(settings, "ARCHIVE_DELAY_SECONDS", 0.2)
    return 0.2


async def seed_restaurant():
    """Vendor V with Tea 2.00 / Coffee 3.50, tables T1 and T2, a waiter, and a second vendor."""
    async with SessionLocal() as s:
        owner = Vendor(business_name="Chai Corner", role=VendorRole.OWNER)
        other = Vendor(business_name="Other Place", role=VendorRole.OWNER)
        s.add_all([owner, other])
        await s.flush()

        waiter = Vendor(business_name="Chai Corner floor", role=VendorRole.WAITER, parent_vendor_id=owner.id)
        tea = MenuItem(vendor_id=owner.id, name="Tea", price=Decimal("2.00"), category="beverages")
        coffee = MenuItem(vendor_id=owner.id, name="Coffee", price=Decimal("3.50"), category="beverages")
        sold_out = MenuItem(vendor_id=owner.id, name="Samosa", price=Decimal("1.25"), is_available=False)
        foreign = MenuItem(vendor_id=other.id, name="Burger", price=Decimal("9.99"))
        t1 = DiningTable(vendor_id=owner.id, table_number="T1")
        t2 = DiningTable(vendor_id=owner.id, table_number="T2")
        other_table = DiningTable(vendor_id=other.id, table_number="T1")
        s.add_all([waiter, tea, coffee, sold_out, foreign, t1, t2, other_table])
        await s.commit()

        return SimpleNamespace(
            vendor_id=owner.id,
            other_vendor_id=other.id,
            waiter_id=waiter.id,
            tea_id=tea.id,
            coffee_id=coffee.id,
            sold_out_id=sold_out.id,
            foreign_item_id=foreign.id,
            t1_id=t1.id,
            t2_id=t2.id,
            other_table_id=other_table.id,
        )


@pytest_asyncio.fixture
async def seeded():
    return await seed_restaurant()


@pytest_asyncio.fixture
async def client():
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test", timeout=10) as c:
        yield c


def line(menu_item_id, quantity=1):
    from orderdesk.schemas.orders import OrderItemIn
    return OrderItemIn(menu_item_id=menu_item_id, quantity=quantity)
