import asyncio
from collections import defaultdict


class VendorLocks:
    """
    One asyncio.Lock per vendor.

    Every read-modify-write on a vendor's orders (number allocation, table
    merge, status change, item edit, archival) runs under this lock.
    """

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def for_vendor(self, vendor_id: str) -> asyncio.Lock:
        return self._locks[vendor_id]

    def reset(self):
        self._locks.clear()


vendor_locks = VendorLocks()
