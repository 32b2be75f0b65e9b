from sqlalchemy.ext.asyncio import AsyncSession

from orderdesk.errors import EmptyOrderError, MenuItemNotFoundError, ValidationError
from orderdesk.services.collaborators import get_menu_item
from orderdesk.util.money import MAX_AMOUNT, items_total, money_str


async def price_lines(db: AsyncSession, vendor_id: str, items, *, require_available: bool = False) -> list[dict]:
    """
    Turn requested lines into order item snapshots priced from the current menu.

    ``items`` are objects with ``menu_item_id`` and ``quantity``. Lines naming
    the same menu item are coalesced, keeping first-seen order. Any price the
    caller sent is ignored.
    """
    if not items:
        raise EmptyOrderError()

    lines: dict[str, dict] = {}
    for it in items:
        if it.menu_item_id in lines:
            lines[it.menu_item_id]["quantity"] += int(it.quantity)
            continue

        mi = await get_menu_item(db, it.menu_item_id)
        if mi is None or mi.vendor_id != vendor_id:
            raise MenuItemNotFoundError(f"menu item {it.menu_item_id} not found")
        if require_available and not mi.is_available:
            raise ValidationError(f"{mi.name} is currently unavailable")

        lines[it.menu_item_id] = {
            "menu_item_id": mi.id,
            "name": mi.name,
            "price": money_str(mi.price),
            "quantity": int(it.quantity),
        }
    return list(lines.values())


def order_total(lines: list[dict]):
    total = items_total(lines)
    if total > MAX_AMOUNT:
        raise ValidationError(f"order total {total} exceeds {MAX_AMOUNT}")
    return total


def merge_lines(existing: list[dict], incoming: list[dict]) -> list[dict]:
    """Add incoming quantities onto matching lines, append the rest. Existing snapshots keep their price."""
    merged = [dict(line) for line in existing]
    index = {line["menu_item_id"]: line for line in merged}
    for line in incoming:
        current = index.get(line["menu_item_id"])
        if current is not None:
            current["quantity"] = int(current["quantity"]) + int(line["quantity"])
        else:
            new_line = dict(line)
            merged.append(new_line)
            index[new_line["menu_item_id"]] = new_line
    return merged
