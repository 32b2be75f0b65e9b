from orderdesk.models.core import Order
from orderdesk.schemas.orders import OrderOut

NEW_ORDER = "NEW_ORDER"
ORDER_UPDATE = "ORDER_UPDATE"
ORDER_ARCHIVED = "ORDER_ARCHIVED"


def _order_payload(order: Order) -> dict:
    return OrderOut.model_validate(order).model_dump(mode="json", by_alias=True)


def new_order_event(order: Order) -> dict:
    return {"type": NEW_ORDER, "order": _order_payload(order)}


def order_update_event(order: Order) -> dict:
    return {"type": ORDER_UPDATE, "order": _order_payload(order)}


def order_archived_event(order_id: str) -> dict:
    return {"type": ORDER_ARCHIVED, "orderId": order_id}
