# Importing the module registers tables with Base for create_all()
from .core import (  # noqa: F401
    # Enums
    OrderStatus, VendorRole, SubscriptionTier, STATUS_SEQUENCE, ACTIVE_STATUSES,

    # Collaborator data
    Vendor, MenuItem, DiningTable,

    # Orders / billing
    Order, Bill,
)

__all__ = [
    # Enums
    "OrderStatus", "VendorRole", "SubscriptionTier", "STATUS_SEQUENCE", "ACTIVE_STATUSES",

    # Collaborator data
    "Vendor", "MenuItem", "DiningTable",

    # Orders / billing
    "Order", "Bill",
]
