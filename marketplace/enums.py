"""Protocol and domain enumerations."""

from __future__ import annotations

from enum import Enum


class MPAction(str, Enum):
    MPA_BID = "MPA_BID"
    MPA_ACCEPT = "MPA_ACCEPT"
    MPA_REJECT = "MPA_REJECT"
    MPA_CANCEL = "MPA_CANCEL"


class AddressType(str, Enum):
    SHIPPING_OWN = "SHIPPING_OWN"
    SHIPPING_BID = "SHIPPING_BID"
    SHIPPING_ORDER = "SHIPPING_ORDER"


class OrderItemStatus(str, Enum):
    AWAITING_ESCROW = "AWAITING_ESCROW"
    ESCROW_LOCKED = "ESCROW_LOCKED"
    SHIPPED = "SHIPPED"
    COMPLETE = "COMPLETE"


class SearchOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class HashableObjectType(str, Enum):
    BID_CREATEREQUEST = "BID_CREATEREQUEST"
    ORDER_CREATEREQUEST = "ORDER_CREATEREQUEST"
