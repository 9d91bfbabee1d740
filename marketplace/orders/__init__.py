from .conversion import get_order_from_bid

__all__ = ["get_order_from_bid"]
