# pos/services/held_sales.py

"""
HELD SALE STACK

Hold / recall for suspending a cart while serving another customer.

Rules:
- hold() snapshots a NON-EMPTY cart; an empty cart is a no-op.
- recall() is refused while the active cart has lines, so unsaved work is
  never silently replaced.
- recall(index) removes that snapshot; the others keep their order.
"""

from __future__ import annotations

import logging

from pos.services.cart import Cart, LineItem
from pos.services.exceptions import ActiveSaleInProgress, NotFound

logger = logging.getLogger(__name__)

HeldSale = tuple[LineItem, ...]


class HeldSaleStack:
    def __init__(self):
        self._held: list[HeldSale] = []

    def __len__(self) -> int:
        return len(self._held)

    def __iter__(self):
        return iter(list(self._held))

    def peek(self, index: int) -> HeldSale:
        self._check_index(index)
        return self._held[index]

    def hold(self, cart: Cart) -> bool:
        if cart.is_empty:
            return False

        self._held.append(tuple(cart.lines()))
        logger.info("Sale put on hold", extra={"held_count": len(self._held)})
        return True

    def recall(self, index: int, *, active_cart: Cart) -> HeldSale:
        if not active_cart.is_empty:
            raise ActiveSaleInProgress(
                "Please hold or complete the current sale before recalling another."
            )

        self._check_index(index)
        snapshot = self._held.pop(index)
        logger.info("Held sale recalled", extra={"index": index, "lines": len(snapshot)})
        return snapshot

    def _check_index(self, index) -> None:
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(self._held):
            raise NotFound(f"No held sale at position {index}.")
