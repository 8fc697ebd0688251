# pos/services/cart.py

"""
CART (IN-MEMORY, ONE PER POS SESSION)

Purpose:
- Hold the line items of the sale in progress.
- Enforce QuantityPolicy steps and stock ceilings on every mutation.

Rules:
- One line per product, insertion-ordered.
- A stored quantity is always > 0 and <= stock ceiling; zero means "absent".
- unit_price / cost_price are snapshots taken at first add. A later catalog
  price change never touches an existing line.
- Mutations never raise: they return an Outcome. Declined requests leave
  the cart exactly as it was.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Iterator

from pos.services import exceptions, quantity_policy
from pos.services.exceptions import Outcome
from pos.services.money import ZERO, to_decimal
from pos.services.records import ProductSnapshot


@dataclass(frozen=True)
class LineItem:
    product_id: str
    name: str
    unit_price: Decimal
    quantity: Decimal
    stock_ceiling: Decimal
    unit_of_measure: str = quantity_policy.UNIT
    cost_price: Decimal = ZERO

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def is_weighed(self) -> bool:
        return self.unit_of_measure == quantity_policy.KG


class CartLines:
    """
    Restartable view over a cart's lines.
    Every iteration snapshots the lines current at that moment, so iterating
    while the cart changes never raises and never sees a half-applied edit.
    """

    def __init__(self, cart: "Cart"):
        self._cart = cart

    def __iter__(self) -> Iterator[LineItem]:
        return iter(list(self._cart._lines.values()))

    def __len__(self) -> int:
        return len(self._cart._lines)


class Cart:
    def __init__(self):
        self._lines: dict[str, LineItem] = {}

    # --------------------------------------------------
    # READ
    # --------------------------------------------------

    def lines(self) -> CartLines:
        return CartLines(self)

    def get(self, product_id) -> LineItem | None:
        return self._lines.get(str(product_id))

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self) -> int:
        return len(self._lines)

    def __contains__(self, product_id) -> bool:
        return str(product_id) in self._lines

    # --------------------------------------------------
    # MUTATIONS
    # --------------------------------------------------

    def add(self, product: ProductSnapshot, step=None) -> Outcome:
        """
        Add one step of `product`.
        Existing line: grow by exactly one step or decline (no partial increase).
        New line: insert one step if the ceiling allows it.
        """
        unit = quantity_policy.normalize_unit(product.unit_of_measure)
        increment = quantity_policy.round_quantity(step) if step is not None else quantity_policy.step(unit)
        if increment <= ZERO:
            increment = quantity_policy.step(unit)

        existing = self._lines.get(str(product.id))

        if existing is not None:
            requested = quantity_policy.round_quantity(existing.quantity + increment)
            if requested > existing.stock_ceiling:
                return Outcome.declined(
                    exceptions.STOCK_EXCEEDED,
                    f'You\'ve added all available stock for "{existing.name}".',
                    line=existing,
                )
            updated = replace(existing, quantity=requested)
            self._lines[existing.product_id] = updated
            return Outcome.success(line=updated)

        ceiling = quantity_policy.round_quantity(product.stock)
        if ceiling < increment:
            return Outcome.declined(
                exceptions.OUT_OF_STOCK,
                f'"{product.name}" is out of stock.',
            )

        line = LineItem(
            product_id=str(product.id),
            name=product.name,
            unit_price=to_decimal(product.price),
            quantity=increment,
            stock_ceiling=ceiling,
            unit_of_measure=unit,
            cost_price=to_decimal(product.cost_price),
        )
        self._lines[line.product_id] = line
        return Outcome.success(line=line)

    def set_quantity(self, product_id, new_quantity) -> Outcome:
        """
        Clamp to [0, ceiling]. Zero removes the line.
        adjusted=True tells the caller the request was out of range.
        """
        existing = self._lines.get(str(product_id))
        if existing is None:
            return Outcome.declined(exceptions.NOT_FOUND, "Item is not in the cart.")

        requested = quantity_policy.round_quantity(new_quantity)
        clamped = quantity_policy.clamp(requested, existing.stock_ceiling)
        adjusted = clamped != requested

        if clamped <= ZERO:
            del self._lines[existing.product_id]
            return Outcome.success(line=None, adjusted=adjusted)

        updated = replace(existing, quantity=clamped)
        self._lines[existing.product_id] = updated

        message = ""
        if requested > existing.stock_ceiling:
            message = (
                f'Quantity for "{existing.name}" cannot exceed available stock '
                f"of {existing.stock_ceiling.normalize():f}."
            )
        return Outcome.success(line=updated, adjusted=adjusted, message=message)

    def remove(self, product_id) -> Outcome:
        existing = self._lines.pop(str(product_id), None)
        if existing is None:
            return Outcome.declined(exceptions.NOT_FOUND, "Item is not in the cart.")
        return Outcome.success(line=None)

    def quantity_from_target_amount(self, product_id, target_amount) -> Outcome:
        """
        Weighed goods only: "give me 12.00 worth" -> quantity = amount / unit price.
        """
        existing = self._lines.get(str(product_id))
        if existing is None:
            return Outcome.declined(exceptions.NOT_FOUND, "Item is not in the cart.")

        if not existing.is_weighed:
            return Outcome.declined(
                exceptions.INVALID_UNIT,
                f'"{existing.name}" is not sold by weight.',
                line=existing,
            )

        amount = to_decimal(target_amount)
        if amount <= ZERO or existing.unit_price <= ZERO:
            return Outcome.declined(
                exceptions.INVALID_AMOUNT,
                "Amount and unit price must be greater than zero.",
                line=existing,
            )

        requested = quantity_policy.round_quantity(amount / existing.unit_price)
        clamped = quantity_policy.clamp(requested, existing.stock_ceiling)
        if clamped <= ZERO:
            return Outcome.declined(
                exceptions.RESULT_TOO_SMALL,
                "Amount is too small for a measurable quantity.",
                line=existing,
            )

        updated = replace(existing, quantity=clamped)
        self._lines[existing.product_id] = updated
        return Outcome.success(line=updated, adjusted=clamped != requested)

    def clear(self) -> None:
        self._lines.clear()

    def restore(self, lines: Iterable[LineItem]) -> None:
        """Replace the contents with previously snapshotted lines (recall)."""
        self._lines = {line.product_id: line for line in lines}
