# customers/services/customer_service.py

"""
CUSTOMER BALANCE SERVICES

Purpose:
- Read-only snapshot for the POS engine (fetch_customer).
- Store credit: spend at sale, grant on store-credit refunds.
- Account balance: grow on invoice sales, shrink on invoice payments.

Rules:
- Rows are locked before any balance change.
- Amounts are quantized to 2dp.
- Store credit can never be overspent.
- Account balance is floored at 0 (overpayment is not carried as credit).
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction

from customers.models import Customer
from pos.services.money import ZERO, money
from pos.services.records import CustomerSnapshot


def _lock(customer) -> Customer:
    customer_id = getattr(customer, "id", customer)
    try:
        return Customer.objects.select_for_update().get(id=customer_id)
    except (Customer.DoesNotExist, ValueError, ValidationError) as exc:
        raise ValidationError(f"Customer {customer_id} does not exist") from exc


def to_snapshot(customer: Customer) -> CustomerSnapshot:
    return CustomerSnapshot(
        id=str(customer.id),
        name=customer.name,
        store_credit=Decimal(customer.store_credit),
        account_balance=Decimal(customer.account_balance),
    )


@transaction.atomic
def spend_store_credit(*, customer, amount) -> Customer:
    amt = money(amount)
    locked = _lock(customer)
    if amt <= ZERO:
        return locked

    if amt > locked.store_credit:
        raise ValidationError(
            f"Store credit used ({amt}) exceeds the customer's available credit ({locked.store_credit})."
        )

    locked.store_credit = locked.store_credit - amt
    locked.save(update_fields=["store_credit", "updated_at"])
    return locked


@transaction.atomic
def grant_store_credit(*, customer, amount) -> Customer:
    amt = money(amount)
    locked = _lock(customer)
    if amt <= ZERO:
        return locked

    locked.store_credit = locked.store_credit + amt
    locked.save(update_fields=["store_credit", "updated_at"])
    return locked


@transaction.atomic
def charge_account(*, customer, amount) -> Customer:
    amt = money(amount)
    locked = _lock(customer)
    if amt <= ZERO:
        return locked

    locked.account_balance = locked.account_balance + amt
    locked.save(update_fields=["account_balance", "updated_at"])
    return locked


@transaction.atomic
def settle_account(*, customer, amount) -> Customer:
    amt = money(amount)
    locked = _lock(customer)
    if amt <= ZERO:
        return locked

    locked.account_balance = max(ZERO, locked.account_balance - amt)
    locked.save(update_fields=["account_balance", "updated_at"])
    return locked
