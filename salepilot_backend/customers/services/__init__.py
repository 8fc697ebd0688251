from .customer_service import (
    charge_account,
    grant_store_credit,
    settle_account,
    spend_store_credit,
    to_snapshot,
)

__all__ = [
    "charge_account",
    "grant_store_credit",
    "settle_account",
    "spend_store_credit",
    "to_snapshot",
]
