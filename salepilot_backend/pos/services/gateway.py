# pos/services/gateway.py

"""
SALE GATEWAY (PERSISTENCE COLLABORATOR CONTRACT)

Every call is async: these are the engine's only suspension points.

Failure contract:
- create_sale / submit_return / record_payment raise NetworkError or ValidationError
- fetch_* raise NotFound for unknown ids
- messages are surfaced to the cashier verbatim
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, runtime_checkable

from pos.services.records import CustomerSnapshot, ProductSnapshot, ReturnRecord, SaleRecord


@runtime_checkable
class SaleGateway(Protocol):
    async def create_sale(self, draft: SaleRecord) -> SaleRecord:
        ...

    async def fetch_sale_by_transaction_id(self, transaction_id: str) -> SaleRecord:
        ...

    async def submit_return(self, draft: ReturnRecord) -> ReturnRecord:
        ...

    async def fetch_customer(self, customer_id: str) -> CustomerSnapshot:
        ...

    async def fetch_product_catalog(self) -> list[ProductSnapshot]:
        ...

    async def record_payment(self, transaction_id: str, amount: Decimal, method: str) -> SaleRecord:
        ...
