# sales/services/gateway.py

"""
======================================================
PATH: sales/services/gateway.py
======================================================
IN-PROCESS SALE GATEWAY

Implements pos.services.gateway.SaleGateway over the Django services.

Error mapping (engine taxonomy):
- django ValidationError / IntegrityError -> ValidationError
- missing rows                            -> NotFound
- any other DatabaseError (outage)        -> NetworkError
"""

from __future__ import annotations

import functools
import logging

from asgiref.sync import sync_to_async
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, IntegrityError

from customers.models import Customer
from customers.services import customer_service
from pos.services import exceptions
from pos.services.records import CustomerSnapshot, ProductSnapshot, ReturnRecord, SaleRecord
from products.services.inventory import catalog_snapshot
from sales.models import Sale
from sales.services import payment_service, return_service, sale_service

logger = logging.getLogger(__name__)


def _message(exc: DjangoValidationError) -> str:
    return "; ".join(str(m) for m in exc.messages)


def _translate(fn):
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except exceptions.PosError:
            raise
        except DjangoValidationError as exc:
            raise exceptions.ValidationError(_message(exc)) from exc
        except IntegrityError as exc:
            raise exceptions.ValidationError(str(exc)) from exc
        except DatabaseError as exc:
            logger.warning("Database unavailable", extra={"operation": fn.__name__, "error": str(exc)})
            raise exceptions.NetworkError("Could not reach the sales database. Please try again.") from exc

    return wrapper


class DjangoSaleGateway:
    """
    `user` is recorded as cashier / processor on everything written.
    """

    def __init__(self, *, user=None):
        self.user = user

    # --------------------------------------------------
    # SYNC IMPLEMENTATIONS
    # --------------------------------------------------

    @_translate
    def _create_sale(self, draft: SaleRecord) -> SaleRecord:
        sale = sale_service.create_sale(draft=draft, user=self.user)
        return sale_service.sale_to_record(sale)

    @_translate
    def _fetch_sale(self, transaction_id) -> SaleRecord:
        try:
            sale = sale_service.get_sale_by_transaction_id(transaction_id)
        except Sale.DoesNotExist as exc:
            raise exceptions.NotFound(f"Sale {str(transaction_id or '').strip()} was not found.") from exc
        return sale_service.sale_to_record(sale)

    @_translate
    def _submit_return(self, draft: ReturnRecord) -> ReturnRecord:
        sale_return = return_service.submit_return(draft=draft, user=self.user)
        return return_service.return_to_record(sale_return)

    @_translate
    def _fetch_customer(self, customer_id) -> CustomerSnapshot:
        try:
            customer = Customer.objects.get(id=customer_id)
        except (Customer.DoesNotExist, ValueError, DjangoValidationError) as exc:
            raise exceptions.NotFound(f"Customer {customer_id} was not found.") from exc
        return customer_service.to_snapshot(customer)

    @_translate
    def _fetch_catalog(self) -> list[ProductSnapshot]:
        return catalog_snapshot()

    @_translate
    def _record_payment(self, transaction_id, amount, method) -> SaleRecord:
        sale = payment_service.record_payment(
            transaction_id=transaction_id,
            amount=amount,
            method=method,
            user=self.user,
        )
        return sale_service.sale_to_record(sale)

    # --------------------------------------------------
    # SaleGateway (ASYNC)
    # --------------------------------------------------

    async def create_sale(self, draft: SaleRecord) -> SaleRecord:
        return await sync_to_async(self._create_sale)(draft)

    async def fetch_sale_by_transaction_id(self, transaction_id: str) -> SaleRecord:
        return await sync_to_async(self._fetch_sale)(transaction_id)

    async def submit_return(self, draft: ReturnRecord) -> ReturnRecord:
        return await sync_to_async(self._submit_return)(draft)

    async def fetch_customer(self, customer_id: str) -> CustomerSnapshot:
        return await sync_to_async(self._fetch_customer)(customer_id)

    async def fetch_product_catalog(self) -> list[ProductSnapshot]:
        return await sync_to_async(self._fetch_catalog)()

    async def record_payment(self, transaction_id: str, amount, method: str) -> SaleRecord:
        return await sync_to_async(self._record_payment)(transaction_id, amount, method)
