# =========================================================
# SALE POSTER
#
# Validates requested lines against current stock, snapshots
# unit prices, then writes the sale, its line items and the
# stock decrements in one write transaction. All or nothing.
# =========================================================

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Tuple

from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError

from pos_admin.core.config import settings
from pos_admin.core.errors import (
    EmptyOrder,
    InsufficientStock,
    InvalidQuantity,
    PosError,
    StorageFailure,
    TransactionConflict,
    UnknownProduct,
)
from pos_admin.database import Datastore
from pos_admin.models.sale_items import SaleItem
from pos_admin.models.sales import Sale
from pos_admin.services.inventory import InventoryStore

logger = logging.getLogger("app")

CENT = Decimal("0.01")

# SQLSTATE codes a driver reports when a concurrent writer won
_RETRYABLE_SQLSTATES = {"40001", "40P01"}


@dataclass(frozen=True)
class SaleLine:
    product_id: int
    quantity: int


class SalePoster:

    def __init__(
        self,
        datastore: Datastore,
        inventory: InventoryStore | None = None,
        max_attempts: int | None = None,
        retry_delay: float | None = None,
    ):
        self.datastore = datastore
        self.inventory = inventory or InventoryStore(datastore)
        self.max_attempts = max(1, max_attempts or settings.SALE_POST_MAX_ATTEMPTS)
        self.retry_delay = settings.SALE_POST_RETRY_DELAY if retry_delay is None else retry_delay

    def post(
        self,
        principal_id: int | None,
        items: Iterable[Tuple[int, int]],
        payment_method: str = "cash",
    ) -> Sale:
        lines = [SaleLine(int(product_id), int(quantity)) for product_id, quantity in items]

        if not lines:
            raise EmptyOrder()

        for line in lines:
            if line.quantity <= 0:
                raise InvalidQuantity(line.product_id)

        attempt = 1
        while True:
            try:
                sale = self._post_once(principal_id, lines, payment_method)
            except TransactionConflict:
                if attempt >= self.max_attempts:
                    logger.warning(
                        f"Sale posting gave up after {attempt} conflicting attempts "
                        f"user={principal_id}"
                    )
                    raise
                logger.warning(f"Sale posting conflict, retrying attempt={attempt + 1} user={principal_id}")
                time.sleep(self.retry_delay * attempt)
                attempt += 1
                continue
            except PosError as e:
                logger.info(f"Sale rejected user={principal_id}: {e.message}")
                raise

            logger.info(
                f"Sale posted id={sale.id} user={principal_id} "
                f"lines={len(sale.items)} total={sale.total_amount} method={sale.payment_method}"
            )
            return sale

    def _post_once(self, principal_id, lines: List[SaleLine], payment_method: str) -> Sale:
        try:
            with self.datastore.transaction() as db:
                # 1. Validate line by line against the stock visible inside this
                #    transaction; the first failing line decides the error
                products = {}
                requested = OrderedDict()

                for line in lines:
                    product = products.get(line.product_id)
                    if product is None:
                        product = self.inventory.get(line.product_id, db=db)
                        if product is None:
                            raise UnknownProduct(line.product_id)
                        products[line.product_id] = product

                    running_total = requested.get(line.product_id, 0) + line.quantity
                    if product.stock < running_total:
                        raise InsufficientStock(line.product_id, running_total, product.stock, product.name)
                    requested[line.product_id] = running_total

                # 2. Snapshot prices and compute totals
                sale_items = []
                total_amount = Decimal("0.00")

                for line in lines:
                    product = products[line.product_id]
                    unit_price = Decimal(product.price).quantize(CENT)
                    line_total = (unit_price * line.quantity).quantize(CENT)
                    total_amount += line_total

                    sale_items.append(
                        SaleItem(
                            product=product,
                            quantity=line.quantity,
                            unit_price=unit_price,
                            total_price=line_total,
                        )
                    )

                # 3. Decrement stock, once per product, guarded against going negative
                for product_id, quantity in requested.items():
                    if not self.inventory.decrement_stock(db, product_id, quantity):
                        self._raise_lost_race(db, product_id, quantity)

                # 4. Record the sale and its line items
                sale = Sale(
                    total_amount=total_amount,
                    payment_method=payment_method,
                    user_id=principal_id,
                    items=sale_items,
                )
                db.add(sale)
                db.flush()
                db.refresh(sale, attribute_names=["created_at"])

            return sale

        except PosError:
            raise
        except OperationalError as e:
            if _is_lock_error(e):
                raise TransactionConflict() from e
            logger.exception("Storage failure while posting sale")
            raise StorageFailure() from e
        except DBAPIError as e:
            if getattr(e.orig, "sqlstate", None) in _RETRYABLE_SQLSTATES:
                raise TransactionConflict() from e
            logger.exception("Storage failure while posting sale")
            raise StorageFailure() from e
        except SQLAlchemyError as e:
            logger.exception("Storage failure while posting sale")
            raise StorageFailure() from e

    def _raise_lost_race(self, db, product_id: int, quantity: int):
        db.expire_all()
        product = self.inventory.get(product_id, db=db)

        if product is None:
            raise UnknownProduct(product_id)

        if product.stock < quantity:
            raise InsufficientStock(product_id, quantity, product.stock, product.name)

        raise TransactionConflict()


def _is_lock_error(error: OperationalError) -> bool:
    message = str(error.orig).lower()
    if "database is locked" in message or "database table is locked" in message:
        return True
    return getattr(error.orig, "sqlstate", None) in _RETRYABLE_SQLSTATES
