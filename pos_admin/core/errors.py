# pos_admin/core/errors.py
# Error taxonomy shared by the services and rendered by the API


class PosError(Exception):
    """Base exception for all application errors."""

    code = "error"

    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv["message"] = self.message
        rv["error"] = self.code
        rv["status"] = "error"
        return rv


# ---------------- SALE VALIDATION ----------------

class UnknownProduct(PosError):
    code = "unknown_product"

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(
            f"Product with ID {product_id} not found",
            status_code=404,
            payload={"product_id": product_id},
        )


class InsufficientStock(PosError):
    code = "insufficient_stock"

    def __init__(self, product_id, requested, available, product_name=None):
        self.product_id = product_id
        self.requested = requested
        self.available = available

        label = product_name or f"product {product_id}"
        super().__init__(
            f"Insufficient stock for {label}: requested {requested}, available {available}",
            status_code=409,
            payload={
                "product_id": product_id,
                "requested": requested,
                "available": available,
            },
        )


class InvalidQuantity(PosError):
    code = "invalid_quantity"

    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(
            f"Quantity for product {product_id} must be greater than zero",
            status_code=400,
            payload={"product_id": product_id},
        )


class EmptyOrder(PosError):
    code = "empty_order"

    def __init__(self):
        super().__init__("Sale must contain items", status_code=400)


# ---------------- AUTH ----------------

class AuthError(PosError):
    code = "auth_error"

    def __init__(self, message="Invalid or expired token"):
        super().__init__(message, status_code=401)


class Forbidden(PosError):
    code = "forbidden"

    def __init__(self, message="Admin privileges required"):
        super().__init__(message, status_code=403)


# ---------------- CRUD ----------------

class InvalidRequest(PosError):
    code = "invalid_request"

    def __init__(self, message):
        super().__init__(message, status_code=400)


class NotFound(PosError):
    code = "not_found"

    def __init__(self, message="Resource not found"):
        super().__init__(message, status_code=404)


class Conflict(PosError):
    code = "conflict"

    def __init__(self, message):
        super().__init__(message, status_code=409)


# ---------------- STORAGE ----------------

class TransactionConflict(PosError):
    """A concurrent writer won the race; safe to retry."""

    code = "transaction_conflict"

    def __init__(self, message="Concurrent update detected, please retry"):
        super().__init__(message, status_code=409)


class StorageFailure(PosError):
    """Underlying datastore error. Never retried."""

    code = "storage_failure"

    def __init__(self, message="Internal server error"):
        super().__init__(message, status_code=500)
