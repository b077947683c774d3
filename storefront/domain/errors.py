# storefront/domain/errors.py
from enum import Enum


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    UPSTREAM = "upstream"
    INVARIANT = "invariant"


class ErrorCode(str, Enum):
    """
    Closed set of business error kinds.
    The API layer switches on the code (and its category), never on message text.
    """

    INVALID_STATE = "invalid_state"
    INVALID_ZIP = "invalid_zip"
    INVALID_STREET_NUMBER = "invalid_street_number"
    INVALID_QUANTITY = "invalid_quantity"
    INVALID_AMOUNT = "invalid_amount"
    INVALID_PRICE = "invalid_price"
    INVALID_CUSTOMER = "invalid_customer"

    INSUFFICIENT_STOCK = "insufficient_stock"
    STOCK_EXCEEDED = "stock_exceeded"
    PRODUCT_NOT_FOUND = "product_not_found"
    CART_NOT_FOUND = "cart_not_found"
    ITEM_NOT_FOUND = "item_not_found"
    INVENTORY_NOT_FOUND = "inventory_not_found"
    ADDRESS_NOT_FOUND = "address_not_found"
    ORDER_NOT_FOUND = "order_not_found"
    ADDRESS_MISMATCH = "address_mismatch"
    ZIP_NOT_RESOLVABLE = "zip_not_resolvable"
    EMPTY_CART = "empty_cart"
    EMAIL_TAKEN = "email_taken"
    CUSTOMER_NOT_FOUND = "customer_not_found"

    UPSTREAM_UNAVAILABLE = "upstream_unavailable"

    INVARIANT_VIOLATION = "invariant_violation"

    @property
    def category(self) -> ErrorCategory:
        return _CATEGORIES[self]


_CATEGORIES = {
    ErrorCode.INVALID_STATE: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_ZIP: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_STREET_NUMBER: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_QUANTITY: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_AMOUNT: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_PRICE: ErrorCategory.VALIDATION,
    ErrorCode.INVALID_CUSTOMER: ErrorCategory.VALIDATION,
    ErrorCode.INSUFFICIENT_STOCK: ErrorCategory.CONFLICT,
    ErrorCode.STOCK_EXCEEDED: ErrorCategory.CONFLICT,
    ErrorCode.PRODUCT_NOT_FOUND: ErrorCategory.CONFLICT,
    ErrorCode.CART_NOT_FOUND: ErrorCategory.CONFLICT,
    ErrorCode.ITEM_NOT_FOUND: ErrorCategory.CONFLICT,
    ErrorCode.INVENTORY_NOT_FOUND: ErrorCategory.CONFLICT,
    ErrorCode.ADDRESS_NOT_FOUND: ErrorCategory.CONFLICT,
    ErrorCode.ORDER_NOT_FOUND: ErrorCategory.CONFLICT,
    ErrorCode.ADDRESS_MISMATCH: ErrorCategory.CONFLICT,
    ErrorCode.ZIP_NOT_RESOLVABLE: ErrorCategory.CONFLICT,
    ErrorCode.EMPTY_CART: ErrorCategory.CONFLICT,
    ErrorCode.EMAIL_TAKEN: ErrorCategory.CONFLICT,
    ErrorCode.CUSTOMER_NOT_FOUND: ErrorCategory.CONFLICT,
    ErrorCode.UPSTREAM_UNAVAILABLE: ErrorCategory.UPSTREAM,
    ErrorCode.INVARIANT_VIOLATION: ErrorCategory.INVARIANT,
}


class CommerceError(Exception):
    category: ErrorCategory

    def __init__(self, code: ErrorCode, message: str):
        if code.category is not self.category:
            raise TypeError(f"{code} is not a {self.category.value} error")
        super().__init__(message)
        self.code = code
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.code.value!r}, {self.message!r})"


class ValidationFailed(CommerceError):
    category = ErrorCategory.VALIDATION


class ConflictError(CommerceError):
    category = ErrorCategory.CONFLICT


class UpstreamUnavailable(CommerceError):
    """Retryable: an external collaborator (gateway, cache, database) failed or timed out."""

    category = ErrorCategory.UPSTREAM

    def __init__(self, message: str):
        super().__init__(ErrorCode.UPSTREAM_UNAVAILABLE, message)


class InvariantViolation(CommerceError):
    category = ErrorCategory.INVARIANT

    def __init__(self, message: str):
        super().__init__(ErrorCode.INVARIANT_VIOLATION, message)
