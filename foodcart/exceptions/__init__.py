"""Custom exceptions for the foodcart application."""

class FoodCartError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['status'] = 'error'
        return rv

class BusinessLogicError(FoodCartError):
    """Exception raised for business logic violations."""
    def __init__(self, message, status_code=400, payload=None):
        super().__init__(message, status_code, payload)

class ValidationError(BusinessLogicError):
    """Raised when caller input cannot be used as given."""

class EmptyCartError(ValidationError):
    """Raised when an order is built from an absent or empty cart."""
    def __init__(self, message="Cart is empty"):
        super().__init__(message)

class InvalidQuantityError(ValidationError):
    """Raised when a non-positive quantity is added to the cart."""
    def __init__(self, quantity):
        super().__init__(f"Quantity must be greater than 0 (got {quantity})")
        self.quantity = quantity

class SelectionIncompleteError(ValidationError):
    """Raised by callers when a variant selection does not satisfy its groups."""
    def __init__(self, item_name, group_names):
        message = f'Selection for "{item_name}" is incomplete: {", ".join(group_names)}'
        super().__init__(message, payload={'incomplete_groups': list(group_names)})

class MinimumOrderNotMetError(BusinessLogicError):
    """Raised when checkout is attempted below the restaurant minimum."""
    def __init__(self, subtotal, minimum_order):
        from foodcart.utils.formatters import money_eur
        message = (
            f"Minimum order of {money_eur(minimum_order)} not reached "
            f"(subtotal {money_eur(subtotal)})"
        )
        super().__init__(message, payload={'missing': minimum_order - subtotal})

class NotFoundError(FoodCartError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, payload)

class PersistenceReadError(FoodCartError):
    """Raised when a persisted cart blob cannot be decoded."""
    def __init__(self, message="Persisted cart could not be decoded"):
        super().__init__(message)
