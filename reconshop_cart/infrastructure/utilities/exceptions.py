"""
Custom exceptions for the ReconShop cart engine
"""


class ReconShopCartError(Exception):
    """Base exception for the cart engine"""

    def __init__(self, message: str, user_message: str = None, error_code: str = None):
        super().__init__(message)
        self.user_message = user_message or "An error occurred. Please try again."
        self.error_code = error_code or "GENERAL_ERROR"


class ValidationError(ReconShopCartError, ValueError):
    """Input validation errors raised at the action boundary"""

    def __init__(self, message: str, field: str = None):
        super().__init__(
            message, message, "VALIDATION_ERROR"  # Validation errors are user-friendly
        )
        self.field = field


class PersistenceError(ReconShopCartError):
    """Durable storage is unavailable, full or holds undecodable data"""

    def __init__(self, message: str, operation: str = None):
        super().__init__(
            message,
            "Your cart could not be saved on this device.",
            "PERSISTENCE_ERROR",
        )
        self.operation = operation


class BusinessLogicError(ReconShopCartError):
    """Business rule violations"""

    def __init__(self, message: str, user_message: str = None):
        super().__init__(message, user_message or message, "BUSINESS_ERROR")


class CartEmptyError(BusinessLogicError):
    """Cart is empty when operation requires items"""

    def __init__(self):
        super().__init__(
            "Cart is empty", "Your cart is empty. Please add some items first."
        )


def validate_and_raise(condition: bool, error_class: type, *args, **kwargs):
    """Helper function to validate condition and raise specific error"""
    if not condition:
        raise error_class(*args, **kwargs)
