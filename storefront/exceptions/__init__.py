"""Custom exceptions for the storefront application."""


class ShopError(Exception):
    """Base exception for all application errors."""
    def __init__(self, message="An internal error occurred", status_code=500, code='internal_error', payload=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['message'] = self.message
        rv['code'] = self.code
        rv['status'] = 'error'
        return rv


class ValidationError(ShopError):
    """Raised for bad create/update input (missing field, bad price, duplicate id)."""
    def __init__(self, message, code='invalid_input', payload=None):
        super().__init__(message, 400, code, payload)


class NotFoundError(ShopError):
    """Exception raised when a resource is not found."""
    def __init__(self, message="Resource not found", payload=None):
        super().__init__(message, 404, 'not_found', payload)


class CartIndexError(ShopError, IndexError):
    """Raised when a cart line index is out of range."""
    def __init__(self, index, size):
        message = f"Cart line {index} does not exist (cart has {size} lines)"
        super().__init__(message, 404, 'line_not_found', {'index': index})


class DocumentLoadError(ShopError):
    """Raised when the catalog or settings document cannot be loaded."""
    def __init__(self, message="Storefront documents unavailable"):
        super().__init__(message, 503, 'documents_unavailable')
