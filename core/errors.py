"""
core/errors.py -- Typed error taxonomy shared by the business layer.

Services in auth/ and inventory/ raise these; they never raise HTTPException.
api/main.py owns the translation to HTTP status codes and the JSON error
envelope, so the business layer stays usable from the CLI and from tests
without a web framework in the loop.

Each subclass carries a machine-readable `code` and the HTTP `status_code`
the boundary should use. Both are class attributes -- instances only add the
human-readable message.

Layer rule: core/ is the kernel. No imports from api/, auth/, or inventory/.
"""


class InventoryError(Exception):
    """Base class for every recoverable, caller-facing failure."""

    code = "error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConflictError(InventoryError):
    """A uniqueness rule (username, email, SKU) would be violated."""

    code = "conflict"
    status_code = 409


class NotFoundError(InventoryError):
    """The referenced entity does not exist or has been soft-deleted."""

    code = "not_found"
    status_code = 404


class UnauthorizedError(InventoryError):
    """Bad credentials, or a token that is invalid, tampered, or expired.

    Messages are deliberately generic. Callers must not be able to tell a
    missing username from a wrong password, or an expired token from a forged one.
    """

    code = "unauthorized"
    status_code = 401


class InvalidError(InventoryError):
    """Input passed boundary validation but breaks a business rule."""

    code = "invalid"
    status_code = 400
