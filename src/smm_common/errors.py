"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Ledger/Account
  3xxx: Balance request
  4xxx: Catalog
  5xxx: Order
  9xxx: System

Every concrete error also derives from one kind class (NotFoundError,
InvalidStateError, ...) so callers can branch on the kind without
enumerating codes.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- Error kinds ---

class NotFoundError(AppError):
    """Referenced user/account/request/category/service/order is absent."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 404)


class InvalidStateError(AppError):
    """State-machine transition attempted from the wrong state."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class ConflictError(AppError):
    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 409)


class DomainValidationError(AppError):
    """Rejected before any mutation is attempted."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(code, message, 422)


# --- 1xxx: Auth/User ---

class EmailExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__(1001, "Email already exists")


class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1002, "Invalid email or password", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Account is disabled", 403)


class InvalidRefreshTokenError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "Refresh token is invalid or expired", 401)


class AdminRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(1005, "Administrator privileges required", 403)


class UserNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        super().__init__(1006, f"User not found: {user_id}")


class LastAdminError(InvalidStateError):
    def __init__(self) -> None:
        super().__init__(1007, "Cannot remove the last remaining administrator")


# --- 2xxx: Ledger/Account ---

class InsufficientBalanceError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            2001,
            f"Insufficient balance: required {required} cents, available {available} cents",
            422,
        )
        self.required = required
        self.available = available


class AccountNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2002, f"Account not found for user {user_id}")


class ProfileMissingError(AppError):
    """Authenticated identity with no ledger account; needs explicit provisioning."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            2003,
            f"No ledger account for user {user_id}; call POST /account/provision",
            409,
        )


class InvalidAdjustmentError(DomainValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(2004, f"Invalid balance adjustment: {detail}")


# --- 3xxx: Balance request ---

class BalanceRequestNotFoundError(NotFoundError):
    def __init__(self, request_id: int) -> None:
        super().__init__(3001, f"Balance request not found: {request_id}")


class BalanceRequestNotPendingError(InvalidStateError):
    def __init__(self, request_id: int, status: str) -> None:
        super().__init__(
            3002, f"Balance request {request_id} is {status}, expected PENDING"
        )


class InvalidBalanceRequestError(DomainValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(3003, f"Invalid balance request: {detail}")


# --- 4xxx: Catalog ---

class CategoryNotFoundError(NotFoundError):
    def __init__(self, category_id: str) -> None:
        super().__init__(4001, f"Category not found: {category_id}")


class ServiceNotFoundError(NotFoundError):
    def __init__(self, service_id: str) -> None:
        super().__init__(4002, f"Service not found: {service_id}")


class DuplicateCategoryNameError(ConflictError):
    def __init__(self, name: str) -> None:
        super().__init__(4003, f"Category name already exists: {name}")


class DuplicateServiceNameError(ConflictError):
    def __init__(self, name: str) -> None:
        super().__init__(4004, f"Service name already exists in category: {name}")


# --- 5xxx: Order ---

class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int) -> None:
        super().__init__(5001, f"Order not found: {order_id}")


class InvalidOrderTransitionError(InvalidStateError):
    def __init__(self, order_id: int, current: str, target: str) -> None:
        super().__init__(
            5002, f"Order {order_id} cannot move from {current} to {target}"
        )


class OrderTotalTooSmallError(DomainValidationError):
    def __init__(self, quantity: int) -> None:
        super().__init__(5003, f"Order total rounds to zero for quantity {quantity}")


# --- 9xxx: System ---

class RateLimitError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Rate limit exceeded", 429)


class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class OutcomeUnknownError(AppError):
    """A mutation exceeded its deadline. It may have committed; retry after checking state."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            9003,
            f"Outcome of {operation} is unknown (timed out); verify state before retrying",
            504,
        )


REQUEST_VALIDATION_CODE = 9004
