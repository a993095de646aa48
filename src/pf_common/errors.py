"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth/User
  2xxx: Account
  3xxx: Import
  4xxx: Conflict
  5xxx: Portfolio
  6xxx: Trade maintenance
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


# --- 1xxx: Auth/User ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1003, "Invalid or expired token", 401)


class AccountDisabledError(AppError):
    def __init__(self) -> None:
        super().__init__(1004, "User is disabled", 403)


# --- 2xxx: Account ---

class AccountNotFoundError(AppError):
    def __init__(self, account_id: int | str) -> None:
        super().__init__(2002, f"Account not found: {account_id}", 404)


class InvalidAccountIdError(AppError):
    def __init__(self, raw: str) -> None:
        super().__init__(2003, f"Invalid account ID: {raw}", 422)


# --- 3xxx: Import ---

class InvalidCsvError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3001, f"Invalid CSV file: {detail}", 422)


class ImportInProgressError(AppError):
    def __init__(self, account_id: int) -> None:
        super().__init__(
            3002, f"Another import is already running for account {account_id}", 409
        )


class RowValidationError(ValueError):
    """A single CSV row failed to parse. Collected per row, never sent to the handler."""


# --- 4xxx: Conflict ---

class ConflictNotFoundError(AppError):
    def __init__(self, conflict_id: int) -> None:
        super().__init__(4001, f"Conflict not found: {conflict_id}", 404)


class InvalidConflictActionError(AppError):
    def __init__(self, action: str) -> None:
        super().__init__(4002, f"Invalid conflict action: {action}", 422)


class ManualEditRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(4003, "Edited data required for manual edit", 422)


class ConflictAlreadyResolvedError(AppError):
    def __init__(self, conflict_id: int, status: str) -> None:
        super().__init__(
            4004, f"Conflict {conflict_id} is already closed (status={status})", 409
        )


class ConflictTargetMissingError(AppError):
    def __init__(self, conflict_id: int) -> None:
        super().__init__(
            4005,
            f"Conflict {conflict_id} target row no longer exists; delete the conflict instead",
            409,
        )


class InvalidManualEditError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4006, f"Invalid manual edit: {detail}", 422)


# --- 5xxx: Portfolio ---

class InvalidSplitRatioError(AppError):
    def __init__(self, ratio: str) -> None:
        super().__init__(
            5001, f'Invalid ratio format: {ratio}. Use format like "1:5"', 422
        )


# --- 6xxx: Trade maintenance ---

class TradeNotFoundError(AppError):
    def __init__(self, trade_id: int) -> None:
        super().__init__(6001, f"Trade not found: {trade_id}", 404)


class EmptyTradeUpdateError(AppError):
    def __init__(self) -> None:
        super().__init__(6002, "No valid updates provided", 422)


class InvalidBulkUpdateError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(6003, f"Invalid bulk update: {detail}", 422)
