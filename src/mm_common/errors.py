"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Actor identity / role
  2xxx: Input validation
  3xxx: Meal ledger
  4xxx: Ledger entries / lookups
  5xxx: Cycle lifecycle
  9xxx: System
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


# --- 1xxx: Actor ---

class UnauthenticatedError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "No authenticated actor", 401)


class UnauthorizedError(AppError):
    def __init__(self, action: str, requirement: str = "Manager role") -> None:
        super().__init__(1002, f"{requirement} required to {action}", 403)


# --- 2xxx: Input ---

class InvalidInputError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2001, f"Invalid input: {detail}", 422)


# --- 3xxx: Meals ---

class MealLockedError(AppError):
    def __init__(self, slot: str, meal_date: str) -> None:
        super().__init__(
            3001,
            f"{slot.capitalize()} for {meal_date} is locked. The cutoff time has passed.",
            423,
        )


# --- 4xxx: Entries ---

class NotFoundError(AppError):
    def __init__(self, entity: str, entity_id: str, code: int = 4004) -> None:
        super().__init__(code, f"{entity} not found: {entity_id}", 404)


class EntryNotPendingError(NotFoundError):
    """Approval target exists but is no longer awaiting a decision."""

    def __init__(self, kind: str, entry_id: str, status: str) -> None:
        super().__init__(f"Pending {kind}", entry_id, code=4005)
        self.message = f"{kind} {entry_id} is already {status}"
        self.args = (self.message,)


# --- 5xxx: Cycle ---

class CycleAlreadyClosedError(AppError):
    def __init__(self, cycle_id: str) -> None:
        super().__init__(5001, f"Cycle is already closed: {cycle_id}", 409)


class NoOpenCycleError(AppError):
    def __init__(self, mess_id: str) -> None:
        super().__init__(5002, f"No open cycle for mess {mess_id}", 409)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class TransactionFailureError(AppError):
    def __init__(self, operation: str) -> None:
        super().__init__(9003, f"Transaction failed, nothing was applied: {operation}", 500)
