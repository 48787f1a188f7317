"""
Typed exception hierarchy for the payroll kernel.

Every error carries a ``code`` class attribute (machine-readable, API-safe)
and keeps its context as attributes rather than only in the message, so
callers catch by type and read structured data:

    try:
        service.create_payroll_run(batch, lines)
    except BatchNotApprovedError as e:
        api_response(code=e.code, batch=e.batch_id, status=e.status)

Hierarchy
---------

    PayrollKernelError (base)
    |
    +-- InvalidDateError
    |
    +-- MasterDataError
    |   +-- MissingMasterDataError
    |
    +-- ConfigurationError
    |
    +-- PayrollRunError
        +-- PayrollRunAlreadyExistsError
        +-- PayrollRunNotFoundError
        +-- BatchNotApprovedError
        +-- EmptyTimesheetBatchError
        +-- InvalidRunTransitionError

Codes
-----

Category     | Code                        | When raised
-------------|-----------------------------|------------------------------------
Date         | INVALID_DATE                | Date input cannot be parsed
Master data  | MISSING_MASTER_DATA         | Position/contract/project not found
Config       | INVALID_CONFIGURATION       | Config file or value is invalid
Payroll run  | PAYROLL_RUN_ALREADY_EXISTS  | Run already generated for batch
             | PAYROLL_RUN_NOT_FOUND       | No run stored for batch
             | BATCH_NOT_APPROVED          | Batch is not HR_APPROVED
             | EMPTY_TIMESHEET_BATCH       | Batch has no timesheet lines
             | INVALID_RUN_TRANSITION      | Status action not allowed from state

Missing master data and missing sale rates during aggregation are NOT
raised to the caller: the aggregator catches ``MissingMasterDataError``,
skips the line and records a warning (see
``payroll_engines.aggregation.CalculationWarning``).
"""

from __future__ import annotations

from typing import Any


class PayrollKernelError(Exception):
    """
    Base exception for all payroll kernel errors.

    All subclasses define a ``code`` class attribute.
    """

    code: str = "PAYROLL_KERNEL_ERROR"


class InvalidDateError(PayrollKernelError):
    """A date input could not be parsed into a calendar date."""

    code: str = "INVALID_DATE"

    def __init__(self, value: Any, reason: str | None = None):
        self.value = repr(value)
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid date {value!r}{detail}")


# Master data


class MasterDataError(PayrollKernelError):
    """Base exception for master-data lookup errors."""

    code: str = "MASTER_DATA_ERROR"


class MissingMasterDataError(MasterDataError):
    """A referenced position, contract, project or assignment is missing."""

    code: str = "MISSING_MASTER_DATA"

    def __init__(self, entity_type: str, entity_id: str | None):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


# Configuration


class ConfigurationError(PayrollKernelError):
    """Payroll configuration is invalid."""

    code: str = "INVALID_CONFIGURATION"

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(message)


# Payroll runs


class PayrollRunError(PayrollKernelError):
    """Base exception for payroll-run lifecycle errors."""

    code: str = "PAYROLL_RUN_ERROR"


class PayrollRunAlreadyExistsError(PayrollRunError):
    """A payroll run has already been generated for this batch."""

    code: str = "PAYROLL_RUN_ALREADY_EXISTS"

    def __init__(self, batch_id: str):
        self.batch_id = batch_id
        super().__init__(f"Payroll run for batch {batch_id} already exists")


class PayrollRunNotFoundError(PayrollRunError):
    """No payroll run is stored for this batch."""

    code: str = "PAYROLL_RUN_NOT_FOUND"

    def __init__(self, batch_id: str):
        self.batch_id = batch_id
        super().__init__(f"Payroll run not found for batch {batch_id}")


class BatchNotApprovedError(PayrollRunError):
    """Timesheet batch has not been approved by HR."""

    code: str = "BATCH_NOT_APPROVED"

    def __init__(self, batch_id: str, status: str):
        self.batch_id = batch_id
        self.status = status
        super().__init__(
            f"Timesheet batch {batch_id} is not approved by HR (status={status})"
        )


class EmptyTimesheetBatchError(PayrollRunError):
    """Timesheet batch has no lines."""

    code: str = "EMPTY_TIMESHEET_BATCH"

    def __init__(self, batch_id: str):
        self.batch_id = batch_id
        super().__init__(f"No timesheet lines found for batch {batch_id}")


class InvalidRunTransitionError(PayrollRunError):
    """Requested status action is not allowed from the run's current status."""

    code: str = "INVALID_RUN_TRANSITION"

    def __init__(
        self,
        batch_id: str,
        current_status: str,
        action: str,
        allowed_actions: tuple[str, ...] = (),
    ):
        self.batch_id = batch_id
        self.current_status = current_status
        self.action = action
        self.allowed_actions = allowed_actions
        allowed = ", ".join(allowed_actions) or "none"
        super().__init__(
            f"Cannot '{action}' payroll run {batch_id} from status {current_status} "
            f"(allowed: {allowed})"
        )
