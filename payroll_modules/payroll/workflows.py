"""Payroll Workflows.

State machine for payroll run status.  The calculator never changes a
run's status; the external workflow advances it through the run service.
"""

from payroll_kernel.domain.workflow import Guard, Transition, Workflow
from payroll_kernel.logging_config import get_logger
from payroll_modules.payroll.models import PayrollRunStatus, TimesheetBatchStatus

logger = get_logger("modules.payroll.workflows")


# -----------------------------------------------------------------------------
# Guards
# -----------------------------------------------------------------------------

BATCH_HR_APPROVED = Guard(
    name="batch_hr_approved",
    description="Timesheet batch has been approved by HR",
)

PAYMENT_RECONCILED = Guard(
    name="payment_reconciled",
    description="Employee payments have been released by finance",
)


# -----------------------------------------------------------------------------
# Payroll Run Workflow
# -----------------------------------------------------------------------------

PROCESS = "process"
PAY = "pay"

PAYROLL_RUN_WORKFLOW = Workflow(
    name="payroll_run",
    description="Payroll run lifecycle",
    initial_state=PayrollRunStatus.PENDING.value,
    states=(
        PayrollRunStatus.PENDING.value,
        PayrollRunStatus.PROCESSED.value,
        PayrollRunStatus.PAID.value,
    ),
    transitions=(
        Transition(
            PayrollRunStatus.PENDING.value,
            PayrollRunStatus.PROCESSED.value,
            action=PROCESS,
        ),
        Transition(
            PayrollRunStatus.PROCESSED.value,
            PayrollRunStatus.PAID.value,
            action=PAY,
            guard=PAYMENT_RECONCILED,
        ),
    ),
    terminal_states=(PayrollRunStatus.PAID.value,),
)

# Batch statuses from which a payroll run may be generated.
RUN_ELIGIBLE_BATCH_STATUSES = frozenset({TimesheetBatchStatus.HR_APPROVED})

logger.info(
    "payroll_run_workflow_registered",
    extra={
        "workflow_name": PAYROLL_RUN_WORKFLOW.name,
        "state_count": len(PAYROLL_RUN_WORKFLOW.states),
        "transition_count": len(PAYROLL_RUN_WORKFLOW.transitions),
        "initial_state": PAYROLL_RUN_WORKFLOW.initial_state,
    },
)
