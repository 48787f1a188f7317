"""
Payroll ORM Persistence Models (``payroll_modules.payroll.orm``).

Responsibility:
    SQLAlchemy ORM models that persist the ``PayrollRun`` DTO defined in
    ``payroll_modules.payroll.models``.  Each ORM class provides
    ``to_dto()`` / ``from_dto()`` round-trip conversion.

Architecture position:
    **Modules layer** -- persistence companion to the pure DTO models.
    Inherits from ``TrackedBase`` (kernel DB base) which provides
    created_at, updated_at and created_by.

Invariants enforced:
    - All monetary fields use Decimal (maps to Numeric(38,9)) -- NEVER float.
    - Enum fields stored as String(50) containing the enum .value string.
    - One run per batch: the run primary key is the batch id.
    - Line items are stored once per side (``cost`` / ``sale``) and keep
      their order through ``ordinal``.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

from sqlalchemy import Date, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from payroll_kernel.db.base import TrackedBase

SIDE_COST = "cost"
SIDE_SALE = "sale"


def _aware(value: datetime | None) -> datetime | None:
    """SQLite drops tzinfo; stored timestamps are UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


# ---------------------------------------------------------------------------
# PayrollRunModel
# ---------------------------------------------------------------------------

class PayrollRunModel(TrackedBase):
    """
    ORM model for ``PayrollRun`` -- the aggregated payroll of one batch.

    Contract:
        ``id`` is the timesheet batch id.  Summary totals are stored
        alongside the line items so reports need not re-aggregate.
    """

    __tablename__ = "payroll_runs"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    cycle_start: Mapped[date] = mapped_column(Date, nullable=False)
    cycle_end: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    total_cost: Mapped[Decimal] = mapped_column(nullable=False)
    total_sale: Mapped[Decimal] = mapped_column(nullable=False)
    employee_count: Mapped[int] = mapped_column(nullable=False)
    processed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(nullable=True)

    line_items: Mapped[list["PayrollLineItemModel"]] = relationship(
        back_populates="run",
        cascade="all, delete-orphan",
        order_by="PayrollLineItemModel.ordinal",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_payroll_run_status", "status"),
    )

    def to_dto(self):
        from payroll_modules.payroll.models import (
            PayrollRun,
            PayrollRunStatus,
            RunSummary,
        )
        return PayrollRun(
            id=self.id,
            cycle_start=self.cycle_start,
            cycle_end=self.cycle_end,
            status=PayrollRunStatus(self.status),
            line_items=tuple(
                li.to_dto() for li in self.line_items if li.side == SIDE_COST
            ),
            sale_line_items=tuple(
                li.to_dto() for li in self.line_items if li.side == SIDE_SALE
            ),
            summary=RunSummary(
                total_cost=self.total_cost,
                total_sale=self.total_sale,
                employee_count=self.employee_count,
            ),
            created_at=_aware(self.created_at),
            processed_at=_aware(self.processed_at),
            paid_at=_aware(self.paid_at),
        )

    @classmethod
    def from_dto(cls, dto, created_by: str | None = None) -> "PayrollRunModel":
        items = [
            PayrollLineItemModel.from_dto(item, SIDE_COST, ordinal)
            for ordinal, item in enumerate(dto.line_items)
        ] + [
            PayrollLineItemModel.from_dto(item, SIDE_SALE, ordinal)
            for ordinal, item in enumerate(dto.sale_line_items)
        ]
        return cls(
            id=dto.id,
            cycle_start=dto.cycle_start,
            cycle_end=dto.cycle_end,
            status=dto.status.value if hasattr(dto.status, "value") else dto.status,
            total_cost=dto.summary.total_cost,
            total_sale=dto.summary.total_sale,
            employee_count=dto.summary.employee_count,
            created_at=dto.created_at,
            processed_at=dto.processed_at,
            paid_at=dto.paid_at,
            created_by=created_by,
            line_items=items,
        )

    def __repr__(self) -> str:
        return f"<PayrollRunModel {self.id} ({self.status})>"


# ---------------------------------------------------------------------------
# PayrollLineItemModel
# ---------------------------------------------------------------------------

class PayrollLineItemModel(TrackedBase):
    """
    ORM model for ``PayrollLineItem`` -- one employee's pay on one side.

    Guarantees:
        - ``side`` is ``cost`` or ``sale``.
        - ``(run_id, side, employee_id)`` is unique.
        - ``to_dto`` rebuilds ``total_pay`` from its parts.
    """

    __tablename__ = "payroll_line_items"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    run_id: Mapped[str] = mapped_column(
        String(100), ForeignKey("payroll_runs.id"), nullable=False,
    )
    side: Mapped[str] = mapped_column(String(10), nullable=False)
    ordinal: Mapped[int] = mapped_column(nullable=False)
    employee_id: Mapped[str] = mapped_column(String(100), nullable=False)
    normal_pay: Mapped[Decimal] = mapped_column(nullable=False)
    ot_pay: Mapped[Decimal] = mapped_column(nullable=False)
    total_pay: Mapped[Decimal] = mapped_column(nullable=False)

    run: Mapped["PayrollRunModel"] = relationship(back_populates="line_items")

    __table_args__ = (
        UniqueConstraint("run_id", "side", "employee_id", name="uq_payroll_line_item_side"),
        Index("idx_payroll_line_item_employee", "employee_id"),
    )

    def to_dto(self):
        from payroll_modules.payroll.models import PayrollLineItem
        return PayrollLineItem.of(self.employee_id, self.normal_pay, self.ot_pay)

    @classmethod
    def from_dto(cls, dto, side: str, ordinal: int) -> "PayrollLineItemModel":
        if side not in (SIDE_COST, SIDE_SALE):
            raise ValueError(f"side must be '{SIDE_COST}' or '{SIDE_SALE}', got {side!r}")
        return cls(
            side=side,
            ordinal=ordinal,
            employee_id=dto.employee_id,
            normal_pay=dto.normal_pay,
            ot_pay=dto.ot_pay,
            total_pay=dto.total_pay,
        )

    def __repr__(self) -> str:
        return f"<PayrollLineItemModel {self.run_id}/{self.side}/{self.employee_id}>"
