"""
Report aggregation over expense, income and budget records.

Everything here is pure: callers fetch records from the store and hand them
in. Two windows are in play for budgets and they must not be mixed up:

* the *query* window decides which budgets take part (interval overlap);
* each budget's *own* window decides which expenses count against it.
"""

import re
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, TypeVar

from ..core.errors import InvalidDateRange
from ..models.budget import Budget
from ..models.common import Category, to_naive_utc, utcnow
from ..models.expense import Expense


EPOCH = datetime(1970, 1, 1)
END_OF_DAY = time(23, 59, 59, 999000)
DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
ZERO = Decimal("0")

R = TypeVar("R")


def intervals_overlap(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    """Closed intervals [a_start, a_end] and [b_start, b_end] share an instant."""
    return a_start <= b_end and b_start <= a_end


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return intervals_overlap(self.start, self.end, start, end)


def _parse_bound(raw: str, name: str) -> datetime:
    try:
        return datetime.fromisoformat(raw.strip())
    except ValueError:
        raise InvalidDateRange(f"Invalid {name} '{raw}'. Please use YYYY-MM-DD.")


def inclusive_end(value: Any) -> Any:
    """Push a date-only end bound (``YYYY-MM-DD`` or ``date``) to the end of its day.

    Values that carry a time of day are returned untouched.
    """
    if isinstance(value, str) and DATE_ONLY.match(value.strip()):
        return datetime.combine(date.fromisoformat(value.strip()), END_OF_DAY)
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, END_OF_DAY)
    return value


def parse_date_range(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    now: Optional[datetime] = None,
) -> DateRange:
    """Build an inclusive report window from optional ``YYYY-MM-DD`` strings.

    A missing start means the epoch and a missing end means ``now``. A supplied
    end is pushed to the last millisecond of its calendar day, taken as written
    before any offset is applied, so the whole day counts.
    """
    start = to_naive_utc(_parse_bound(start_date, "startDate")) if start_date else EPOCH
    if end_date:
        end = datetime.combine(_parse_bound(end_date, "endDate").date(), END_OF_DAY)
    else:
        end = now or utcnow()

    if start > end:
        raise InvalidDateRange("Start date cannot be after end date.")
    return DateRange(start=start, end=end)


# ─────────────────────────────
#   FLOW REPORTS (expenses / incomes)
# ─────────────────────────────

@dataclass
class FlowReport:
    period: DateRange
    label_filter: Optional[str]
    total: Decimal
    breakdown: Dict[str, Decimal]
    records: List = field(default_factory=list)


def build_flow_report(
    records: Iterable[R],
    period: DateRange,
    label_of: Callable[[R], str],
    date_of: Callable[[R], datetime],
    label_filter: Optional[str] = None,
) -> FlowReport:
    matched = [
        r for r in records
        if period.contains(date_of(r)) and (label_filter is None or label_of(r) == label_filter)
    ]
    matched.sort(key=date_of)

    breakdown: Dict[str, Decimal] = OrderedDict()
    for r in matched:
        label = label_of(r)
        breakdown[label] = breakdown.get(label, ZERO) + r.amount

    return FlowReport(
        period=period,
        label_filter=label_filter,
        total=sum((r.amount for r in matched), ZERO),
        breakdown=dict(breakdown),
        records=matched,
    )


# ─────────────────────────────
#   BUDGET ADHERENCE
# ─────────────────────────────

@dataclass
class BudgetLine:
    budget: Budget
    spent: Decimal

    @property
    def budgeted(self) -> Decimal:
        return self.budget.amount

    @property
    def remaining(self) -> Decimal:
        return self.budget.amount - self.spent

    @property
    def is_exceeded(self) -> bool:
        return self.spent > self.budget.amount


@dataclass
class BudgetReport:
    period: DateRange
    category_filter: Optional[str]
    lines: List[BudgetLine] = field(default_factory=list)

    @property
    def total_budgeted(self) -> Decimal:
        return sum((line.budgeted for line in self.lines), ZERO)

    @property
    def total_spent(self) -> Decimal:
        return sum((line.spent for line in self.lines), ZERO)

    @property
    def overall_remaining(self) -> Decimal:
        return self.total_budgeted - self.total_spent


def narrows_by_category(category: Optional[str]) -> bool:
    return bool(category) and category != Category.ALL.value


def spent_within_budget(budget: Budget, expenses: Iterable[Expense]) -> Decimal:
    own_window = DateRange(budget.start_date, budget.end_date)
    return sum(
        (
            e.amount for e in expenses
            if e.category == budget.category and own_window.contains(e.expense_date)
        ),
        ZERO,
    )


def build_budget_report(
    budgets: Iterable[Budget],
    expenses: Sequence[Expense],
    period: DateRange,
    category: Optional[str] = None,
) -> BudgetReport:
    narrow = narrows_by_category(category)

    selected = [
        b for b in budgets
        if period.overlaps(b.start_date, b.end_date) and (not narrow or b.category == category)
    ]
    selected.sort(key=lambda b: (b.category, b.start_date))

    report = BudgetReport(period=period, category_filter=category if narrow else None)
    if not selected:
        return report

    in_range = [
        e for e in expenses
        if period.contains(e.expense_date) and (not narrow or e.category == category)
    ]
    # Each budget is reconciled on its own. Two same-category budgets with
    # overlapping windows both count a shared expense, so total_spent can
    # exceed what was actually spent. Left as is pending a product decision.
    for budget in selected:
        report.lines.append(BudgetLine(budget=budget, spent=spent_within_budget(budget, in_range)))
    return report


# ─────────────────────────────
#   OVERVIEW
# ─────────────────────────────

SURPLUS = "Surplus"
DEFICIT = "Deficit"


@dataclass
class OverviewReport:
    period: DateRange
    total_income: Decimal
    total_expenses: Decimal

    @property
    def net_savings(self) -> Decimal:
        return self.total_income - self.total_expenses

    @property
    def status(self) -> str:
        return SURPLUS if self.net_savings >= 0 else DEFICIT


def build_overview_report(incomes: Iterable, expenses: Iterable, period: DateRange) -> OverviewReport:
    return OverviewReport(
        period=period,
        total_income=sum((i.amount for i in incomes if period.contains(i.income_date)), ZERO),
        total_expenses=sum((e.amount for e in expenses if period.contains(e.expense_date)), ZERO),
    )
