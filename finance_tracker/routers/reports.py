import uuid
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import SQLModel

from ..core.security import get_current_user
from ..models.user import User
from ..services.aggregation import BudgetReport, DateRange, parse_date_range
from ..services.reports import ReportService, get_report_service
from .expenses import ExpenseRead
from .incomes import IncomeRead


router = APIRouter(
    prefix="/reports",
    tags=["reports"],
)

ALL_FILTER = "All"


# ─────────────────────────────
#   SCHEMAS
# ─────────────────────────────

class Period(SQLModel):
    start_date: datetime
    end_date: datetime


class ExpenseReportOut(SQLModel):
    period: Period
    filter_category: str
    total_expenses: Decimal
    expenses_by_category: Dict[str, Decimal]
    detailed_expenses: List[ExpenseRead]


class IncomeReportOut(SQLModel):
    period: Period
    filter_source: str
    total_income: Decimal
    income_by_source: Dict[str, Decimal]
    detailed_incomes: List[IncomeRead]


class BudgetSummaryItem(SQLModel):
    id: uuid.UUID
    category: str
    budgeted_amount: Decimal
    spent_amount: Decimal
    remaining_amount: Decimal
    is_exceeded: bool
    budget_period: Period


class BudgetReportOut(SQLModel):
    period: Period
    filter_category: str
    total_budgeted: Decimal
    total_spent: Decimal
    overall_remaining: Decimal
    budgets_count: int
    budget_summary: List[BudgetSummaryItem]


class OverviewReportOut(SQLModel):
    period: Period
    total_income: Decimal
    total_expenses: Decimal
    net_savings: Decimal
    status: str


def to_period(period: DateRange) -> Period:
    return Period(start_date=period.start, end_date=period.end)


def to_budget_report_out(report: BudgetReport) -> BudgetReportOut:
    return BudgetReportOut(
        period=to_period(report.period),
        filter_category=report.category_filter or ALL_FILTER,
        total_budgeted=report.total_budgeted,
        total_spent=report.total_spent,
        overall_remaining=report.overall_remaining,
        budgets_count=len(report.lines),
        budget_summary=[
            BudgetSummaryItem(
                id=line.budget.id,
                category=line.budget.category,
                budgeted_amount=line.budgeted,
                spent_amount=line.spent,
                remaining_amount=line.remaining,
                is_exceeded=line.is_exceeded,
                budget_period=Period(
                    start_date=line.budget.start_date,
                    end_date=line.budget.end_date,
                ),
            )
            for line in report.lines
        ],
    )


# ─────────────────────────────
#   ENDPOINTS
# ─────────────────────────────

@router.get(
    "/expenses",
    response_model=ExpenseReportOut,
    status_code=status.HTTP_200_OK,
)
def expense_report(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    category: Optional[str] = Query(default=None),
    reports: ReportService = Depends(get_report_service),
    current_user: User = Depends(get_current_user),
):
    """Total, per-category totals and matching expenses (oldest first) for the period."""
    period = parse_date_range(start_date, end_date)
    report = reports.expense_report(current_user.id, period, category)
    return ExpenseReportOut(
        period=to_period(report.period),
        filter_category=report.label_filter or ALL_FILTER,
        total_expenses=report.total,
        expenses_by_category=report.breakdown,
        detailed_expenses=[ExpenseRead.model_validate(e, from_attributes=True) for e in report.records],
    )


@router.get(
    "/income",
    response_model=IncomeReportOut,
    status_code=status.HTTP_200_OK,
)
def income_report(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    source: Optional[str] = Query(default=None),
    reports: ReportService = Depends(get_report_service),
    current_user: User = Depends(get_current_user),
):
    period = parse_date_range(start_date, end_date)
    report = reports.income_report(current_user.id, period, source)
    return IncomeReportOut(
        period=to_period(report.period),
        filter_source=report.label_filter or ALL_FILTER,
        total_income=report.total,
        income_by_source=report.breakdown,
        detailed_incomes=[IncomeRead.model_validate(i, from_attributes=True) for i in report.records],
    )


@router.get(
    "/budget-adherence",
    response_model=BudgetReportOut,
    status_code=status.HTTP_200_OK,
)
def budget_adherence_report(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    category: Optional[str] = Query(default=None),
    reports: ReportService = Depends(get_report_service),
    current_user: User = Depends(get_current_user),
):
    """Budgeted vs. spent for every budget overlapping the period.

    Spend is counted inside each budget's own start/end dates.
    """
    period = parse_date_range(start_date, end_date)
    return to_budget_report_out(reports.budget_report(current_user.id, period, category))


@router.get(
    "/overview",
    response_model=OverviewReportOut,
    status_code=status.HTTP_200_OK,
)
def overview_report(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    reports: ReportService = Depends(get_report_service),
    current_user: User = Depends(get_current_user),
):
    period = parse_date_range(start_date, end_date)
    report = reports.overview(current_user.id, period)
    return OverviewReportOut(
        period=to_period(report.period),
        total_income=report.total_income,
        total_expenses=report.total_expenses,
        net_savings=report.net_savings,
        status=report.status,
    )
