import uuid
from typing import Optional

from fastapi import Depends

from ..core.logging import get_logger
from ..models.budget import Budget
from ..models.expense import Expense
from ..models.income import Income
from ..store import RecordStore, get_store
from .aggregation import (
    BudgetReport,
    DateRange,
    FlowReport,
    OverviewReport,
    build_budget_report,
    build_flow_report,
    build_overview_report,
    narrows_by_category,
)


class ReportService:
    """Fetches the records a report needs and hands them to the aggregation functions."""

    def __init__(self, store: RecordStore, logger):
        self.store = store
        self._logger = logger.bind(component="reports")

    def _expenses_in(self, user_id: uuid.UUID, period: DateRange, category: Optional[str] = None):
        filters = [
            Expense.user_id == user_id,
            Expense.expense_date >= period.start,
            Expense.expense_date <= period.end,
        ]
        if category:
            filters.append(Expense.category == category)
        return self.store.find_many(Expense, *filters, order_by=[Expense.expense_date.asc()])

    def _incomes_in(self, user_id: uuid.UUID, period: DateRange, source: Optional[str] = None):
        filters = [
            Income.user_id == user_id,
            Income.income_date >= period.start,
            Income.income_date <= period.end,
        ]
        if source:
            filters.append(Income.source == source)
        return self.store.find_many(Income, *filters, order_by=[Income.income_date.asc()])

    def expense_report(
        self, user_id: uuid.UUID, period: DateRange, category: Optional[str] = None
    ) -> FlowReport:
        report = build_flow_report(
            self._expenses_in(user_id, period, category),
            period,
            label_of=lambda e: e.category,
            date_of=lambda e: e.expense_date,
            label_filter=category or None,
        )
        self._logger.info("report_built", kind="expenses", user_id=str(user_id), records=len(report.records))
        return report

    def income_report(
        self, user_id: uuid.UUID, period: DateRange, source: Optional[str] = None
    ) -> FlowReport:
        report = build_flow_report(
            self._incomes_in(user_id, period, source),
            period,
            label_of=lambda i: i.source,
            date_of=lambda i: i.income_date,
            label_filter=source or None,
        )
        self._logger.info("report_built", kind="income", user_id=str(user_id), records=len(report.records))
        return report

    def budget_report(
        self, user_id: uuid.UUID, period: DateRange, category: Optional[str] = None
    ) -> BudgetReport:
        narrow = narrows_by_category(category)

        filters = [
            Budget.user_id == user_id,
            Budget.start_date <= period.end,
            Budget.end_date >= period.start,
        ]
        if narrow:
            filters.append(Budget.category == category)
        budgets = self.store.find_many(
            Budget, *filters, order_by=[Budget.category.asc(), Budget.start_date.asc()]
        )

        expenses = self._expenses_in(user_id, period, category if narrow else None) if budgets else []
        report = build_budget_report(budgets, expenses, period, category)
        self._logger.info(
            "report_built",
            kind="budget",
            user_id=str(user_id),
            budgets=len(report.lines),
            total_spent=str(report.total_spent),
        )
        return report

    def overview(self, user_id: uuid.UUID, period: DateRange) -> OverviewReport:
        report = build_overview_report(
            self._incomes_in(user_id, period),
            self._expenses_in(user_id, period),
            period,
        )
        self._logger.info("report_built", kind="overview", user_id=str(user_id), status=report.status)
        return report


def get_report_service(
    store: RecordStore = Depends(get_store),
    logger=Depends(get_logger),
) -> ReportService:
    return ReportService(store, logger)
