"""
Per-worker revenue and tip breakdown over a window of wash records.

Everything here is a pure function of the records handed in; the window is
small (a day, a week or a month of business) so nothing is cached.
"""

from typing import Iterable, List, Optional

from carwash import date_utils, errors
from carwash.date_utils import DateRange
from carwash.models.enums import PaymentType, RecordStatus
from carwash.models.stats import StatsAggregate, WorkerStats, WorkerStatsEntry
from carwash.models.worker import WorkerOut

PERIODS = ("day", "week", "month")


def compute_stats(records: Iterable) -> WorkerStats:
    """
    InstaPay tips land in the business account and are handed to the worker
    later, so they come off the net. Cash tips go straight to the worker and
    were never counted as revenue, so they are not subtracted.
    Cancelled records count like any other: they carry whatever was settled.
    """
    stats = WorkerStats()
    for record in records:
        stats.total_cars += 1
        if record.status == RecordStatus.FINISHED.value:
            stats.finished_cars += 1

        stats.total_revenue += record.amount_paid
        stats.total_tips += record.tip_amount

        if record.payment_type == PaymentType.CASH.value:
            stats.cash_revenue += record.amount_paid
            stats.cash_tips += record.tip_amount
        elif record.payment_type == PaymentType.INSTAPAY.value:
            stats.instapay_revenue += record.amount_paid
            stats.instapay_tips += record.tip_amount

        if record.wash_type in stats.by_wash_type:
            stats.by_wash_type[record.wash_type] += 1

    stats.net_revenue = stats.total_revenue - stats.instapay_tips
    return stats


def aggregate(records: List, workers: List) -> StatsAggregate:
    """
    Splits ``records`` by worker. ``workers`` keeps the order it was given in
    (by name, from the data source); the unassigned bucket holds records with
    no worker. ``worker_stats`` only lists buckets that saw at least one car.
    """
    all_worker_stats = []
    for worker in workers:
        worker_records = [r for r in records if r.worker_id == worker.id]
        all_worker_stats.append(
            WorkerStatsEntry(
                worker=WorkerOut.model_validate(worker),
                stats=compute_stats(worker_records),
            )
        )

    unassigned = WorkerStatsEntry(
        worker=None,
        stats=compute_stats(r for r in records if r.worker_id is None),
    )

    worker_stats = [entry for entry in all_worker_stats if entry.stats.total_cars > 0]
    if unassigned.stats.total_cars > 0:
        worker_stats.append(unassigned)

    return StatsAggregate(
        worker_stats=worker_stats,
        all_worker_stats=all_worker_stats,
        unassigned_stats=unassigned,
        totals=compute_stats(records),
    )


def resolve_period(period: Optional[str], date_str: Optional[str] = None,
                   month_str: Optional[str] = None) -> DateRange:
    period = period or "day"
    if period not in PERIODS:
        raise errors.ValidationError(f"Invalid period '{period}', expected one of: {', '.join(PERIODS)}")

    date_str = date_str or date_utils.business_today().isoformat()
    if period == "week":
        return date_utils.week_range(date_str)
    if period == "month":
        return date_utils.month_range(month_str or date_utils.parse_date(date_str).strftime("%Y-%m"))
    return date_utils.day_range(date_str)


def serialize(result: StatsAggregate, period: str, date_range: DateRange) -> dict:
    data = result.model_dump(by_alias=True, mode="json")
    data["period"] = period
    data["startDate"] = date_range.start.isoformat()
    data["endDate"] = date_range.end.isoformat()
    return data
