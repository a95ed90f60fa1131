from typing import Dict, List, Optional

from pydantic import Field

from carwash.models.common import CamelModel
from carwash.models.enums import WashType
from carwash.models.worker import WorkerOut


def empty_wash_type_counts() -> Dict[str, int]:
    return {wash_type.value: 0 for wash_type in WashType}


class WorkerStats(CamelModel):
    """Revenue, tips and car counts for one bucket of wash records."""
    total_cars: int = 0
    finished_cars: int = 0
    total_revenue: float = 0.0
    total_tips: float = 0.0
    cash_revenue: float = 0.0
    instapay_revenue: float = 0.0
    cash_tips: float = 0.0
    instapay_tips: float = 0.0
    # total_revenue - instapay_tips; cash tips never reach the register
    net_revenue: float = 0.0
    # Keys stay as the wash type names, not camelCased
    by_wash_type: Dict[str, int] = Field(default_factory=empty_wash_type_counts)


class WorkerStatsEntry(CamelModel):
    worker: Optional[WorkerOut] = None
    stats: WorkerStats


class StatsAggregate(CamelModel):
    worker_stats: List[WorkerStatsEntry]
    all_worker_stats: List[WorkerStatsEntry]
    unassigned_stats: WorkerStatsEntry
    totals: WorkerStats
