"""
Daily / monthly spreadsheet export.

Two sheets: "Records", one row per wash record, and "Summary" with totals
and the breakdowns by wash type and by worker.
"""

import io
import logging
from typing import List

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from carwash import date_utils, errors
from carwash.models.enums import PaymentType, RecordStatus

logger = logging.getLogger(__name__)

REPORT_TYPES = ("daily", "monthly")
CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
UNASSIGNED = "Unassigned"
EMPTY = "-"

# (header, width)
RECORD_COLUMNS = [
    ("Plate Number", 15),
    ("Car Type", 20),
    ("Wash Type", 12),
    ("Worker", 15),
    ("Entry Time", 20),
    ("Finish Time", 20),
    ("Elapsed Minutes", 15),
    ("Payment Type", 13),
    ("Amount Paid (EGP)", 17),
    ("Tip Amount (EGP)", 15),
    ("Notes", 25),
    ("Status", 12),
]
SUMMARY_COLUMNS = [("Metric", 30), ("Value", 20)]

_HEADER_FONT = Font(bold=True, color="FFFFFFFF")
_HEADER_FILL = PatternFill(fill_type="solid", fgColor="FF0284C7")
_THIN = Side(style="thin")
_BORDER = Border(top=_THIN, left=_THIN, bottom=_THIN, right=_THIN)


def record_row(record) -> list:
    return [
        record.plate_number,
        record.car_type or EMPTY,
        record.wash_type,
        record.worker.name if record.worker else EMPTY,
        date_utils.format_business_datetime(record.entry_time),
        date_utils.format_business_datetime(record.finish_time) or EMPTY,
        record.elapsed_minutes if record.elapsed_minutes is not None else EMPTY,
        record.payment_type or EMPTY,
        record.amount_paid,
        record.tip_amount,
        record.notes or EMPTY,
        record.status,
    ]


def summarize(records: List) -> dict:
    summary = {
        "total_cars": len(records),
        "finished_cars": 0,
        "in_progress_cars": 0,
        "cancelled_cars": 0,
        "total_revenue": 0.0,
        "total_tips": 0.0,
        "total_cash": 0.0,
        "total_instapay": 0.0,
        "instapay_tips": 0.0,
        "by_wash_type": {},
        "by_worker": {},
    }
    status_keys = {
        RecordStatus.FINISHED.value: "finished_cars",
        RecordStatus.IN_PROGRESS.value: "in_progress_cars",
        RecordStatus.CANCELLED.value: "cancelled_cars",
    }

    for record in records:
        summary[status_keys[record.status]] += 1
        summary["total_revenue"] += record.amount_paid
        summary["total_tips"] += record.tip_amount

        if record.payment_type == PaymentType.CASH.value:
            summary["total_cash"] += record.amount_paid
        elif record.payment_type == PaymentType.INSTAPAY.value:
            summary["total_instapay"] += record.amount_paid
            summary["instapay_tips"] += record.tip_amount

        by_type = summary["by_wash_type"].setdefault(record.wash_type, {"count": 0, "revenue": 0.0})
        by_type["count"] += 1
        by_type["revenue"] += record.amount_paid

        worker_name = record.worker.name if record.worker else UNASSIGNED
        by_worker = summary["by_worker"].setdefault(worker_name, {"count": 0, "revenue": 0.0, "tips": 0.0})
        by_worker["count"] += 1
        by_worker["revenue"] += record.amount_paid
        by_worker["tips"] += record.tip_amount

    summary["net_revenue"] = summary["total_revenue"] - summary["instapay_tips"]
    return summary


def summary_rows(summary: dict, report_type: str, label: str) -> list:
    rows = [
        ("Report Date", label),
        ("Report Type", "Daily Report" if report_type == "daily" else "Monthly Report"),
        ("", ""),
        ("Total Cars", summary["total_cars"]),
        ("Finished Cars", summary["finished_cars"]),
        ("In Progress Cars", summary["in_progress_cars"]),
        ("Cancelled Cars", summary["cancelled_cars"]),
        ("", ""),
        ("Total Revenue (EGP)", summary["total_revenue"]),
        ("Total Tips (EGP)", summary["total_tips"]),
        ("Total Cash (EGP)", summary["total_cash"]),
        ("Total InstaPay (EGP)", summary["total_instapay"]),
        ("InstaPay Tips (EGP)", summary["instapay_tips"]),
        ("Net Revenue (EGP)", summary["net_revenue"]),
        ("", ""),
        ("--- Breakdown by Wash Type ---", ""),
    ]
    for wash_type, data in summary["by_wash_type"].items():
        rows.append((f"{wash_type} - Count", data["count"]))
        rows.append((f"{wash_type} - Revenue (EGP)", data["revenue"]))

    rows.append(("", ""))
    rows.append(("--- Totals by Worker ---", ""))
    for worker_name, data in summary["by_worker"].items():
        rows.append((f"{worker_name} - Count", data["count"]))
        rows.append((f"{worker_name} - Revenue (EGP)", data["revenue"]))
        rows.append((f"{worker_name} - Tips (EGP)", data["tips"]))
    return rows


def _write_sheet(sheet, columns, rows):
    sheet.append([header for header, _ in columns])
    for index, (_, width) in enumerate(columns, start=1):
        sheet.column_dimensions[get_column_letter(index)].width = width
    for cell in sheet[1]:
        cell.font = _HEADER_FONT
        cell.fill = _HEADER_FILL
        cell.alignment = Alignment(vertical="center", horizontal="center")

    for row in rows:
        sheet.append(list(row))

    for row in sheet.iter_rows(min_row=1, max_row=sheet.max_row, max_col=len(columns)):
        for cell in row:
            cell.border = _BORDER
            if cell.row > 1:
                cell.alignment = Alignment(vertical="center")


def build_workbook(records: List, report_type: str, label: str) -> openpyxl.Workbook:
    if report_type not in REPORT_TYPES:
        raise errors.ValidationError(f"Invalid report type '{report_type}'")

    workbook = openpyxl.Workbook()
    workbook.properties.creator = "Car Wash App"

    records_sheet = workbook.active
    records_sheet.title = "Records"
    _write_sheet(records_sheet, RECORD_COLUMNS, [record_row(r) for r in records])

    summary_sheet = workbook.create_sheet("Summary")
    _write_sheet(summary_sheet, SUMMARY_COLUMNS, summary_rows(summarize(records), report_type, label))
    return workbook


def generate_report(records: List, report_type: str, label: str) -> bytes:
    workbook = build_workbook(records, report_type, label)
    buffer = io.BytesIO()
    workbook.save(buffer)
    logger.info("Built %s export for %s with %d records", report_type, label, len(records))
    return buffer.getvalue()


def export_filename(label: str) -> str:
    return f"carwash_{label}.xlsx"
