"""
Counseling Records - CSV Report Export

Builds the interaction report consumed by the reporting download. Counselors
get the base layout; admins get an extra Counselor column after Date.
"""

import re
from datetime import date
from typing import List, Mapping, Optional, Sequence

from counseltrack.records.models import Interaction, InteractionReason

REPORT_HEADERS = [
    "Date",
    "Start Time",
    "End Time",
    "Duration (min)",
    "Type",
    "Person Name",
    "Reasons",
    "Notes",
    "Follow-up Needed",
    "Follow-up Date",
]

ADMIN_REPORT_HEADERS = REPORT_HEADERS[:1] + ["Counselor"] + REPORT_HEADERS[1:]


def quote_field(value: str) -> str:
    """Wrap in double quotes, doubling any quotes inside"""
    return '"' + value.replace('"', '""') + '"'


def reasons_column(interaction: Interaction, reasons: Mapping[str, InteractionReason]) -> str:
    labels = [reasons[reason_id].label for reason_id in interaction.reason_ids if reason_id in reasons]
    return "; ".join(labels)


def report_row(
    interaction: Interaction,
    reasons: Mapping[str, InteractionReason],
    counselor_name: Optional[str] = None,
) -> List[str]:
    row = [
        interaction.date.isoformat(),
        interaction.start_time,
        interaction.end_time,
        str(interaction.duration),
        interaction.type.value,
        interaction.person_name,
        reasons_column(interaction, reasons),
        quote_field(interaction.notes),
        "Yes" if interaction.follow_up_needed else "No",
        interaction.follow_up_date.isoformat() if interaction.follow_up_date else "",
    ]
    if counselor_name is not None:
        row.insert(1, counselor_name)
    return row


def build_report_csv(
    interactions: Sequence[Interaction],
    reasons: Sequence[InteractionReason],
    counselor_names: Optional[Mapping[str, str]] = None,
) -> str:
    """Render interactions as CSV text, one row per interaction

    Passing counselor_names (counselor id -> display name) selects the admin
    layout; unknown or missing counselors render as an empty cell.
    """
    reason_index = {reason.id: reason for reason in reasons}
    admin = counselor_names is not None
    lines = [",".join(ADMIN_REPORT_HEADERS if admin else REPORT_HEADERS)]
    for interaction in interactions:
        counselor = None
        if admin:
            counselor = counselor_names.get(interaction.counselor_id or "", "")
        lines.append(",".join(report_row(interaction, reason_index, counselor)))
    return "\n".join(lines)


def report_filename(start_date: date, end_date: date, counselor: Optional[str] = None) -> str:
    """counseling_report_[{counselor}_]{start}_to_{end}.csv"""
    parts = ["counseling_report"]
    if counselor is not None:
        parts.append(re.sub(r"\s+", "_", counselor))
    parts.append(f"{start_date.isoformat()}_to_{end_date.isoformat()}")
    return "_".join(parts) + ".csv"
