"""
Handover Report Generator: builds the audit record for every terminal decision
and renders it as the plain-text report body.
"""

import json
import logging
from datetime import datetime, timezone

from handover.models.case import Case
from handover.models.report import HandoverReport

logger = logging.getLogger(__name__)

TA_REJECT_DEFAULT_REASON = "TA rejected handover"


def generate_report(
    case: Case,
    valid: bool,
    reject_reason: str = "",
    comments: str = "",
    now: datetime | None = None,
) -> HandoverReport:
    return HandoverReport(
        case_no=case.case_number,
        severity=case.severity,
        sending_engineer=case.sending_engineer,
        vertical=case.vertical,
        sap=case.sap,
        valid=valid,
        reject_reason=reject_reason,
        ta_reviewer=case.ta_reviewer,
        comments=comments,
        timestamp=now or datetime.now(timezone.utc),
    )


def report_for_ta_decision(case: Case, decision: str, comments: str) -> HandoverReport:
    approved = decision == "approve"
    reject_reason = "" if approved else (comments or TA_REJECT_DEFAULT_REASON)
    return generate_report(case, valid=approved, reject_reason=reject_reason, comments=comments)


def report_filename(report: HandoverReport) -> str:
    """handover_<DDMMYY>_<HHMMSS>.txt, in local time."""
    local = report.timestamp.astimezone()
    return f"handover_{local:%d%m%y}_{local:%H%M%S}.txt"


def render_report(report: HandoverReport) -> str:
    lines = [
        f"Case No: {report.case_no}",
        f"Severity: {report.severity}",
        f"Sending Engineer: {report.sending_engineer}",
        f"Vertical: {report.vertical}",
        f"SAP: {report.sap}",
        f"Valid: {str(report.valid).lower()}",
        f"Reject Reason: {report.reject_reason}",
        f"TA/MGR reviewer: {report.ta_reviewer}",
        f"Comments: {report.comments}",
        f"Timestamp: {report.timestamp.isoformat()}",
    ]
    return "\n".join(lines)


def log_handover_operation(operation: str, data: dict) -> None:
    logger.info("[HANDOVER] %s: %s", operation, json.dumps(data, default=str))
