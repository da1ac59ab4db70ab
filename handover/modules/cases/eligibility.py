"""
Handover eligibility: a case qualifies when it is severity A or has 24/7 support.
"""

from handover.models.case import Case


def eligibility_failures(case: Case) -> list[str]:
    """Return the failing conditions, empty when the case is eligible."""
    if case.severity == "A" or case.is_247:
        return []

    # Ineligible only when both conditions fail; report each one.
    return [
        f"Severity is {case.severity} (handover requires severity A)",
        "Case does not have 24/7 support",
    ]


def is_eligible(case: Case) -> bool:
    return not eligibility_failures(case)
