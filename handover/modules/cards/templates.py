"""Adaptive card templates for both bots. Every builder is a pure function of its data."""

from handover.models.case import Case

ADAPTIVE_CARD_CONTENT_TYPE = "application/vnd.microsoft.card.adaptive"
_SCHEMA = "http://adaptivecards.io/schemas/adaptive-card.json"


def _card(body: list, actions: list) -> dict:
    return {
        "type": "AdaptiveCard",
        "body": body,
        "actions": actions,
        "$schema": _SCHEMA,
        "version": "1.3",
    }


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _case_facts(case: Case, extended: bool = False) -> list[dict]:
    facts = [
        {"title": "Case Number:", "value": case.case_number},
        {"title": "Severity:", "value": case.severity},
        {"title": "24/7 Support:", "value": _yes_no(case.is_247)},
        {"title": "Title:", "value": case.title},
        {"title": "Description:", "value": case.description},
    ]
    if extended:
        facts += [
            {"title": "Vertical:", "value": case.vertical or "N/A"},
            {"title": "SAP:", "value": case.sap or "N/A"},
            {"title": "Sending Engineer:", "value": case.sending_engineer or "N/A"},
            {"title": "TA Reviewer:", "value": case.ta_reviewer or "N/A"},
        ]
    return facts


def case_selection_card(cases: list[Case] | tuple[Case, ...]) -> dict:
    """Submits {"caseNumber": ...}."""
    return _card(
        body=[
            {"type": "TextBlock", "text": "Select a case for handover:", "weight": "Bolder", "size": "Medium"},
            {
                "type": "Input.ChoiceSet",
                "id": "caseNumber",
                "style": "expanded",
                "choices": [
                    {
                        "title": f"Case {c.case_number} | Sev: {c.severity} | 24/7: {_yes_no(c.is_247)} | {c.title}",
                        "value": c.case_number,
                    }
                    for c in cases
                ],
            },
        ],
        actions=[{"type": "Action.Submit", "title": "Submit"}],
    )


def confirmation_card(case: Case) -> dict:
    """Submits {"confirmation": "yes" | "no"}."""
    return _card(
        body=[
            {"type": "TextBlock", "text": "Handover Confirmation", "weight": "Bolder", "size": "Medium"},
            {"type": "FactSet", "facts": _case_facts(case)},
            {"type": "TextBlock", "text": "Do you want to proceed with handover?", "weight": "Bolder", "size": "Small"},
            {
                "type": "Input.ChoiceSet",
                "id": "confirmation",
                "style": "expanded",
                "choices": [{"title": "Yes", "value": "yes"}, {"title": "No", "value": "no"}],
            },
        ],
        actions=[{"type": "Action.Submit", "title": "Confirm"}],
    )


def ta_handover_card(case: Case) -> dict:
    """Submits {"action": "acknowledge"}."""
    return _card(
        body=[
            {
                "type": "TextBlock",
                "text": "URGENT HANDOVER REQUEST",
                "weight": "Bolder",
                "size": "Medium",
                "color": "Attention",
            },
            {"type": "FactSet", "facts": _case_facts(case, extended=True)},
        ],
        actions=[{"type": "Action.Submit", "title": "Acknowledge", "data": {"action": "acknowledge"}}],
    )


def ta_approval_card(case: Case | None = None) -> dict:
    """Submits {"action": "approve" | "reject", "comments": ...}."""
    body = [
        {"type": "TextBlock", "text": "HANDOVER DECISION", "weight": "Bolder", "size": "Medium"},
        {"type": "TextBlock", "text": "Please approve or reject this handover request:"},
    ]
    if case is not None:
        body.insert(1, {"type": "TextBlock", "text": f"Case {case.case_number}: {case.title}", "wrap": True})
    body.append(
        {"type": "Input.Text", "id": "comments", "placeholder": "Add your comments here...", "isMultiline": True}
    )
    return _card(
        body=body,
        actions=[
            {"type": "Action.Submit", "title": "Approve", "data": {"action": "approve"}, "style": "positive"},
            {"type": "Action.Submit", "title": "Reject", "data": {"action": "reject"}, "style": "destructive"},
        ],
    )


TEMPLATES = {
    "case_selection": case_selection_card,
    "confirmation": confirmation_card,
    "ta_handover": ta_handover_card,
    "ta_approval": ta_approval_card,
}


def render_card(template_id: str, data) -> dict:
    """Render a card by template id and wrap it as a message attachment."""
    try:
        builder = TEMPLATES[template_id]
    except KeyError:
        raise ValueError(f"Unknown card template: {template_id}") from None
    return {"contentType": ADAPTIVE_CARD_CONTENT_TYPE, "content": builder(data)}
