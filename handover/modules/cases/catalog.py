"""
Case Catalog: static list of cases that can be handed over, looked up by case number.
"""

from handover.models.case import Case

CASES: tuple[Case, ...] = (
    Case(
        case_number="123",
        severity="A",
        is_247=True,
        title="IPsec Tunnel down and BGP down",
        description="We have our production tunnel down and our BGP routes are withdrawn due to this and causing outage.",
        vertical="Hybrid",
        sap="Azure/VPN Gateway/Connectivity/Site-to-site VPN connectivity issues.",
        sending_engineer="Naveed Khan",
        ta_reviewer="Ravi Kumar",
    ),
    Case(
        case_number="456",
        severity="A",
        is_247=True,
        title="Application Gateway blocking traffic.",
        description="Users are getting 403 forbidden even after allowing Geo WAF rules.",
        vertical="Layer7",
        sap="Azure/Application Gateway/Facing 4xx errors/Other 4xx errors.",
        sending_engineer="Harshdeep",
        ta_reviewer="Ratnavo Dutta",
    ),
    Case(
        case_number="789",
        severity="B",
        is_247=False,
        title="Latency on the application.",
        description="Users are experiencing latency while accessing our application.",
        vertical="Hybrid",
        sap="Azure/ExpressRoute/ExpressRoute Private Peering/Latency on link",
        sending_engineer="Rajiv",
        ta_reviewer="N/A",
    ),
)


class CaseCatalog:
    def __init__(self, cases: tuple[Case, ...] | list[Case] = CASES):
        self._cases = tuple(cases)
        self._by_number = {c.case_number: c for c in self._cases}

    def list_cases(self) -> tuple[Case, ...]:
        return self._cases

    def find_by_case_number(self, case_number: str | None) -> Case | None:
        if case_number is None:
            return None
        return self._by_number.get(str(case_number).strip())
