from dataclasses import dataclass


@dataclass
class ApprovalTarget:
    """The approval-relevant slice of a deposit, bazaar expense or individual cost."""

    id: str
    mess_id: str
    cycle_id: str
    approval_status: str
