"""Single-slot human approval gate"""
import uuid
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from authdemo.exceptions import ApprovalGateError

Decision = Literal["approved", "denied"]


class ApprovalRequest(BaseModel):
    """What the approval dialog shows the human"""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    tool_id: str = ""
    tool_name: str
    tool_description: str = ""
    scopes: List[str] = Field(default_factory=list)
    data_summary: Dict[str, str] = Field(default_factory=dict)
    feature: str = "Async Authorization"
    explanation: str = ""


class ApprovalGate:
    """Holds at most one outstanding approval request.

    States are Empty (``current is None``) and AwaitingDecision. Opening a second
    request while one is outstanding is a programming error; a decision that
    arrives after the gate is already empty (a double click) is ignored.
    """

    def __init__(self):
        self._current: Optional[ApprovalRequest] = None

    @property
    def current(self) -> Optional[ApprovalRequest]:
        return self._current

    @property
    def is_waiting(self) -> bool:
        return self._current is not None

    def request(self, approval: ApprovalRequest) -> None:
        if self._current is not None:
            raise ApprovalGateError(
                f"Approval {self._current.id} is still awaiting a decision; cannot open {approval.id}"
            )
        self._current = approval

    def decide(self, request_id: str, decision: Decision) -> Optional[ApprovalRequest]:
        """Close the gate.

        Returns:
            The decided request, or None when the gate was already empty.

        Raises:
            ApprovalGateError: If ``request_id`` is not the outstanding request.
        """
        if self._current is None:
            return None
        if self._current.id != request_id:
            raise ApprovalGateError(
                f"Decision for {request_id} does not match outstanding approval {self._current.id}"
            )
        if decision not in ("approved", "denied"):
            raise ApprovalGateError(f"Unknown decision: {decision}")
        decided = self._current
        self._current = None
        return decided

    def clear(self) -> None:
        self._current = None
