"""Result model returned by GatewayManager operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Optional


OperationStatus = Literal["success", "failed"]


@dataclass(slots=True)
class OperationResult:
    """Outcome of a single gateway operation."""

    operation: str
    status: OperationStatus
    message: str

    data: Any = None

    error_type: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[dict[str, Any]] = None

    cache_invalidated: bool = False

    @property
    def ok(self) -> bool:
        return self.status == "success"
