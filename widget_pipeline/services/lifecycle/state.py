"""Per-instance fetch state."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class FetchState:
    """
    Snapshot of one widget instance.

    ``data`` survives an Error phase so a failed refresh never blanks
    out a previously successful result.
    """
    data: Any = None
    phase: Phase = Phase.IDLE
    error_message: Optional[str] = None
    last_updated_at: Optional[datetime] = None

    @property
    def has_data(self) -> bool:
        return self.data is not None

    @property
    def is_loading(self) -> bool:
        return self.phase == Phase.LOADING

    def loading(self) -> "FetchState":
        return replace(self, phase=Phase.LOADING, error_message=None)

    def loaded(self, data: Any) -> "FetchState":
        return FetchState(
            data=data,
            phase=Phase.LOADED,
            error_message=None,
            last_updated_at=datetime.now(),
        )

    def failed(self, message: str) -> "FetchState":
        return replace(self, phase=Phase.ERROR, error_message=message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "data": self.data,
            "error_message": self.error_message,
            "last_updated_at": (
                self.last_updated_at.isoformat() if self.last_updated_at else None
            ),
        }
