"""
Trace event record consumed by filter expressions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass(frozen=True)
class TraceEvent:
    """A single trace event: its name plus payload properties."""

    event_name: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    process_name: Optional[str] = None
    process_id: Optional[int] = None
    thread_id: Optional[int] = None

    def properties(self) -> Dict[str, Any]:
        """Payload merged with the well-known process/thread fields."""
        props = dict(self.payload)
        if self.process_name is not None:
            props["ProcessName"] = self.process_name
        if self.process_id is not None:
            props["ProcessID"] = self.process_id
        if self.thread_id is not None:
            props["ThreadID"] = self.thread_id
        return props
