from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Acknowledgement:
    """Returned to the gateway once a message has been persisted."""

    id: int
    status: str = "received"
