"""Value object describing an email handed to the outbound relay."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OutboundEmail:
    """Message accepted by the email relay."""

    to: str
    subject: str
    body: str
    template_type: str
    correlation_ids: dict[str, str] = field(default_factory=dict)


__all__ = ["OutboundEmail"]
