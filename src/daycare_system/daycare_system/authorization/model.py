from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Principal:
    """Authenticated actor issuing a request.

    ``role`` is kept as the raw string found in the session so the policy can
    reject unknown values instead of failing while parsing.
    """

    user_id: int
    role: Optional[str]
    full_name: str = ""

    @classmethod
    def from_session(cls, session: Mapping[str, Any]) -> Optional["Principal"]:
        if "user_id" not in session:
            return None
        return cls(
            user_id=int(session["user_id"]),
            role=session.get("role"),
            full_name=session.get("name") or "",
        )


@dataclass(frozen=True)
class ScopeFilter:
    """Narrowing predicate for list queries, e.g. ``parent_id == 7``."""

    field: str
    value: Any

    def as_kwargs(self) -> dict:
        return {self.field: self.value}


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: Optional[str] = None
    scope: Optional[ScopeFilter] = None

    @classmethod
    def allow(cls, scope: Optional[ScopeFilter] = None) -> "AccessDecision":
        return cls(allowed=True, scope=scope)

    @classmethod
    def deny(cls, reason: str) -> "AccessDecision":
        return cls(allowed=False, reason=reason)

    def scope_kwargs(self) -> dict:
        return self.scope.as_kwargs() if self.scope else {}
