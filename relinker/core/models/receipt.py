"""
Receipt model — the result contract for every external collaborator.

Adapters (package search, installer, builder, rewriter, file removal)
return Receipts. They never raise for operational failures: a failed
apt call or a patchelf error is captured here and handed back to the
orchestrator, which decides whether it is fatal for a requirement.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class Receipt(BaseModel):
    """Outcome of a single collaborator operation."""

    adapter: str                    # which adapter produced it (apt, patchelf, ...)
    operation: str                  # install, remove, build, replace-needed, ...
    target: str = ""                # package name, file path, ...
    status: Literal["ok", "skipped", "failed"] = "ok"

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    output: str = ""
    error: str | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the operation succeeded."""
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        """Whether the operation failed."""
        return self.status == "failed"

    @classmethod
    def success(
        cls,
        adapter: str,
        operation: str,
        target: str = "",
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(
            adapter=adapter,
            operation=operation,
            target=target,
            status="ok",
            output=output,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        adapter: str,
        operation: str,
        error: str,
        target: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(
            adapter=adapter,
            operation=operation,
            target=target,
            status="failed",
            error=error,
            **kwargs,
        )

    @classmethod
    def skip(
        cls,
        adapter: str,
        operation: str,
        reason: str = "",
        target: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a skip receipt."""
        return cls(
            adapter=adapter,
            operation=operation,
            target=target,
            status="skipped",
            output=reason,
            **kwargs,
        )

    @classmethod
    def from_command(
        cls,
        adapter: str,
        operation: str,
        target: str,
        result: dict[str, Any],
    ) -> Receipt:
        """Build a receipt from a ``run_command`` result dict."""
        elapsed = result.get("elapsed_ms", 0)
        if result.get("ok"):
            return cls.success(
                adapter,
                operation,
                target=target,
                output=result.get("stdout", "").strip(),
                duration_ms=elapsed,
            )
        error = result.get("error", "Command failed")
        stderr = (result.get("stderr") or "").strip()
        if stderr:
            error = f"{error}: {stderr}"
        return cls.failure(
            adapter,
            operation,
            error=error,
            target=target,
            duration_ms=elapsed,
            metadata={"stdout": result.get("stdout", "")},
        )
