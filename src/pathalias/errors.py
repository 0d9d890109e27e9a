"""Actionable error hierarchy for pathalias.

Errors are classified by **recovery path**, not by origin.
Each error type carries structured guidance for three audiences:
  - The calling code (typed ``error_type`` for routing)
  - The human operator (``suggestion`` + ``troubleshooting`` steps)
  - An AI agent (``ai_guidance`` with concrete next actions)

Policy short-circuits ("no pattern", "nothing substituted", ...) are not
errors: the generator reports them through :class:`~pathalias.pipeline.AliasResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


# ---------------------------------------------------------------------------
# Error classification
# ---------------------------------------------------------------------------


class ErrorType(StrEnum):
    """Recovery-path categories — what to *do*, not where it came from."""

    CONFIG = "config"
    VALIDATION = "validation"
    PARSE = "parse"
    UNIQUIFY = "uniquify"
    STORAGE = "storage"


# ---------------------------------------------------------------------------
# Guidance dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AIGuidance:
    """Machine-readable guidance for an AI agent consuming this error."""

    action_required: str
    command: str | None = None
    checks: list[str] | None = None
    steps: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"action_required": self.action_required}
        if self.command is not None:
            result["command"] = self.command
        if self.checks is not None:
            result["checks"] = self.checks
        if self.steps is not None:
            result["steps"] = self.steps
        return result


@dataclass(frozen=True)
class Troubleshooting:
    """Sequential, human-readable recovery steps for the operator."""

    steps: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"steps": self.steps}


# ---------------------------------------------------------------------------
# Base actionable error
# ---------------------------------------------------------------------------


@dataclass
class ActionableError(Exception):
    """Structured error with embedded recovery guidance.

    Use the factory classmethods rather than constructing directly —
    they encode domain knowledge so callers don't have to.
    """

    error: str
    error_type: ErrorType
    service: str

    success: bool = field(default=False, init=False)
    suggestion: str | None = None
    ai_guidance: AIGuidance | None = None
    troubleshooting: Troubleshooting | None = None
    context: dict[str, Any] | None = None
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    # Make it work as a real exception
    def __post_init__(self) -> None:
        super().__init__(self.error)

    # -- serialisation -------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Compact JSON-ready dict — ``None`` values are excluded."""
        result: dict[str, Any] = {
            "success": self.success,
            "error": self.error,
            "error_type": self.error_type.value,
            "service": self.service,
            "timestamp": self.timestamp,
        }
        if self.suggestion is not None:
            result["suggestion"] = self.suggestion
        if self.ai_guidance is not None:
            result["ai_guidance"] = self.ai_guidance.to_dict()
        if self.troubleshooting is not None:
            result["troubleshooting"] = self.troubleshooting.to_dict()
        if self.context is not None:
            result["context"] = self.context
        return result

    # -- factory methods -----------------------------------------------------

    @classmethod
    def config(
        cls,
        field_name: str,
        reason: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """Missing or invalid configuration in settings.toml."""
        return cls(
            error=f"Configuration error — {field_name}: {reason}",
            error_type=ErrorType.CONFIG,
            service="settings.toml",
            suggestion=suggestion or f"Fix '{field_name}' in config/settings.toml",
            ai_guidance=AIGuidance(
                action_required=f"Correct the '{field_name}' value in config/settings.toml",
                checks=[
                    "Verify config/settings.toml exists",
                    f"Verify '{field_name}' is present and valid",
                ],
            ),
            troubleshooting=Troubleshooting(
                steps=[
                    "1. Open config/settings.toml",
                    f"2. Locate the '{field_name}' setting",
                    f"3. Fix the issue: {reason}",
                    "4. Save and re-run",
                ]
            ),
        )

    @classmethod
    def validation(
        cls,
        field_name: str,
        reason: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """Input validation failure (TOML values, CLI args, etc.)."""
        return cls(
            error=f"Validation error — {field_name}: {reason}",
            error_type=ErrorType.VALIDATION,
            service="validation",
            suggestion=suggestion or f"Fix '{field_name}': {reason}",
            ai_guidance=AIGuidance(
                action_required=f"Correct the value for '{field_name}'",
            ),
            troubleshooting=Troubleshooting(
                steps=[
                    f"1. Check the value of '{field_name}'",
                    f"2. Issue: {reason}",
                    "3. Correct and retry",
                ]
            ),
        )

    @classmethod
    def parse(
        cls,
        source: str,
        raw_error: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """Malformed input that could not be parsed (TOML, ``key=value`` pairs)."""
        return cls(
            error=f"Parse failure in {source}: {raw_error}",
            error_type=ErrorType.PARSE,
            service=source,
            suggestion=suggestion or f"Fix the syntax of {source}",
            ai_guidance=AIGuidance(
                action_required=f"Correct the syntax of {source}",
                checks=[f"Re-read {source} and locate the reported position"],
            ),
        )

    @classmethod
    def uniquify(
        cls,
        alias: str,
        attempts: int,
        reason: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """No free alias variant was found — never return a colliding alias."""
        return cls(
            error=f"Could not find a unique variant of '{alias}' after {attempts} attempts: {reason}",
            error_type=ErrorType.UNIQUIFY,
            service="uniquifier",
            suggestion=suggestion
            or "Raise max_length or clean up stale aliases sharing this base",
            ai_guidance=AIGuidance(
                action_required="Inspect the alias store for aliases sharing this base",
                checks=[
                    f"How many aliases start with '{alias}'?",
                    "Is max_length large enough to hold the numeric suffix?",
                ],
            ),
            troubleshooting=Troubleshooting(
                steps=[
                    f"1. List existing aliases beginning with '{alias}'",
                    "2. Remove aliases whose source no longer exists",
                    "3. Increase [alias].max_length if the suffix cannot fit",
                    "4. Re-run the generation",
                ]
            ),
            context={"alias": alias, "attempts": attempts},
        )

    @classmethod
    def storage(
        cls,
        alias: str,
        reason: str,
        *,
        suggestion: str | None = None,
    ) -> ActionableError:
        """The alias store refused a write (e.g. alias already owned by another source)."""
        return cls(
            error=f"Alias store rejected '{alias}': {reason}",
            error_type=ErrorType.STORAGE,
            service="alias_storage",
            suggestion=suggestion or "Regenerate the alias so it is uniquified against the current store",
            ai_guidance=AIGuidance(
                action_required="Retry alias generation for this source",
                checks=["Did another writer claim the same alias concurrently?"],
            ),
            context={"alias": alias},
        )
