"""Structured result shared by all validators."""

from dataclasses import dataclass, field


@dataclass
class ValidationResult:
    """Result of a validation pass.

    Errors accumulate; a caller sees every problem found in one pass.

    Attributes:
        is_valid: False once any error has been added.
        errors: Human-readable error messages, in the order they were found.
        warnings: Advisory messages that don't affect validity.
    """

    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_error(self, error: str) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning (doesn't affect validity)."""
        self.warnings.append(warning)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Fold another result's errors and warnings into this one."""
        for error in other.errors:
            self.add_error(error)
        self.warnings.extend(other.warnings)
        return self
