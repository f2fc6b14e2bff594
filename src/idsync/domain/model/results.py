"""Records produced by a reconciliation run for reporting and audit."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import Category, Outcome


@dataclass(frozen=True, slots=True, kw_only=True)
class ChangeRecord:
    """One differing attribute on a matched identity pair.

    Absent values are represented by the empty string, so a change from a
    value to nothing (or the reverse) is still a change.
    """

    target_path: str
    account_name: str
    attribute: str
    new_value: str
    old_value: str

    def __post_init__(self) -> None:
        if self.new_value == self.old_value:
            raise ValueError(f"Change record for {self.attribute} does not change anything")


@dataclass(frozen=True, slots=True, kw_only=True)
class MutationResult:
    """Outcome of processing one input record in one category."""

    category: Category
    account_name: str
    success: bool
    outcome: Outcome
    identifier: str | None = None
    detail: str | None = None

    @classmethod
    def failed(
        cls,
        category: Category,
        account_name: str,
        error: BaseException | str,
        *,
        identifier: str | None = None,
    ) -> MutationResult:
        detail = error if isinstance(error, str) else f"{type(error).__name__}: {error}"
        return cls(
            category=category,
            account_name=account_name,
            success=False,
            outcome=Outcome.FAILED,
            identifier=identifier,
            detail=detail,
        )
