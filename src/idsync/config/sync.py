"""Reconciliation run settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from idsync.domain.lifecycle import DEFAULT_SETTLE_SECONDS
from idsync.domain.provisioning.allocation import DEFAULT_UID_BASELINE
from idsync.domain.provisioning.provisioner import DEFAULT_COUNTER_ATTRIBUTE
from idsync.domain.reconciliation.partition import DEFAULT_EXEMPTION_SENTINEL

from .env import (
    env_float,
    env_int,
    env_list,
    env_mapping,
    optional_env_var,
    require_env_vars,
)
from .errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_ADD_THRESHOLD = 50
DEFAULT_UPDATE_THRESHOLD = 200
DEFAULT_REMOVE_THRESHOLD = 25
DEFAULT_SOURCE_LEAVERS_MARKER = "OU=Leavers"


@dataclass(frozen=True, slots=True)
class Thresholds:
    """Per-category candidate counts at which the safety gate trips."""

    add: int = DEFAULT_ADD_THRESHOLD
    update: int = DEFAULT_UPDATE_THRESHOLD
    remove: int = DEFAULT_REMOVE_THRESHOLD

    def __post_init__(self) -> None:
        for name in ("add", "update", "remove"):
            value = getattr(self, name)
            if value < 1:
                raise ConfigurationError(f"Threshold for {name} must be positive, got {value}")

    def for_category(self, category: str) -> int:
        try:
            return getattr(self, str(category))
        except AttributeError:
            raise ConfigurationError(f"No threshold configured for {category!r}") from None


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Immutable settings for one reconciliation run."""

    inactive_container: str
    leavers_container: str
    source_leavers_marker: str = DEFAULT_SOURCE_LEAVERS_MARKER
    thresholds: Thresholds = field(default_factory=Thresholds)
    significant_attributes: tuple[str, ...] = ()
    exemption_sentinel: str = DEFAULT_EXEMPTION_SENTINEL
    counter_object: str | None = None
    counter_attribute: str = DEFAULT_COUNTER_ATTRIBUTE
    uid_baseline: int = DEFAULT_UID_BASELINE
    settle_seconds: float = DEFAULT_SETTLE_SECONDS
    name_templates: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    excluded_accounts: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.settle_seconds < 0:
            raise ConfigurationError("Settle delay must be non-negative")
        for attribute, template in self.name_templates.items():
            if "{account_name}" not in template:
                raise ConfigurationError(
                    f"Name template for {attribute} must reference {{account_name}}"
                )


def get_sync_config() -> SyncConfig:
    values = require_env_vars(("IDSYNC_INACTIVE_CONTAINER", "IDSYNC_LEAVERS_CONTAINER"))
    return SyncConfig(
        inactive_container=values["IDSYNC_INACTIVE_CONTAINER"].strip(),
        leavers_container=values["IDSYNC_LEAVERS_CONTAINER"].strip(),
        source_leavers_marker=optional_env_var(
            "IDSYNC_SOURCE_LEAVERS_MARKER", DEFAULT_SOURCE_LEAVERS_MARKER
        )
        or DEFAULT_SOURCE_LEAVERS_MARKER,
        thresholds=Thresholds(
            add=env_int("IDSYNC_THRESHOLD_ADD", DEFAULT_ADD_THRESHOLD),
            update=env_int("IDSYNC_THRESHOLD_UPDATE", DEFAULT_UPDATE_THRESHOLD),
            remove=env_int("IDSYNC_THRESHOLD_REMOVE", DEFAULT_REMOVE_THRESHOLD),
        ),
        significant_attributes=env_list("IDSYNC_SIGNIFICANT_ATTRIBUTES"),
        exemption_sentinel=optional_env_var(
            "IDSYNC_EXEMPTION_SENTINEL", DEFAULT_EXEMPTION_SENTINEL
        )
        or DEFAULT_EXEMPTION_SENTINEL,
        counter_object=optional_env_var("IDSYNC_COUNTER_OBJECT"),
        counter_attribute=optional_env_var(
            "IDSYNC_COUNTER_ATTRIBUTE", DEFAULT_COUNTER_ATTRIBUTE
        )
        or DEFAULT_COUNTER_ATTRIBUTE,
        uid_baseline=env_int("IDSYNC_UID_BASELINE", DEFAULT_UID_BASELINE),
        settle_seconds=env_float("IDSYNC_SETTLE_SECONDS", DEFAULT_SETTLE_SECONDS),
        name_templates=MappingProxyType(env_mapping("IDSYNC_NAME_TEMPLATES")),
        excluded_accounts=env_list("IDSYNC_EXCLUDED_ACCOUNTS"),
    )
