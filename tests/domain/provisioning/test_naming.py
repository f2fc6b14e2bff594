from __future__ import annotations

import pytest

from idsync.domain.errors import AccountNameExhaustedError
from idsync.domain.provisioning import MAX_SUFFIX, AccountNameRegistry


def test_free_name_is_used_as_is() -> None:
    registry = AccountNameRegistry.from_names(["asmith"])

    assert registry.resolve("jsmith") == "jsmith"


def test_taken_name_gets_first_free_two_digit_suffix() -> None:
    registry = AccountNameRegistry.from_names(["jsmith"])

    assert registry.resolve("jsmith") == "jsmith01"


def test_suffix_skips_taken_variants() -> None:
    registry = AccountNameRegistry.from_names(["jsmith", "jsmith01", "jsmith02"])

    assert registry.resolve("jsmith") == "jsmith03"


def test_names_compare_case_insensitively() -> None:
    registry = AccountNameRegistry.from_names(["JSmith"])

    assert registry.is_taken("jsmith")
    assert registry.resolve("jsmith") == "jsmith01"


def test_live_lookup_is_consulted() -> None:
    registry = AccountNameRegistry(lookup=lambda name: name == "svc-app")

    assert registry.resolve("svc-app") == "svc-app01"


def test_reserved_names_are_unavailable_later_in_the_run() -> None:
    registry = AccountNameRegistry()
    first = registry.resolve("jsmith")
    registry.reserve(first)

    assert registry.resolve("jsmith") == "jsmith01"


def test_exhausted_suffixes_raise() -> None:
    taken = ["jsmith", *(f"jsmith{suffix:02d}" for suffix in range(1, MAX_SUFFIX + 1))]
    registry = AccountNameRegistry.from_names(taken)

    with pytest.raises(AccountNameExhaustedError) as excinfo:
        registry.resolve("jsmith")

    assert excinfo.value.base == "jsmith"
