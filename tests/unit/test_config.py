"""
Unit tests for environment-driven configuration helpers.
"""

from __future__ import annotations

import pytest

from storefront.config import ErrorPolicy, _error_policy


@pytest.mark.unit
def test_error_policy_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LISTINGS_ERROR_POLICY", raising=False)

    assert _error_policy("LISTINGS_ERROR_POLICY", ErrorPolicy.NOTIFY) is ErrorPolicy.NOTIFY


@pytest.mark.unit
def test_error_policy_from_env_is_case_insensitive(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VIEWS_ERROR_POLICY", " Notify ")

    assert _error_policy("VIEWS_ERROR_POLICY", ErrorPolicy.LOG) is ErrorPolicy.NOTIFY


@pytest.mark.unit
def test_error_policy_rejects_unknown_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CATEGORIES_ERROR_POLICY", "ignore")

    with pytest.raises(ValueError, match="CATEGORIES_ERROR_POLICY"):
        _error_policy("CATEGORIES_ERROR_POLICY", ErrorPolicy.NOTIFY)
