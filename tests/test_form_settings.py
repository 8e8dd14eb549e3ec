"""FormSettings env loading and validation."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from app_authoring.form.merge import DefaultPolicy
from app_authoring.form.settings import FormSettings


class TestFormSettings:
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            s = FormSettings(_env_file=None)
            assert s.debounce_ms == 200
            assert s.debounce_seconds == pytest.approx(0.2)
            assert s.owner_page_size == 20
            assert s.type_page_size == 100
            assert s.max_schema_depth == 64
            assert s.default_policy is DefaultPolicy.TRUTHY
            assert s.field_prefix == "customData."
            assert s.exit_route == "/app-list/list"

    def test_env_override(self):
        env = {
            "APP_AUTHORING_DEBOUNCE_MS": "50",
            "APP_AUTHORING_OWNER_PAGE_SIZE": "5",
            "APP_AUTHORING_DEFAULT_POLICY": " Presence ",
        }
        with patch.dict(os.environ, env, clear=True):
            s = FormSettings(_env_file=None)
            assert s.debounce_ms == 50
            assert s.owner_page_size == 5
            assert s.default_policy is DefaultPolicy.PRESENCE

    def test_unknown_policy_rejected(self):
        with patch.dict(os.environ, {"APP_AUTHORING_DEFAULT_POLICY": "sometimes"}, clear=True):
            with pytest.raises(ValidationError):
                FormSettings(_env_file=None)

    def test_page_size_must_be_positive(self):
        with pytest.raises(ValidationError):
            FormSettings(_env_file=None, owner_page_size=0)

    def test_init_by_field_name(self):
        assert FormSettings(_env_file=None, debounce_ms=10).debounce_seconds == pytest.approx(0.01)
