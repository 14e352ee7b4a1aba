"""
Tests for domain models — serialization, validation, catalogue shape.
"""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from quickalias.core.data.providers import PROVIDERS
from quickalias.core.errors import UserInputConflict
from quickalias.core.models import (
    AliasBlock,
    InstallResult,
    ModelOption,
    ProfileLocation,
    Settings,
    ShellProfile,
)


class TestProviderCatalogue:
    def test_ids_match_keys(self):
        for key, provider in PROVIDERS.items():
            assert provider.id == key

    def test_static_or_dynamic_models(self):
        for provider in PROVIDERS.values():
            if provider.dynamic_models:
                assert provider.fallback_models
            elif provider.accepts_model:
                assert provider.models

    def test_frozen(self):
        with pytest.raises(ValidationError):
            PROVIDERS["claude"].binary_name = "other"

    def test_model_option_hashable(self):
        assert len({ModelOption(name="a", value="a"), ModelOption(name="a", value="a")}) == 1


class TestInstallResult:
    def test_success(self):
        r = InstallResult.success("zsh", Path("/home/me/.zshrc"), removed_names=["gp"])
        assert r.ok
        assert not r.conflict
        assert r.to_dict() == {
            "status": "success",
            "shell": "zsh",
            "profile_path": "/home/me/.zshrc",
            "existing_names": [],
            "removed_names": ["gp"],
        }

    def test_conflict(self):
        r = InstallResult.conflicted(["gp", "gc"], Path("/p"))
        assert r.conflict
        assert r.kind == UserInputConflict.kind == "conflict"
        assert r.existing_names == ["gp", "gc"]

    def test_failure_json_round_trip(self):
        r = InstallResult.failure("disk full", profile_path=Path("/p"))
        data = json.loads(json.dumps(r.to_dict()))
        assert data["reason"] == "disk full"
        assert data["kind"] == "io"
        assert InstallResult.model_validate(data) == r


class TestSettings:
    def test_defaults(self):
        s = Settings()
        assert (s.push_alias, s.commit_alias, s.reload_alias) == ("gp", "gc", "rl")
        assert s.provider is None
        assert s.test_timeout == 60

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError):
            Settings(colour="blue")

    def test_positive_limits(self):
        with pytest.raises(ValidationError):
            Settings(diff_line_limit=0)

    def test_discovery_timeout_capped(self):
        with pytest.raises(ValidationError):
            Settings(discovery_timeout=11)


class TestProfileModels:
    def test_block_line_count(self):
        assert AliasBlock(name="gp", owner_kind="workflow", start=3, end=10).line_count == 7

    def test_shell_kind_validated(self):
        with pytest.raises(ValidationError):
            ProfileLocation(shell_kind="fish", path=Path("~/.config/fish/config.fish"))

    def test_profile_lines(self):
        p = ShellProfile(shell_kind="bash", path=Path("/p"), raw_text="a\n\nb")
        assert p.lines == ["a\n", "\n", "b"]
