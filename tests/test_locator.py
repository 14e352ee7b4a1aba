"""
Tests for shell profile location.
"""

from pathlib import Path

from quickalias.core.services.profile_locator import load_profile, locate_profile


class TestLocateProfile:
    def test_zsh_without_file(self, tmp_path: Path):
        loc = locate_profile({"SHELL": "/bin/zsh"}, home=tmp_path)
        assert loc.shell_kind == "zsh"
        assert loc.path == tmp_path / ".zshrc"

    def test_zsh_substring_match(self, tmp_path: Path):
        loc = locate_profile({"SHELL": "/opt/homebrew/bin/zsh-5.9"}, home=tmp_path)
        assert loc.shell_kind == "zsh"

    def test_bash_prefers_bashrc(self, tmp_path: Path):
        (tmp_path / ".bashrc").touch()
        (tmp_path / ".bash_profile").touch()
        loc = locate_profile({"SHELL": "/bin/bash"}, home=tmp_path)
        assert loc.path == tmp_path / ".bashrc"

    def test_bash_profile_when_no_bashrc(self, tmp_path: Path):
        (tmp_path / ".bash_profile").touch()
        loc = locate_profile({"SHELL": "/bin/bash"}, home=tmp_path)
        assert loc.shell_kind == "bash"
        assert loc.path == tmp_path / ".bash_profile"

    def test_fallback_bashrc(self, tmp_path: Path):
        loc = locate_profile({"SHELL": "/bin/bash"}, home=tmp_path)
        assert loc.path == tmp_path / ".bashrc"
        assert not loc.path.exists()

    def test_unknown_or_missing_shell_is_bash(self, tmp_path: Path):
        assert locate_profile({"SHELL": "/usr/bin/fish"}, home=tmp_path).shell_kind == "bash"
        assert locate_profile({}, home=tmp_path).shell_kind == "bash"

    def test_reads_process_environment(self, home: Path):
        assert locate_profile().path == home / ".bashrc"


class TestLoadProfile:
    def test_missing_is_empty(self, tmp_path: Path):
        profile = load_profile(locate_profile({}, home=tmp_path))
        assert profile.raw_text == ""
        assert profile.lines == []

    def test_lines_keep_endings(self, tmp_path: Path):
        (tmp_path / ".bashrc").write_text("a\nb\n")
        profile = load_profile(locate_profile({}, home=tmp_path))
        assert profile.lines == ["a\n", "b\n"]
