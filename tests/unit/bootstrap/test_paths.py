"""Tests for tool cache path management."""

from __future__ import annotations

from pathlib import Path

from leaktask.bootstrap.paths import (
    AGENT_TOOLS_DIRECTORY_ENV,
    LEAKTASK_TOOL_CACHE_ENV,
    ToolCachePaths,
    get_tool_cache_root,
)


class TestGetToolCacheRoot:
    """Tests for cache root resolution."""

    def test_explicit_override_wins(self, tmp_path: Path) -> None:
        env = {
            LEAKTASK_TOOL_CACHE_ENV: str(tmp_path / "override"),
            AGENT_TOOLS_DIRECTORY_ENV: str(tmp_path / "agent"),
        }
        assert get_tool_cache_root(env) == tmp_path / "override"

    def test_agent_tools_directory(self, tmp_path: Path) -> None:
        env = {AGENT_TOOLS_DIRECTORY_ENV: str(tmp_path / "agent")}
        assert get_tool_cache_root(env) == tmp_path / "agent"

    def test_default_under_home(self) -> None:
        assert get_tool_cache_root({}) == Path.home() / ".leaktask" / "tools"

    def test_empty_values_ignored(self) -> None:
        env = {LEAKTASK_TOOL_CACHE_ENV: "", AGENT_TOOLS_DIRECTORY_ENV: ""}
        assert get_tool_cache_root(env) == Path.home() / ".leaktask" / "tools"


class TestToolCachePaths:
    """Tests for ToolCachePaths layout."""

    def test_entry_dir(self, tmp_path: Path) -> None:
        paths = ToolCachePaths(tmp_path)
        assert paths.entry_dir("gitleaks", "8.18.2", "linux-amd64") == (
            tmp_path / "gitleaks" / "8.18.2" / "linux-amd64"
        )

    def test_staging_dirs_are_unique_and_beside_entries(self, tmp_path: Path) -> None:
        paths = ToolCachePaths(tmp_path)
        first = paths.new_staging_dir("gitleaks")
        second = paths.new_staging_dir("gitleaks")

        assert first != second
        assert first.is_dir() and second.is_dir()
        assert paths.tool_dir("gitleaks") in first.parents

    def test_trash_dir_not_created(self, tmp_path: Path) -> None:
        paths = ToolCachePaths(tmp_path)
        trash = paths.new_trash_dir("gitleaks")
        assert not trash.exists()
        assert trash.parent.is_dir()

    def test_internal_names(self, tmp_path: Path) -> None:
        paths = ToolCachePaths(tmp_path)
        assert paths.is_internal(".staging")
        assert paths.is_internal(".trash")
        assert not paths.is_internal("8.18.2")
