"""Tests for the CLI commands."""

import json
from unittest.mock import patch

import pytest
import typer

from casual_tools.cli import (
    _format_selection,
    create,
    delete,
    describe,
    edit,
    plugins,
    select_all,
    servers,
    sessions,
    status,
    toggle,
    tools,
    unselect_all,
)
from casual_tools.models.selection import ALL_TOOLS, NO_TOOLS, explicit


@pytest.fixture
def cli_env(store, config_path):
    """Point the CLI at the test config and capture console output."""
    with (
        patch("casual_tools.cli._store", return_value=store),
        patch("casual_tools.cli.default_config_path", return_value=config_path),
        patch("casual_tools.cli.console") as mock_console,
    ):
        yield mock_console


def _toggle(session, plugin=None, all_plugins=False, server=None, tool=None):
    toggle(session, plugin=plugin, all_plugins=all_plugins, server=server, tool=tool)


class TestFormatSelection:
    def test_formats(self):
        assert _format_selection(ALL_TOOLS) == "\\[all tools]"
        assert _format_selection(NO_TOOLS) == "\\[no tools]"
        assert _format_selection(explicit(["a", "b"])) == "2 tools"


class TestListingCommands:
    def test_plugins_table(self, cli_env):
        plugins()

        table = cli_env.print.call_args[0][0]
        assert list(table.columns[0].cells) == ["search", "filesystem", "python"]
        assert list(table.columns[1].cells) == ["single", "multi", "single"]
        assert list(table.columns[2].cells)[1] == (
            "filesystem_list, filesystem_read, filesystem_write"
        )
        assert list(table.columns[3].cells)[2] == "[dim]no[/dim]"

    def test_servers_table(self, cli_env):
        servers()

        table = cli_env.print.call_args[0][0]
        assert list(table.columns[0].cells) == ["1"]
        assert list(table.columns[1].cells) == ["stdio"]
        assert list(table.columns[2].cells) == ["python -m server_one"]

    def test_tools_table(self, cli_env):
        tools()

        table = cli_env.print.call_args[0][0]
        assert list(table.columns[0].cells) == [
            "web_search",
            "filesystem_list",
            "filesystem_read",
            "filesystem_write",
            "tool1_1",
            "tool2_1",
        ]
        assert list(table.columns[2].cells)[-1] == "server: 1"

    def test_describe(self, cli_env):
        describe()

        text = cli_env.print.call_args[0][0]
        assert text.startswith("Available Tools:")
        assert "- web_search: provided by the search plugin" in text
        assert cli_env.print.call_args.kwargs == {"markup": False}

    def test_sessions_table(self, cli_env):
        sessions()

        table = cli_env.print.call_args[0][0]
        assert list(table.columns[0].cells) == ["research", "writer"]
        assert list(table.columns[2].cells) == ["\\[all tools]", "1 tools"]


class TestStatus:
    def test_renders_tree(self, cli_env):
        status("writer")

        tree = cli_env.print.call_args[0][0]
        assert "writer" in tree.label
        plugins_branch, server_branch = tree.children
        assert "Plugins" in plugins_branch.label
        assert len(plugins_branch.children) == 2
        assert len(server_branch.children) == 2

    def test_unknown_session_exits(self, cli_env):
        with pytest.raises(typer.Exit) as exc_info:
            status("nonexistent")
        assert exc_info.value.exit_code == 1


class TestSessionCommands:
    def test_create(self, cli_env, store):
        create("planner", description="Plans")

        assert store.get_session("planner").description == "Plans"
        assert store.get_selection("planner") == ALL_TOOLS

    def test_create_existing_exits(self, cli_env):
        with pytest.raises(typer.Exit):
            create("research", description="")

    def test_delete_confirmed(self, cli_env, store):
        with patch("casual_tools.cli.questionary") as mock_questionary:
            mock_questionary.confirm.return_value.ask.return_value = True
            delete("writer")

        assert "writer" not in store.sessions()

    def test_delete_declined(self, cli_env, store):
        with patch("casual_tools.cli.questionary") as mock_questionary:
            mock_questionary.confirm.return_value.ask.return_value = False
            delete("writer")

        assert "writer" in store.sessions()


class TestToggleCommands:
    def test_toggle_plugin(self, cli_env, store):
        _toggle("writer", plugin="search")
        assert store.get_selection("writer") == NO_TOOLS

    def test_toggle_all_plugins(self, cli_env, store):
        _toggle("research", all_plugins=True)
        assert store.get_selection("research") == explicit(["tool1_1", "tool2_1"])

    def test_toggle_server(self, cli_env, store):
        _toggle("writer", server="1")
        assert store.get_selection("writer") == explicit(["web_search", "tool1_1", "tool2_1"])

    def test_toggle_server_tool(self, cli_env, store):
        _toggle("writer", server="1", tool="tool2_1")
        assert store.get_selection("writer") == explicit(["web_search", "tool2_1"])

    def test_toggle_without_target_exits(self, cli_env):
        with pytest.raises(typer.Exit):
            _toggle("writer")

    def test_toggle_unknown_session_exits(self, cli_env):
        with pytest.raises(typer.Exit):
            _toggle("nonexistent", plugin="search")

    def test_select_all(self, cli_env, store):
        select_all("writer", plugins=False, server=None, query=None)
        assert store.get_selection("writer") == ALL_TOOLS

    def test_select_all_server(self, cli_env, store):
        select_all("writer", plugins=False, server="1", query=None)
        assert store.get_selection("writer") == explicit(["web_search", "tool1_1", "tool2_1"])

    def test_unselect_all(self, cli_env, store):
        unselect_all("research", plugins=False, server=None, query=None)
        assert store.get_selection("research") == NO_TOOLS

    def test_unselect_all_plugins(self, cli_env, store):
        unselect_all("research", plugins=True, server=None, query=None)
        assert store.get_selection("research") == explicit(["tool1_1", "tool2_1"])

    def test_unselect_all_with_filter(self, cli_env, store):
        """Only the tools matching the search are unselected."""
        unselect_all("research", plugins=False, server=None, query="filesystem")
        assert store.get_selection("research") == explicit(["web_search", "tool1_1", "tool2_1"])


class TestEdit:
    def test_replaces_selection(self, cli_env, store):
        with patch("casual_tools.cli.questionary") as mock_questionary:
            mock_questionary.checkbox.return_value.ask.return_value = ["tool1_1"]
            edit("writer")

        assert store.get_selection("writer") == explicit(["tool1_1"])

    def test_keeps_ids_outside_catalog(self, cli_env, store, config_path, sample_config_data):
        sample_config_data["sessions"]["writer"]["tool_selection"] = ["web_search", "retired_tool"]
        config_path.write_text(json.dumps(sample_config_data), encoding="utf-8")

        with patch("casual_tools.cli.questionary") as mock_questionary:
            mock_questionary.checkbox.return_value.ask.return_value = ["tool1_1"]
            edit("writer")

        assert store.get_selection("writer") == explicit(["tool1_1", "retired_tool"])

    def test_cancel_aborts(self, cli_env, store):
        with patch("casual_tools.cli.questionary") as mock_questionary:
            mock_questionary.checkbox.return_value.ask.return_value = None
            with pytest.raises(typer.Abort):
                edit("writer")

        assert store.get_selection("writer") == explicit(["web_search"])
