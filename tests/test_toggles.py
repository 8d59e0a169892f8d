"""Tests for toggle requests and the status tree."""

import pytest
from pydantic import ValidationError

from casual_tools.models.catalog import Catalog
from casual_tools.models.selection import ALL_TOOLS, NO_TOOLS, explicit
from casual_tools.status_tree import build_status_tree
from casual_tools.toggles import ToggleRequest, build_update

FS = ["filesystem_list", "filesystem_read", "filesystem_write"]


def _apply(selection, catalog, **request):
    return build_update(ToggleRequest(**request))(selection, catalog)


class TestToggleRequest:
    @pytest.mark.parametrize(
        "request_data, message",
        [
            ({"target": "plugin"}, "requires a plugin name"),
            ({"target": "server"}, "requires a server id"),
            ({"target": "select_server"}, "requires a server id"),
            ({"target": "server_tool", "server": "1"}, "requires a tool id"),
        ],
    )
    def test_missing_arguments(self, request_data, message):
        with pytest.raises(ValidationError, match=message):
            ToggleRequest(**request_data)

    def test_unknown_target(self):
        with pytest.raises(ValidationError):
            ToggleRequest(target="everything")

    def test_valid_requests(self):
        assert ToggleRequest(target="all_plugins").visible is None
        assert ToggleRequest(target="server_tool", server="1", tool="tool1_1").tool == "tool1_1"


class TestBuildUpdate:
    def test_plugin(self, catalog):
        result = _apply(ALL_TOOLS, catalog, target="plugin", plugin="filesystem")
        assert result == explicit(["web_search", "tool1_1", "tool2_1", "tool3_2", "tool4_2"])

    def test_all_plugins(self, catalog):
        result = _apply(ALL_TOOLS, catalog, target="all_plugins")
        assert result == explicit(["tool1_1", "tool2_1", "tool3_2", "tool4_2"])

    def test_server(self, catalog):
        result = _apply(explicit(["web_search"]), catalog, target="server", server="2")
        assert result == explicit(["web_search", "tool3_2", "tool4_2"])

    def test_server_tool(self, catalog):
        result = _apply(
            explicit(["web_search"]), catalog, target="server_tool", server="1", tool="tool2_1"
        )
        assert result == explicit(["web_search", "tool2_1"])

    def test_unknown_server_is_a_no_op(self, catalog):
        selection = explicit(["web_search"])
        assert _apply(selection, catalog, target="server", server="9") == selection

    def test_unknown_server_tool_is_a_no_op(self, catalog):
        selection = explicit(["web_search"])
        result = _apply(selection, catalog, target="server_tool", server="1", tool="tool3_2")
        assert result == selection

    def test_select_all_without_filter(self, catalog):
        assert _apply(NO_TOOLS, catalog, target="select_all") == ALL_TOOLS

    def test_select_all_with_filter_keeps_hidden_tools(self, catalog):
        result = _apply(
            explicit(["tool3_2"]), catalog, target="select_all", visible=["tool1_1"]
        )
        assert result == explicit(["tool3_2", "tool1_1"])

    def test_unselect_all_without_filter(self, catalog):
        assert _apply(ALL_TOOLS, catalog, target="unselect_all") == NO_TOOLS

    def test_unselect_all_with_filter_keeps_hidden_tools(self, catalog):
        result = _apply(
            explicit(["tool3_2", "tool1_1"]), catalog, target="unselect_all", visible=["tool1_1"]
        )
        assert result == explicit(["tool3_2"])

    def test_select_plugins(self, catalog):
        result = _apply(NO_TOOLS, catalog, target="select_plugins", visible=["search"])
        assert result == explicit(["web_search"])

    def test_unselect_plugins(self, catalog):
        result = _apply(ALL_TOOLS, catalog, target="unselect_plugins")
        assert result == explicit(["tool1_1", "tool2_1", "tool3_2", "tool4_2"])

    def test_select_server(self, catalog):
        result = _apply(NO_TOOLS, catalog, target="select_server", server="1")
        assert result == explicit(["tool1_1", "tool2_1"])

    def test_unselect_server_with_filter(self, catalog):
        result = _apply(
            ALL_TOOLS, catalog, target="unselect_server", server="1", visible=["tool2_1"]
        )
        assert result == explicit(["web_search", *FS, "tool1_1", "tool3_2", "tool4_2"])


class TestBuildStatusTree:
    def test_all_tools(self, catalog):
        view = build_status_tree(ALL_TOOLS, catalog)

        assert view.tool_selection is None
        assert view.status == "all"
        assert view.plugins.status == "all"
        assert [p.id for p in view.plugins.plugins] == ["search", "filesystem"]
        assert all(s.status == "all" for s in view.servers)

    def test_partial_selection(self, catalog):
        view = build_status_tree(explicit(["filesystem_read", "tool1_1"]), catalog)

        assert view.tool_selection == ["filesystem_read", "tool1_1"]
        assert view.status == "some"
        assert view.plugins.status == "some"
        plugins = {p.id: p.status for p in view.plugins.plugins}
        assert plugins == {"search": "none", "filesystem": "all"}

        server1, server2 = view.servers
        assert server1.status == "some"
        assert {t.id: t.status for t in server1.tools} == {"tool1_1": "all", "tool2_1": "none"}
        assert server2.status == "none"

    def test_labels(self, catalog):
        view = build_status_tree(NO_TOOLS, catalog)
        server1 = view.servers[0]

        assert server1.label == "1"
        assert server1.tools[0].label == "tool1"
        assert view.tool_selection == []

    def test_disabled_server_is_left_out(self, server1, server2):
        catalog = Catalog(servers=(server1, server2.model_copy(update={"enabled": False})))
        view = build_status_tree(ALL_TOOLS, catalog)
        assert [s.id for s in view.servers] == ["1"]
