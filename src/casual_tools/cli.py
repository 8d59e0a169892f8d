import asyncio
import gc
import warnings
from typing import Any

import questionary
import typer
import uvicorn
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from casual_tools.catalog import describe_catalog
from casual_tools.models.catalog import Catalog
from casual_tools.models.mcp_server_config import RemoteServerConfig
from casual_tools.models.selection import AllTools, ToolSelection
from casual_tools.selection_store import (
    SelectionStore,
    SelectionUpdate,
    SessionExistsError,
    SessionNotFoundError,
)
from casual_tools.status_tree import build_status_tree
from casual_tools.tool_filter import enabled_tool_ids, unknown_tool_ids
from casual_tools.tool_search_index import ToolSearchIndex
from casual_tools.tool_status import ToolStatus
from casual_tools.toggles import ToggleRequest, ToggleTarget, build_update
from casual_tools.utils import default_config_path, load_config

app = typer.Typer()
console = Console()

_STATUS_MARKS: dict[str, str] = {
    "all": "[green]\\[x][/green]",
    "some": "[yellow]\\[~][/yellow]",
    "none": "[dim]\\[ ][/dim]",
}


def run_async_with_cleanup(coro: Any) -> Any:
    """Run async coroutine with proper subprocess cleanup.

    This wrapper filters/ignores the "Event loop is closed" warning that occurs
    when subprocess transports don't finish cleanup before the event loop closes.
    It also forces gc.collect() after execution to help clean up remaining transports.
    """
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", message="Event loop is closed")
        try:
            return asyncio.run(coro)
        finally:
            # Force garbage collection to clean up any remaining transports
            gc.collect()


def _store() -> SelectionStore:
    return SelectionStore(default_config_path())


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]{message}[/red]")
    return typer.Exit(code=1)


def _mark(status: ToolStatus) -> str:
    return _STATUS_MARKS[status]


def _format_selection(selection: ToolSelection) -> str:
    """Format a persisted selection for display.

    Note: Brackets are escaped for Rich console output.
    """
    if isinstance(selection, AllTools):
        return "\\[all tools]"
    if not selection.tool_ids:
        return "\\[no tools]"
    return f"{len(selection.tool_ids)} tools"


def _render_status(name: str, selection: ToolSelection, catalog: Catalog) -> Tree:
    view = build_status_tree(selection, catalog)
    tree = Tree(f"{_mark(view.status)} [bold]{name}[/bold] {_format_selection(selection)}")

    plugins = tree.add(f"{_mark(view.plugins.status)} Plugins")
    for plugin in view.plugins.plugins:
        plugins.add(f"{_mark(plugin.status)} {plugin.label}")

    for server in view.servers:
        branch = tree.add(f"{_mark(server.status)} {server.label}")
        for tool in server.tools:
            branch.add(f"{_mark(tool.status)} {tool.label} [dim]({tool.id})[/dim]")

    return tree


def _apply(session: str, update: SelectionUpdate) -> None:
    store = _store()
    try:
        selection, catalog = run_async_with_cleanup(store.update(session, update))
    except SessionNotFoundError as e:
        raise _fail(str(e))

    console.print(_render_status(session, selection, catalog))


def _filtered_update(
    target: ToggleTarget,
    query: str | None,
    server: str | None = None,
) -> SelectionUpdate:
    """Build an update whose visible ids come from a search over the fresh catalog."""

    def update(selection: ToolSelection, catalog: Catalog) -> ToolSelection:
        visible: list[str] | None = None
        if query is not None:
            index = ToolSearchIndex(catalog)
            if target in ("select_plugins", "unselect_plugins"):
                visible = index.visible_plugin_names(query)
            else:
                visible = index.visible_tool_ids(query, group=server)
        request = ToggleRequest(target=target, server=server, visible=visible)
        return build_update(request)(selection, catalog)

    return update


@app.command()
def serve(host: str = "0.0.0.0", port: int = 8000, reload: bool = True) -> None:
    """
    Start the Casual Tools API server.
    """
    uvicorn.run("casual_tools.main:app", host=host, port=port, reload=reload, app_dir="src")


@app.command()
def plugins() -> None:
    """
    Return a table of all configured plugins
    """
    config = load_config(default_config_path())
    table = Table("Name", "Type", "Tool ids", "Enabled")

    for name, plugin in config.plugins.items():
        plugin_type = "multi" if plugin.multi else "single"
        enabled = "yes" if plugin.enabled else "[dim]no[/dim]"
        table.add_row(name, plugin_type, ", ".join(plugin.tool_ids(name)), enabled)

    console.print(table)


@app.command()
def servers() -> None:
    """
    Return a table of all configured servers
    """
    config = load_config(default_config_path())
    table = Table("Name", "Type", "Command / Url", "Enabled")

    for name, server in config.servers.items():
        if isinstance(server, RemoteServerConfig):
            server_type = "remote"
            path = server.url
        else:
            server_type = "stdio"
            path = f"{server.command} {' '.join(server.args)}"
        enabled = "yes" if server.enabled else "[dim]no[/dim]"

        table.add_row(server.label or name, server_type, path, enabled)

    console.print(table)


@app.command()
def tools() -> None:
    """
    Return a table of every tool available for selection
    """
    catalog = run_async_with_cleanup(_store().catalog())
    table = Table("Id", "Name", "Source", "Description")

    for plugin in catalog.plugins:
        for tool_id in plugin.tool_ids:
            table.add_row(tool_id, tool_id, f"plugin: {plugin.name}", "")

    for server in catalog.servers:
        if not server.enabled:
            continue
        for tool in server.tools:
            table.add_row(tool.uuid, tool.name, f"server: {server.display_name}", tool.description)

    console.print(table)


@app.command()
def describe() -> None:
    """
    Print a plain-text description of the available tools
    """
    catalog = run_async_with_cleanup(_store().catalog())
    console.print(describe_catalog(catalog), markup=False)


@app.command()
def sessions() -> None:
    """
    Return a table of all configured sessions
    """
    config = load_config(default_config_path())
    table = Table("Name", "Description", "Tools")

    for name, session in config.sessions.items():
        table.add_row(name, session.description, _format_selection(session.tool_selection))

    console.print(table)


@app.command()
def status(session: str) -> None:
    """
    Show which tools a session may call
    """
    store = _store()
    try:
        selection = store.get_selection(session)
    except SessionNotFoundError as e:
        raise _fail(str(e))

    catalog = run_async_with_cleanup(store.catalog())
    console.print(_render_status(session, selection, catalog))


@app.command()
def create(session: str, description: str = "") -> None:
    """
    Create a session with every tool enabled
    """
    try:
        run_async_with_cleanup(_store().create_session(session, description))
    except SessionExistsError as e:
        raise _fail(str(e))
    console.print(f"[green]Created session '{session}'[/green]")


@app.command()
def delete(session: str) -> None:
    """
    Delete a session after confirmation
    """
    confirmed = questionary.confirm(f"Delete session '{session}'?", default=False).ask()
    if not confirmed:
        return

    try:
        run_async_with_cleanup(_store().delete_session(session))
    except SessionNotFoundError as e:
        raise _fail(str(e))
    console.print(f"[green]Deleted session '{session}'[/green]")


@app.command()
def toggle(
    session: str,
    plugin: str | None = typer.Option(None, help="Toggle one plugin"),
    all_plugins: bool = typer.Option(False, "--all-plugins", help="Toggle every plugin"),
    server: str | None = typer.Option(None, help="Toggle every tool of a server"),
    tool: str | None = typer.Option(None, help="With --server, toggle one tool by its id"),
) -> None:
    """
    Toggle a plugin, every plugin, a server or a single server tool
    """
    if plugin is not None:
        request = ToggleRequest(target="plugin", plugin=plugin)
    elif all_plugins:
        request = ToggleRequest(target="all_plugins")
    elif server is not None and tool is not None:
        request = ToggleRequest(target="server_tool", server=server, tool=tool)
    elif server is not None:
        request = ToggleRequest(target="server", server=server)
    else:
        raise _fail("Nothing to toggle: pass --plugin, --all-plugins or --server")

    _apply(session, build_update(request))


@app.command("select-all")
def select_all(
    session: str,
    plugins: bool = typer.Option(False, "--plugins", help="Only plugin tools"),
    server: str | None = typer.Option(None, help="Only the tools of this server"),
    query: str | None = typer.Option(None, "--filter", help="Only tools matching this search"),
) -> None:
    """
    Select every tool, optionally scoped to plugins or a server and narrowed by a search
    """
    if plugins:
        target: ToggleTarget = "select_plugins"
    elif server is not None:
        target = "select_server"
    else:
        target = "select_all"

    _apply(session, _filtered_update(target, query, server))


@app.command("unselect-all")
def unselect_all(
    session: str,
    plugins: bool = typer.Option(False, "--plugins", help="Only plugin tools"),
    server: str | None = typer.Option(None, help="Only the tools of this server"),
    query: str | None = typer.Option(None, "--filter", help="Only tools matching this search"),
) -> None:
    """
    Unselect every tool, optionally scoped to plugins or a server and narrowed by a search
    """
    if plugins:
        target: ToggleTarget = "unselect_plugins"
    elif server is not None:
        target = "unselect_server"
    else:
        target = "unselect_all"

    _apply(session, _filtered_update(target, query, server))


@app.command()
def edit(session: str) -> None:
    """Interactively pick the tools of a session."""
    store = _store()
    try:
        selection = store.get_selection(session)
    except SessionNotFoundError as e:
        raise _fail(str(e))

    catalog = run_async_with_cleanup(store.catalog())
    enabled = set(enabled_tool_ids(selection, catalog))

    choices: list[Any] = []
    for plugin in catalog.plugins:
        for tool_id in plugin.tool_ids:
            choices.append(
                questionary.Choice(
                    title=f"{plugin.name}: {tool_id}", value=tool_id, checked=tool_id in enabled
                )
            )
    for server in catalog.servers:
        if not server.enabled:
            continue
        for tool in server.tools:
            choices.append(
                questionary.Choice(
                    title=f"{server.display_name}: {tool.name}",
                    value=tool.uuid,
                    checked=tool.uuid in enabled,
                )
            )

    if not choices:
        console.print("[yellow]No tools are currently available[/yellow]")
        return

    console.print("\n[dim]Use space to select, enter to confirm[/dim]")
    selected = questionary.checkbox(f"Tools for {session}:", choices=choices).ask()
    if selected is None:
        raise typer.Abort()

    # Ids outside the catalog are not shown, keep them as they were
    selected = selected + unknown_tool_ids(selection, catalog)
    new_selection, catalog = run_async_with_cleanup(store.import_selection(session, selected))
    console.print(_render_status(session, new_selection, catalog))


if __name__ == "__main__":
    app()
