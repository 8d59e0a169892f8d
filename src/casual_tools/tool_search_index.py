"""BM25-based search over the tool catalog.

Filtered views of the catalog (a search box above the tool checkboxes, the
``--filter`` option of the CLI) need the list of tool ids and plugin names a
query matches. Those lists are what the filter-aware select/unselect
operations take as their ``visible_*`` arguments.
"""

import re
from dataclasses import dataclass

from rank_bm25 import BM25Okapi  # type: ignore[import-untyped]

from casual_tools.logging import get_logger
from casual_tools.models.catalog import Catalog

logger = get_logger("tool_search_index")

_SPLIT_RE = re.compile(r"[\s_]+")


def _tokenize(text: str) -> list[str]:
    """Tokenize text by lowercasing and splitting on whitespace and underscores.

    Tool ids use underscores as word separators (``filesystem_read``,
    ``get_forecast___weather``), so splitting on both gives useful tokens.
    """
    return [tok for tok in _SPLIT_RE.split(text.lower()) if tok]


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    """One selectable tool.

    ``group`` is the plugin name for plugin tools and the server id for
    server tools.
    """

    tool_id: str
    name: str
    description: str
    group: str
    is_plugin: bool


def catalog_entries(catalog: Catalog) -> list[CatalogEntry]:
    entries: list[CatalogEntry] = []
    for plugin in catalog.plugins:
        if not plugin.enabled:
            continue
        for tool_id in plugin.tool_ids:
            entries.append(CatalogEntry(tool_id, tool_id, plugin.name, plugin.name, True))
    for server in catalog.servers:
        if not server.enabled:
            continue
        for tool in server.tools:
            entries.append(CatalogEntry(tool.uuid, tool.name, tool.description, server.id, False))
    return entries


class ToolSearchIndex:
    """BM25 index over the tools of a catalog.

    Tools are indexed by name, description and group (plugin name or server
    id), so a query naming a plugin or server matches all of its tools.
    """

    def __init__(self, catalog: Catalog) -> None:
        self._entries = catalog_entries(catalog)

        self._corpus: list[list[str]] = [
            _tokenize(f"{entry.name} {entry.description} {entry.group}")
            for entry in self._entries
        ]

        # BM25Okapi requires at least one document
        self._bm25 = BM25Okapi(self._corpus) if self._corpus else None

        logger.debug(f"Built search index with {len(self._entries)} tools")

    def search(self, query: str, max_results: int | None = None) -> list[CatalogEntry]:
        """Return the entries matching a query, best match first.

        Only entries with a positive BM25 score are returned. An empty query
        matches nothing.
        """
        if self._bm25 is None or not query.strip():
            return []

        tokenized_query = _tokenize(query)
        scores = self._bm25.get_scores(tokenized_query)

        scored: list[tuple[float, int]] = [
            (float(scores[i]), i) for i in range(len(self._entries)) if scores[i] > 0
        ]

        # BM25Okapi gives IDF=0 to a term found in every document, which
        # happens with tiny catalogs. Fall back to counting shared tokens.
        if not scored:
            query_tokens = set(tokenized_query)
            for i, tokens in enumerate(self._corpus):
                overlap = len(query_tokens & set(tokens))
                if overlap > 0:
                    scored.append((float(overlap), i))

        scored.sort(key=lambda item: (-item[0], item[1]))
        results = [self._entries[i] for _score, i in scored]
        if max_results is not None:
            results = results[:max_results]
        return results

    def visible_tool_ids(self, query: str, group: str | None = None) -> list[str]:
        """Tool ids a filtered view shows for ``query``, in catalog order.

        Args:
            query: The filter text
            group: Restrict to one plugin or server
        """
        matched = {
            entry.tool_id
            for entry in self.search(query)
            if group is None or entry.group == group
        }
        return [entry.tool_id for entry in self._entries if entry.tool_id in matched]

    def visible_plugin_names(self, query: str) -> list[str]:
        """Plugin names a filtered view shows for ``query``, in catalog order."""
        matched = {entry.group for entry in self.search(query) if entry.is_plugin}
        names = dict.fromkeys(entry.group for entry in self._entries if entry.is_plugin)
        return [name for name in names if name in matched]

    @property
    def tool_count(self) -> int:
        return len(self._entries)
