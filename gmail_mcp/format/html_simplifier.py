"""Layout-table unwrapping: flattens presentational tables before Markdown conversion.

Marketing and newsletter emails nest single-column ``<table>`` elements purely
for visual layout.  Converted as-is they become a mess of one-cell Markdown
tables, so they are replaced by their inner content here.  Tables that look
like genuine data (headers, several columns, many uniform rows) are left
untouched.
"""

import copy
import logging

from bs4 import BeautifulSoup, NavigableString, PageElement, Tag
from bs4.element import PreformattedString

logger = logging.getLogger(__name__)

# Upper bound on passes. A bottom-up pass flattens a whole chain of nested
# layout tables, so real documents converge in one or two.
MAX_PASSES = 10

# Rows beyond this many with text, all of equal width, read as tabular data.
_DATA_ROW_THRESHOLD = 5

_TABLE_TAGS = frozenset(
    {"table", "caption", "tbody", "thead", "tfoot", "tr", "td", "th"}
)
# Column metadata: no content, and not valid outside a table.
_COLUMN_TAGS = frozenset({"colgroup", "col"})
_CELL_TAGS = ("td", "th")
_LAYOUT_ID_MARKERS = ("layout", "wrapper")


def unwrap_table_layout(html_content: bytes) -> bytes:
    """Return ``html_content`` with single-column layout tables unwrapped.

    Never raises: if the document cannot be parsed or rendered the input is
    returned unchanged.  Running the function on its own output is a no-op.
    """
    try:
        doc = BeautifulSoup(html_content.decode("utf-8", errors="replace"), "html5lib")
    except Exception as exc:  # noqa: BLE001
        logger.debug("HTML parse failed, leaving content as-is: %s", exc)
        return html_content

    try:
        for _ in range(MAX_PASSES):
            if not _simplify_node(doc):
                break
        else:
            if any(should_unwrap_table(t) for t in doc.find_all("table")):
                logger.warning(
                    "Layout tables left after %d passes; "
                    "returning partially simplified HTML",
                    MAX_PASSES,
                )
        return doc.encode("utf-8")
    except RecursionError:
        logger.warning("HTML nesting too deep to simplify, leaving content as-is")
        return html_content


def _simplify_node(node: PageElement) -> bool:
    """One bottom-up pass over ``node``'s subtree.  Returns True if anything changed."""
    changed = False

    if isinstance(node, Tag):
        # Snapshot: unwrapping a child splices new siblings in front of it,
        # and those must not be revisited in this pass.
        for child in list(node.contents):
            if _simplify_node(child):
                changed = True

        if node.name == "table" and should_unwrap_table(node):
            _unwrap_table(node)
            changed = True

    return changed


# ── Classification ─────────────────────────────────────────────────────────────


def should_unwrap_table(table: Tag) -> bool:
    """Decide whether ``table`` is a layout table.  First matching rule wins."""
    if _has_table_headers(table):
        return False

    if _count_table_columns(table) > 1:
        return False

    # Structural ids such as "main" or "email-wrapper" mark layout tables even
    # when the row-count heuristic below would call them data.
    table_id = table.get("id")
    if isinstance(table_id, str) and (
        table_id == "main" or any(marker in table_id for marker in _LAYOUT_ID_MARKERS)
    ):
        return True

    if _count_content_rows(table) > _DATA_ROW_THRESHOLD and _has_consistent_row_structure(table):
        return False

    return True


def _has_table_headers(table: Tag) -> bool:
    return table.find(["th", "thead"]) is not None


def _count_cells_in_row(row: Tag) -> int:
    return sum(
        1 for c in row.children if isinstance(c, Tag) and c.name in _CELL_TAGS
    )


def _row_cell_counts(table: Tag) -> list[int]:
    return [_count_cells_in_row(row) for row in table.find_all("tr")]


def _count_table_columns(table: Tag) -> int:
    return max(_row_cell_counts(table), default=0)


def _count_content_rows(table: Tag) -> int:
    return sum(1 for row in table.find_all("tr") if _has_text_content(row))


def _has_text_content(node: PageElement) -> bool:
    if _is_text(node):
        text = node.strip()
        return text != "" and text != "&nbsp;"
    if isinstance(node, Tag):
        return any(_has_text_content(c) for c in node.children)
    return False


def _has_consistent_row_structure(table: Tag) -> bool:
    counts = _row_cell_counts(table)
    if len(counts) < 2:
        return False
    return all(count == counts[0] for count in counts[1:])


# ── Unwrapping ─────────────────────────────────────────────────────────────────


def _unwrap_table(table: Tag) -> None:
    """Replace ``table`` in its parent with its extracted content."""
    content: list[PageElement] = []
    _extract_table_content(table, content)

    if table.parent is None:
        return
    for node in content:
        table.insert_before(node)
    table.decompose()


def _extract_table_content(node: PageElement, content: list[PageElement]) -> None:
    """Collect ``node``'s content with table machinery stripped away.

    Non-table elements are deep-copied as a unit; their insides are not
    walked.  Caption text is promoted like cell text, column groups are
    dropped, and each row that yields anything is followed by a newline.
    """
    if isinstance(node, Tag):
        if node.name in _COLUMN_TAGS:
            return
        if node.name not in _TABLE_TAGS:
            content.append(copy.copy(node))
            return

        before = len(content)
        for child in node.children:
            _extract_table_content(child, content)
        if node.name == "tr" and len(content) > before:
            content.append(NavigableString("\n"))
    elif _is_text(node) and node.strip():
        content.append(NavigableString(str(node)))


def _is_text(node: PageElement) -> bool:
    """True for character data; comments, doctypes and CDATA are not text."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)
