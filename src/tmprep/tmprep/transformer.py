"""Layout-tag transformer - rewrites email layout tags into table markup.

Most email clients ignore CSS layout, so the four semantic tags used in the
templates are turned into nested tables:

    <container> -> <table><tbody>...</tbody></table>
    <row>       -> <tr>
    <columns>   -> <td>
    <button>    -> <a>

Children are moved into the new element unchanged, including the comment
tokens produced by the placeholder codec.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict

from bs4 import BeautifulSoup, Tag

from tmprep.errors import MarkupParseError

logger = logging.getLogger(__name__)

DEFAULT_BUTTON_STYLE = (
    "display: inline-block; padding: 8px 16px; border-radius: 3px; "
    "text-decoration: none;"
)

CONTAINER_ATTRS = {
    "align": "center",
    "width": "100%",
    "cellpadding": "0",
    "cellspacing": "0",
    "border": "0",
}


def _copy_class(source: Tag, attrs: Dict[str, object]) -> Dict[str, object]:
    css_class = source.get("class")
    if css_class:
        attrs["class"] = css_class
    return attrs


def _move_children(source: Tag, target: Tag) -> None:
    for child in list(source.contents):
        target.append(child.extract())


def _convert_container(soup: BeautifulSoup, node: Tag) -> Tag:
    table = soup.new_tag("table", attrs=_copy_class(node, dict(CONTAINER_ATTRS)))
    tbody = soup.new_tag("tbody")
    table.append(tbody)
    _move_children(node, tbody)
    return table


def _convert_row(soup: BeautifulSoup, node: Tag) -> Tag:
    attrs = _copy_class(node, {})
    background = node.get("background")
    if background:
        attrs["style"] = f"background: {background};"
    tr = soup.new_tag("tr", attrs=attrs)
    _move_children(node, tr)
    return tr


def _convert_columns(soup: BeautifulSoup, node: Tag) -> Tag:
    padding = node.get("padding") or "0"
    attrs = _copy_class(node, {})
    attrs["style"] = f"padding: {padding};"
    td = soup.new_tag("td", attrs=attrs)
    _move_children(node, td)
    return td


def _convert_button(soup: BeautifulSoup, node: Tag) -> Tag:
    attrs: Dict[str, object] = {"href": node.get("href") or "#"}
    _copy_class(node, attrs)
    attrs["style"] = node.get("style") or DEFAULT_BUTTON_STYLE
    link = soup.new_tag("a", attrs=attrs)
    _move_children(node, link)
    return link


CONVERTERS: Dict[str, Callable[[BeautifulSoup, Tag], Tag]] = {
    "container": _convert_container,
    "row": _convert_row,
    "columns": _convert_columns,
    "button": _convert_button,
}


def transform_tree(soup: BeautifulSoup) -> BeautifulSoup:
    """Rewrite every layout tag in `soup` in place and return it."""
    for tag_name, convert in CONVERTERS.items():
        nodes = soup.find_all(tag_name)
        for node in nodes:
            node.replace_with(convert(soup, node))
        if nodes:
            logger.debug("Converted %d <%s> element(s)", len(nodes), tag_name)
    return soup


def transform(html: str) -> str:
    """Parse `html`, rewrite its layout tags and serialize it again.

    Raises:
        MarkupParseError: If the document cannot be parsed or rewritten.
    """
    try:
        soup = BeautifulSoup(html, "html.parser")
        return transform_tree(soup).decode(formatter="minimal")
    except Exception as e:
        raise MarkupParseError(f"Could not transform markup: {e}") from e
