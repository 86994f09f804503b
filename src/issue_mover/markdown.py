"""Convert GitHub-rendered issue HTML back into GitHub Flavored Markdown.

Issue and comment bodies are fetched as server-rendered HTML, so that the
moved content no longer carries live cross-references that would resolve
differently in the target repository. ``markdownify`` does the conversion;
``GithubMarkdownConverter`` only adds what is particular to GitHub's HTML:

- highlighted code blocks (``<div class="highlight highlight-source-<lang>">``)
  keep their language and their text verbatim
- user and team mentions become plain profile links unless they are meant to
  stay live
- heading permalinks, task-list checkboxes, ``<details>`` and camo image URLs
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from bs4.element import Tag
from markdownify import ATX, BACKSLASH, MarkdownConverter, chomp

if TYPE_CHECKING:
    from collections.abc import Set

_HIGHLIGHT_PREFIX = "highlight-"
_LANGUAGE_PREFIX = "source-"

GFM_OPTIONS: dict[str, Any] = {
    "heading_style": ATX,
    "bullets": "-",
    "newline_style": BACKSLASH,
    "escape_asterisks": True,
    "escape_underscores": True,
    "escape_misc": True,
}


def _classes(node: Tag | None) -> list[str]:
    if node is None:
        return []
    value = node.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return list(value)


def _highlight_language(node: Tag) -> str | None:
    """Language of a ``<pre>`` inside GitHub's syntax highlighting wrapper."""
    parent = node.parent if isinstance(node.parent, Tag) else None
    if parent is None or parent.name != "div":
        return None
    classes = _classes(parent)
    if "highlight" not in classes:
        return None
    for cls in classes:
        if cls.startswith(_HIGHLIGHT_PREFIX):
            return cls.removeprefix(_HIGHLIGHT_PREFIX).removeprefix(_LANGUAGE_PREFIX)
    return None


def _fence_for(text: str, marker: str = "```") -> str:
    fence = marker
    while fence in text:
        fence += marker[0]
    return fence


class GithubMarkdownConverter(MarkdownConverter):
    """markdownify converter for the HTML GitHub renders for issues and comments.

    Args:
        keep_content_mentions: Leave user mentions (and same-owner team
            mentions) live instead of turning them into plain links
        same_owner: Source and target repositories have the same owner, which
            is required for team mentions to resolve
        **options: markdownify options, on top of ``GFM_OPTIONS``
    """

    keep_content_mentions: bool
    same_owner: bool

    def __init__(self, *, keep_content_mentions: bool = False, same_owner: bool = True, **options: Any) -> None:  # noqa: ANN401
        super().__init__(**{**GFM_OPTIONS, **options})
        self.keep_content_mentions = keep_content_mentions
        self.same_owner = same_owner

    def convert_pre(self, el: Tag, text: str, parent_tags: Set[str]) -> str:
        language = _highlight_language(el)
        if language is not None:
            code = el.get_text()
        else:
            language = str(el.get("lang") or "")
            # <pre><code> blocks end with the newline preceding the closing fence
            code = el.get_text().removesuffix("\n")
        if not code:
            return ""
        fence = _fence_for(code)
        return f"\n\n{fence}{language}\n{code}\n{fence}\n\n"

    def convert_code(self, el: Tag, text: str, parent_tags: Set[str]) -> str:
        if "_noformat" in parent_tags:
            return text
        code = el.get_text()
        if not code:
            return ""
        fence = _fence_for(code, "`")
        padding = " " if code.startswith("`") or code.endswith("`") else ""
        return f"{fence}{padding}{code}{padding}{fence}"

    def convert_a(self, el: Tag, text: str, parent_tags: Set[str]) -> str:
        classes = _classes(el)
        if "anchor" in classes:
            return ""
        if "user-mention" in classes:
            return self._mention(el, live=self.keep_content_mentions)
        if "team-mention" in classes:
            # Teams only resolve within their own organization
            return self._mention(el, live=self.keep_content_mentions and self.same_owner)
        # Images are wrapped in a link to themselves
        elements = [child for child in el.children if isinstance(child, Tag)]
        if len(elements) == 1 and elements[0].name == "img" and not el.get_text(strip=True):
            return text
        return super().convert_a(el, text, parent_tags)

    def _mention(self, el: Tag, *, live: bool) -> str:
        mention = el.get_text().strip()
        if live:
            return mention
        return f"[{mention.removeprefix('@')}]({el.get('href', '')})"

    def convert_img(self, el: Tag, text: str, parent_tags: Set[str]) -> str:
        alt = str(el.get("alt") or "")
        if "_inline" in parent_tags:
            return alt
        src = el.get("data-canonical-src") or el.get("src") or ""
        if not src:
            return ""
        return f"![{alt}]({src})"

    def convert_del(self, el: Tag, text: str, parent_tags: Set[str]) -> str:
        if "_noformat" in parent_tags:
            return text
        prefix, suffix, text = chomp(text)
        if not text:
            return ""
        return f"{prefix}~~{text}~~{suffix}"

    convert_s = convert_del
    convert_strike = convert_del

    def convert_input(self, el: Tag, text: str, parent_tags: Set[str]) -> str:
        if el.get("type") != "checkbox":
            return text
        return "[x]" if el.has_attr("checked") else "[ ]"

    def convert_details(self, el: Tag, text: str, parent_tags: Set[str]) -> str:
        summary = el.find("summary", recursive=False)
        summary_text = summary.get_text(" ", strip=True) if isinstance(summary, Tag) else ""
        open_attr = " open" if el.has_attr("open") else ""
        return f"\n\n<details{open_attr}>\n<summary>{summary_text}</summary>\n\n{text.strip()}\n\n</details>\n\n"

    def convert_summary(self, el: Tag, text: str, parent_tags: Set[str]) -> str:
        # Rendered by convert_details
        return ""

    def convert_svg(self, el: Tag, text: str, parent_tags: Set[str]) -> str:
        return ""

    convert_script = convert_svg
    convert_style = convert_svg
    convert_template = convert_svg


def html_to_markdown(html: str | None, *, keep_content_mentions: bool = False, same_owner: bool = True) -> str:
    """Convert rendered issue or comment HTML to Markdown.

    Args:
        html: Server-rendered body (``body_html``); None or empty yields ""
        keep_content_mentions: Keep user mentions live (team mentions only
            when ``same_owner``)
        same_owner: Whether source and target share the same owner

    Returns:
        Markdown text without leading or trailing blank lines
    """
    if not html:
        return ""
    converter = GithubMarkdownConverter(keep_content_mentions=keep_content_mentions, same_owner=same_owner)
    return converter.convert(html).strip()
