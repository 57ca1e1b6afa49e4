"""Markdown rendering for display.

Content is always stored as raw markdown; these helpers are only used when
building responses. Comments come from untrusted readers so raw HTML in them
is escaped. Articles are written by trusted authors and may embed HTML.
"""

from markdown_it import MarkdownIt

_comment_md = MarkdownIt("commonmark", {"html": False, "linkify": False}).enable(
    ["table", "strikethrough"]
)
_article_md = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])

PREVIEW_LEN = 500
PREVIEW_PARAGRAPHS = 3
DESCRIPTION_LEN = 160


def render_comment(markdown: str) -> str:
    return _comment_md.render(markdown or "")


def render_article(markdown: str) -> str:
    return _article_md.render(markdown or "")


def preview(markdown: str) -> str:
    """Rendered article preview cut before the third paragraph.

    Short renders are returned whole.
    """
    rendered = render_article(markdown)
    if len(rendered) < PREVIEW_LEN:
        return rendered
    start = 0
    for _ in range(PREVIEW_PARAGRAPHS):
        idx = rendered.find("<p>", start)
        if idx == -1:
            return rendered
        start = idx + 1
    return rendered[: start - 1] + "…"


def description(markdown: str) -> str:
    """First characters of the raw content, used for summaries."""
    return (markdown or "")[:DESCRIPTION_LEN]


__all__ = ["render_comment", "render_article", "preview", "description"]
