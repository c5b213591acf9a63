"""Default renderer and index builder used by the CLI."""

from __future__ import annotations

import html
import re

import markdown

from verso_core.config.models import RenderConfig
from verso_core.sync.models import DirectoryNode, IndexEntry

_HEADING_RE = re.compile(r"^#{1,6}\s+(.+?)\s*#*\s*$", re.MULTILINE)

PAGE_TEMPLATE = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


def page(title: str, body: str) -> str:
    """Wrap an HTML fragment in a minimal page shell."""
    return PAGE_TEMPLATE.format(title=html.escape(title), body=body)


class MarkdownRenderer:
    """Converts Markdown to a standalone HTML page."""

    def __init__(self, config: RenderConfig | None = None) -> None:
        self.config = config or RenderConfig()

    def render(self, source: str) -> str:
        body = markdown.markdown(source, extensions=self.config.markdown_extensions)
        return page(self._title(source), body)

    def _title(self, source: str) -> str:
        if self.config.title_from_heading:
            match = _HEADING_RE.search(source)
            if match:
                return match.group(1)
        return ""


class HtmlIndexBuilder:
    """Renders a directory listing as a bulleted list of links."""

    def build(self, directory: DirectoryNode, entries: list[IndexEntry]) -> str:
        items = "\n".join(
            f'<li class="{entry.kind}"><a href="{html.escape(entry.href, quote=True)}">'
            f"{html.escape(entry.name)}</a></li>"
            for entry in entries
        )
        title = directory.rel_path or directory.name
        return page(title, f"<h1>{html.escape(title)}</h1>\n<ul>\n{items}\n</ul>")
