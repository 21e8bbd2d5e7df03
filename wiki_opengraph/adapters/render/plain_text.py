"""
Plain text renderer for wiki syntax.

Turns page titles and content into plain text, the way crawlers and social
previews expect descriptions: markup removed, entities decoded, macros
expanded.

Macros use the ``{{name/}}`` form. Each registered macro is a callable
receiving the request context and returning plain text. Macros run during
rendering, so a macro can re-enter anything that renders the same page.
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable
from typing import Any

from wiki_opengraph.components.opengraph.ports import RenderError

Macro = Callable[[Any], str]

MACRO_PATTERN = re.compile(r"\{\{\s*([\w.-]+)((?:\s+\w+=\"[^\"]*\")*)\s*/\}\}")
HEADING_PATTERN = re.compile(r"^[ \t]*(=+|#+)[ \t]*(.*?)[ \t]*=*[ \t]*$", re.MULTILINE)
LINK_PATTERN = re.compile(r"\[\[(?:(.*?)>>)?(.*?)\]\]")
TAG_PATTERN = re.compile(r"<(/?)(\w+)([^>]*)>", re.IGNORECASE)
EMPHASIS_PATTERN = re.compile(r"(\*\*|__|~~)(.+?)\1")
BLANK_LINES_PATTERN = re.compile(r"\n{3,}")


class PlainTextRenderer:
    """Wiki syntax to plain text."""

    def __init__(self, macros: dict[str, Macro] | None = None) -> None:
        self._macros: dict[str, Macro] = dict(macros or {})

    def register_macro(self, name: str, macro: Macro) -> None:
        self._macros[name] = macro

    def render(self, source: str, context: Any = None) -> str:
        """
        Render source to plain text.

        Raises:
            RenderError: If a macro is unknown or fails
        """
        text = MACRO_PATTERN.sub(lambda m: self._expand(m.group(1), context), source)
        text = HEADING_PATTERN.sub(lambda m: m.group(2), text)
        text = LINK_PATTERN.sub(lambda m: m.group(1) or m.group(2), text)
        text = TAG_PATTERN.sub("", text)
        text = EMPHASIS_PATTERN.sub(lambda m: m.group(2), text)
        text = html.unescape(text)

        lines = [" ".join(line.split()) for line in text.splitlines()]
        return BLANK_LINES_PATTERN.sub("\n\n", "\n".join(lines)).strip()

    def _expand(self, name: str, context: Any) -> str:
        macro = self._macros.get(name)
        if macro is None:
            raise RenderError(f"Unknown macro [{name}]")
        try:
            return macro(context)
        except RenderError:
            raise
        except Exception as e:
            raise RenderError(f"Macro [{name}] failed: {e}") from e
