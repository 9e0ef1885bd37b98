# src/mdlinkcheck/services/markdown_link_service.py
from __future__ import annotations

import logging
from typing import List, Optional

from markdown_it import MarkdownIt
from markdown_it.token import Token
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.front_matter import front_matter_plugin

from mdlinkcheck.model import LinkRecord

logger = logging.getLogger(__name__)

# Inline token types that contribute to the visible text of a link
_TEXT_TOKEN_TYPES = ("text", "code_inline", "image")


def create_markdown_parser() -> MarkdownIt:
    """
    Builds the tokenizer shared by link extraction and anchor indexing.

    - linkify: bare URLs in prose become links (never inside code).
    - footnote: `[^id]` references get their own token type.
    - front_matter: a leading YAML block is not parsed as body content.
    """
    return (
        MarkdownIt("js-default", {"linkify": True})
        .use(footnote_plugin)
        .use(front_matter_plugin)
    )


class MarkdownLinkService:
    """
    Extracts links and images from Markdown text.
    Note: This is a stateless service apart from the reusable tokenizer.
    """

    def __init__(self, md: Optional[MarkdownIt] = None):
        self.md = md or create_markdown_parser()

    def tokenize(self, content: str) -> List[Token]:
        return self.md.parse(content)

    @staticmethod
    def _collect_link_text(children: List[Token], start: int) -> str:
        """Concatenates text, inline code and image alt text up to the link_close."""
        parts: List[str] = []
        for token in children[start:]:
            if token.type == "link_close":
                break
            if token.type in _TEXT_TOKEN_TYPES:
                parts.append(token.content or "")
        return "".join(parts)

    def extract_links(self, content: str) -> List[LinkRecord]:
        """
        Returns every link and image reference in document order.
        A tokenizer failure is logged and yields no links.
        """
        try:
            tokens = self.tokenize(content)
        except Exception as e:
            logger.warning("Markdown tokenizer failed, skipping link extraction: %s", e)
            return []

        links: List[LinkRecord] = []

        for token in tokens:
            if token.type != "inline" or not token.children:
                continue

            line = token.map[0] + 1 if token.map else 1
            children = token.children

            for i, child in enumerate(children):
                if child.type == "link_open":
                    href = child.attrGet("href")
                    if not href:
                        continue
                    links.append(LinkRecord(
                        line=line,
                        text=self._collect_link_text(children, i + 1).strip(),
                        url=str(href),
                    ))

                elif child.type == "image":
                    src = child.attrGet("src")
                    if not src:
                        continue
                    links.append(LinkRecord(
                        line=line,
                        text=(child.content or "").strip(),
                        url=str(src),
                    ))

        return links
