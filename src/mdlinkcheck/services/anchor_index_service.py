# src/mdlinkcheck/services/anchor_index_service.py
import logging
import re
import unicodedata
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Set, Union

from markdown_it.token import Token

from mdlinkcheck.services.markdown_link_service import MarkdownLinkService
from mdlinkcheck.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIXES = (".md", ".markdown")

# `## Title {#custom-id}`
EXPLICIT_HEADING_ID = re.compile(r"\{#([A-Za-z0-9][A-Za-z0-9_-]*)\}")
EXPLICIT_HEADING_ID_WITH_SPACE = re.compile(r"\s*\{#([A-Za-z0-9][A-Za-z0-9_-]*)\}\s*")
# `<a id="custom-id"></a>` and friends
HTML_ID_ATTRIBUTE = re.compile(r'\bid="([^"]+)"')
# kramdown block attribute list: `{: #custom-id}`
KRAMDOWN_BLOCK_ID = re.compile(r"\{:\s*#([A-Za-z0-9][A-Za-z0-9_-]*)\s*\}")

_WHITESPACE_RUN = re.compile(r"\s+")
_HYPHEN_RUN = re.compile(r"-+")


def _is_slug_char(ch: str) -> bool:
    return ch.isspace() or ch == "-" or unicodedata.category(ch)[0] in ("L", "N")


def normalize_slug(text: str) -> str:
    """
    Turns heading text into its anchor slug.

    Unicode letters and numbers are kept so that non-Latin headings
    (e.g. Japanese) stay linkable; everything else except whitespace
    and hyphens is dropped.
    """
    slug = (text or "").strip().lower()
    slug = "".join(ch for ch in slug if _is_slug_char(ch))
    slug = _WHITESPACE_RUN.sub("-", slug)
    slug = _HYPHEN_RUN.sub("-", slug)
    return slug.strip("-")


class HeadingSlugger:
    """
    Generates slugs for the headings of one document, in order.
    The first occurrence keeps the bare slug; later duplicates get -1, -2, ...
    """

    def __init__(self):
        self.seen: Dict[str, int] = {}

    def slug(self, text: str) -> str:
        base = normalize_slug(text)
        if not base:
            return ""
        if base not in self.seen:
            self.seen[base] = 0
            return base
        self.seen[base] += 1
        return f"{base}-{self.seen[base]}"


class AnchorIndexService:
    """
    Builds and caches the set of valid anchors per Markdown document.
    One instance lives for exactly one scan.
    """

    def __init__(self, link_service: Optional[MarkdownLinkService] = None):
        self.link_service = link_service or MarkdownLinkService()
        self.cache: Dict[str, FrozenSet[str]] = {}

    @staticmethod
    def is_markdown(file_path: Union[str, Path]) -> bool:
        return str(file_path).endswith(MARKDOWN_SUFFIXES)

    def _heading_anchors(self, tokens: List[Token]) -> List[str]:
        anchors: List[str] = []
        slugger = HeadingSlugger()

        for i, token in enumerate(tokens):
            if token.type != "heading_open":
                continue
            inline = tokens[i + 1] if i + 1 < len(tokens) else None
            if inline is None or inline.type != "inline":
                continue
            heading_text = inline.content or ""

            for match in EXPLICIT_HEADING_ID.finditer(heading_text):
                explicit = match.group(1).strip().lower()
                if explicit:
                    anchors.append(explicit)

            cleaned = EXPLICIT_HEADING_ID_WITH_SPACE.sub(" ", heading_text).strip()
            slug = slugger.slug(cleaned)
            if slug:
                anchors.append(slug)

        return anchors

    def build_index(self, content: str) -> FrozenSet[str]:
        """Collects heading slugs, explicit heading IDs, HTML ids and kramdown IDs."""
        anchors: Set[str] = set()

        try:
            tokens = self.link_service.tokenize(content)
        except Exception as e:
            logger.warning("Markdown tokenizer failed, indexing explicit ids only: %s", e)
            tokens = []

        anchors.update(self._heading_anchors(tokens))

        for pattern in (HTML_ID_ATTRIBUTE, KRAMDOWN_BLOCK_ID):
            for match in pattern.finditer(content):
                anchor_id = match.group(1).strip().lower()
                if anchor_id:
                    anchors.add(anchor_id)

        return frozenset(anchors)

    def get_anchors(self, file_path: Union[str, Path]) -> FrozenSet[str]:
        """Returns the cached anchor set, reading the file on first use. I/O errors propagate."""
        key = str(file_path)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        content = Path(file_path).read_text(encoding="utf-8")
        anchors = self.build_index(content)
        self.cache[key] = anchors
        logger.debug("Indexed %d anchors in %s", len(anchors), key)
        return anchors

    def has_anchor(self, file_path: Union[str, Path], anchor: str) -> bool:
        """
        Checks whether `anchor` exists in `file_path`.

        The requested anchor is matched verbatim (decoded, lowercased) first and
        then in slugified form, so both `#my-title` and `#My%20Title` match
        a `## My Title` heading. Non-Markdown targets cannot be inspected and
        always validate.
        """
        if not self.is_markdown(file_path):
            return True

        requested = UrlUtils.decode((anchor or "").strip()).lower()
        anchors = self.get_anchors(file_path)

        if requested in anchors:
            return True
        alternative = normalize_slug(requested)
        return bool(alternative) and alternative in anchors
