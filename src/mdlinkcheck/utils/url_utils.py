# src/mdlinkcheck/utils/url_utils.py
import logging
from typing import Optional, Tuple
from urllib.parse import unquote

logger = logging.getLogger(__name__)


class UrlUtils:
    """A collection of static methods for classifying and splitting link destinations."""

    @staticmethod
    def is_same_document_anchor(url: str) -> bool:
        return url.startswith("#")

    @staticmethod
    def is_external(url: str) -> bool:
        return url.startswith(("http://", "https://"))

    @staticmethod
    def is_mailto(url: str) -> bool:
        return url.startswith("mailto:")

    @staticmethod
    def split_fragment(url: str) -> Tuple[str, Optional[str]]:
        """
        Splits 'path?query#fragment' into ('path', 'fragment').
        The query string is dropped and the path is trimmed.
        An empty fragment ('page.md#') is returned as None.
        """
        without_hash, _, fragment = url.partition("#")
        path = without_hash.split("?", 1)[0].strip()
        return path, (fragment or None)

    @staticmethod
    def decode(value: str) -> str:
        """
        Percent-decodes a path or anchor.
        Sequences that do not decode to valid UTF-8 leave the input untouched.
        """
        try:
            return unquote(value, errors="strict")
        except UnicodeDecodeError:
            logger.debug("Could not percent-decode %r, keeping it as-is.", value)
            return value

    @staticmethod
    def strip_angle_brackets(value: str) -> str:
        """Drops the <...> wrapper used by autolinks and reference definitions."""
        if value.startswith("<") and value.endswith(">"):
            return value[1:-1].strip()
        return value

    @staticmethod
    def strip_baseurl(absolute_path: str, repo_name: str) -> str:
        """
        Turns a site-absolute path into a path relative to the publish root.

        '/guide/x.md'          -> 'guide/x.md'
        '/<repo>' or '/<repo>/' -> ''
        '/<repo>/guide/x.md'   -> 'guide/x.md'
        """
        relative = absolute_path.lstrip("/")
        if relative in (repo_name, f"{repo_name}/"):
            return ""
        prefix = f"{repo_name}/"
        if relative.startswith(prefix):
            return relative[len(prefix):]
        return relative
