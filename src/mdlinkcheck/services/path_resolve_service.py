# src/mdlinkcheck/services/path_resolve_service.py
import logging
import os
from pathlib import Path
from typing import Optional

from mdlinkcheck.model import LinkRecord, LinkType, SiteRoots, ValidationResult
from mdlinkcheck.services.anchor_index_service import AnchorIndexService
from mdlinkcheck.services.external_link_service import ExternalLinkService
from mdlinkcheck.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

INFERRED_EXTENSIONS = (".md", ".html")
INDEX_FILES = ("index.md", "index.html")


class PathResolveService:
    """
    Classifies a link and validates it against the site layout.

    Classification order: same-document anchor, external URL, mailto,
    internal file (with optional anchor). External checking is disabled
    when no ExternalLinkService is given.
    """

    def __init__(
            self,
            roots: SiteRoots,
            anchor_index: AnchorIndexService,
            external_service: Optional[ExternalLinkService] = None,
    ):
        self.roots = roots
        self.anchor_index = anchor_index
        self.external_service = external_service

    async def validate(self, link: LinkRecord, source_file: Path) -> ValidationResult:
        url = link.url

        if UrlUtils.is_same_document_anchor(url):
            return self._validate_same_document(source_file, url[1:])

        if UrlUtils.is_external(url):
            return await self._validate_external(url)

        if UrlUtils.is_mailto(url):
            return ValidationResult(valid=True, type=LinkType.EMAIL)

        return self._validate_internal(url, source_file)

    # -------- Same-document anchors --------

    def _validate_same_document(self, source_file: Path, anchor: str) -> ValidationResult:
        try:
            found = self.anchor_index.has_anchor(source_file, anchor)
        except (OSError, ValueError) as e:
            return ValidationResult(
                valid=False,
                type=LinkType.ERROR,
                reason=f"Failed to validate anchor #{anchor}: {e}",
            )
        if not found:
            return ValidationResult(valid=False, type=LinkType.ANCHOR, reason=f"Anchor #{anchor} not found")
        return ValidationResult(valid=True, type=LinkType.ANCHOR)

    # -------- External links --------

    async def _validate_external(self, url: str) -> ValidationResult:
        if self.external_service is None:
            return ValidationResult(valid=True, type=LinkType.EXTERNAL)

        result = await self.external_service.check(url)
        # External failures are warnings only
        return ValidationResult(
            valid=True,
            type=LinkType.EXTERNAL,
            external_ok=result.ok,
            reason=result.reason,
        )

    # -------- Internal links --------

    def resolve_path(self, decoded_path: str, source_file: Path) -> Path:
        """
        Maps a decoded link path onto the file system.

        Site-absolute paths ('/...') resolve against the publish root, with an
        optional '/<repo-name>' baseurl prefix removed. Everything else is
        relative to the directory of the linking document.
        """
        if decoded_path.startswith("/"):
            relative = UrlUtils.strip_baseurl(decoded_path, self.roots.repo_name)
            joined = self.roots.publish_root / relative if relative else self.roots.publish_root
        else:
            joined = source_file.parent / decoded_path
        return Path(os.path.normpath(joined))

    @staticmethod
    def locate(target: Path) -> Optional[Path]:
        """
        Finds the file a link points to, or None.

        Extensionless paths fall back to '.md' then '.html'; directories
        resolve to their index.md or index.html when present.
        """
        if not target.exists():
            if target.suffix:
                return None
            for ext in INFERRED_EXTENSIONS:
                candidate = Path(f"{target}{ext}")
                if candidate.exists():
                    target = candidate
                    break
            else:
                return None

        if target.is_dir():
            for index_name in INDEX_FILES:
                candidate = target / index_name
                if candidate.exists():
                    return candidate
        return target

    def _validate_internal(self, url: str, source_file: Path) -> ValidationResult:
        raw_path, anchor = UrlUtils.split_fragment(url)
        decoded_path = UrlUtils.strip_angle_brackets(UrlUtils.decode(raw_path))

        try:
            target = self.locate(self.resolve_path(decoded_path, source_file))
            if target is None:
                return ValidationResult(valid=False, type=LinkType.INTERNAL, reason="File not found")

            if anchor and not self.anchor_index.has_anchor(target, anchor):
                return ValidationResult(valid=False, type=LinkType.ANCHOR, reason=f"Anchor #{anchor} not found")

        except (OSError, ValueError) as e:
            logger.debug("Could not resolve %s from %s: %s", url, source_file, e)
            return ValidationResult(valid=False, type=LinkType.ERROR, reason=str(e))

        return ValidationResult(valid=True, type=LinkType.INTERNAL)
