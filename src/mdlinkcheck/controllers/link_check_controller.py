# src/mdlinkcheck/controllers/link_check_controller.py
from __future__ import annotations

import asyncio
import logging
from contextlib import AsyncExitStack
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from tqdm.auto import tqdm

from mdlinkcheck.model import (
    FileReadError,
    LinkDetail,
    LinkIssue,
    LinkRecord,
    LinkType,
    Report,
    ReportSummary,
    ScanOptions,
    SiteRoots,
    ValidationResult,
)
from mdlinkcheck.services.anchor_index_service import AnchorIndexService
from mdlinkcheck.services.external_link_service import ExternalLinkService
from mdlinkcheck.services.http_request_service import HttpRequestService
from mdlinkcheck.services.markdown_link_service import MarkdownLinkService
from mdlinkcheck.services.path_resolve_service import PathResolveService
from mdlinkcheck.services.site_root_service import SiteRootService
from mdlinkcheck.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)


class LinkCheckController:
    """
    Orchestrates one link check over a directory of Markdown files.

    Documents are processed one at a time and links in document order, so
    the report is deterministic for unchanged input. The anchor and
    external-result caches live on this instance and are rebuilt for every
    call to `check_directory`.
    """

    def __init__(self, options: Optional[ScanOptions] = None, config: Optional[Dict[str, Any]] = None):
        self.options = options or ScanOptions()
        self.config = config or {}
        self._reset()

    def _reset(self) -> None:
        self.broken_links: List[LinkIssue] = []
        self.external_warnings: List[LinkIssue] = []
        self.file_errors: List[FileReadError] = []
        self.file_links: Dict[str, List[LinkDetail]] = {}

        self.link_service = MarkdownLinkService()
        self.anchor_index = AnchorIndexService(self.link_service)
        self.external_service: Optional[ExternalLinkService] = None
        self.resolver: Optional[PathResolveService] = None
        self.roots: Optional[SiteRoots] = None

    def _build_http_service(self) -> HttpRequestService:
        service_config = {
            "session": {
                "time_out": self.options.external_timeout,
                "max_redirects": int(self.config.get("session", {}).get("max_redirects", 10)),
            }
        }
        user_agent = self.config.get("link_checker", {}).get("user_agent")
        return HttpRequestService(service_config, user_agent=user_agent)

    async def check_directory(self, directory: Union[str, Path]) -> Report:
        """
        Scans every matching Markdown file below `directory`.
        Raises only when the directory itself cannot be used as a scan root.
        """
        self._reset()
        self.roots = SiteRootService.resolve(directory)
        base_dir = self.roots.scan_root

        logger.info("Checking links in %s...", base_dir)
        files = PathUtils.discover_files(base_dir, self.options.pattern, self.options.ignore)
        logger.info("Found %d markdown files", len(files))

        async with AsyncExitStack() as stack:
            if self.options.check_external:
                http_service = await stack.enter_async_context(self._build_http_service())
                self.external_service = ExternalLinkService(http_service, timeout=self.options.external_timeout)

            self.resolver = PathResolveService(self.roots, self.anchor_index, self.external_service)

            iterator = files
            if self.options.show_progress:
                iterator = tqdm(files, desc="Checking links", unit="file")

            for file_path in iterator:
                await self.check_file(file_path, base_dir)

        return self.generate_report()

    async def _validate(self, link: LinkRecord, file_path: Path) -> ValidationResult:
        try:
            return await self.resolver.validate(link, file_path)
        except Exception as e:
            logger.error("Unexpected error validating %s in %s: %s", link.url, file_path, e, exc_info=True)
            return ValidationResult(valid=False, type=LinkType.ERROR, reason=str(e) or e.__class__.__name__)

    async def check_file(self, file_path: Path, base_dir: Path) -> None:
        relative_file = PathUtils.to_relative(file_path, base_dir)
        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self.file_errors.append(FileReadError(file=relative_file, message=str(e)))
            logger.warning("Failed to read \"%s\": %s", relative_file, e)
            return

        links = self.link_service.extract_links(content)
        if not links:
            return

        logger.debug("Checking %s (%d links)", relative_file, len(links))
        details = self.file_links.setdefault(relative_file, [])

        for link in links:
            result = await self._validate(link, file_path)
            details.append(LinkDetail.merge(link, result))

            if not result.valid:
                self.broken_links.append(self._issue(relative_file, link, result))
            elif result.is_external_warning:
                self.external_warnings.append(self._issue(relative_file, link, result))

    @staticmethod
    def _issue(relative_file: str, link: LinkRecord, result: ValidationResult) -> LinkIssue:
        return LinkIssue(
            file=relative_file,
            line=link.line,
            column=link.column,
            url=link.url,
            text=link.text,
            reason=result.reason,
        )

    def generate_report(self) -> Report:
        total_links = sum(len(links) for links in self.file_links.values())
        summary = ReportSummary(
            total_files=len(self.file_links),
            total_links=total_links,
            broken_links=len(self.broken_links),
            external_warnings=len(self.external_warnings),
            file_read_errors=len(self.file_errors),
            success=not self.broken_links and not self.file_errors,
        )
        return Report(
            summary=summary,
            broken_links=list(self.broken_links),
            external_warnings=list(self.external_warnings),
            file_read_errors=list(self.file_errors),
            file_details={name: list(links) for name, links in self.file_links.items()},
        )

    def run(self, directory: Union[str, Path]) -> Report:
        """Synchronous entry point for callers without an event loop."""
        return asyncio.run(self.check_directory(directory))
