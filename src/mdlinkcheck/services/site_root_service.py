# src/mdlinkcheck/services/site_root_service.py
import logging
from pathlib import Path
from typing import Union

from mdlinkcheck.model import SiteRoots

logger = logging.getLogger(__name__)

SITE_CONFIG_FILE = "_config.yml"
PUBLISH_DIR_NAME = "docs"


class SiteRootService:
    """
    Determines the scan root, publish root and repository root for a scan.

    GitHub Pages can publish either the repository root or its docs/ folder.
    Absolute links in the documents are relative to whichever directory is
    published, optionally prefixed with the repository name (baseurl).
    """

    @staticmethod
    def resolve(directory: Union[str, Path]) -> SiteRoots:
        scan_root = Path(directory).resolve()

        if not scan_root.exists():
            raise FileNotFoundError(f"Scan root does not exist: {scan_root}")
        if not scan_root.is_dir():
            raise NotADirectoryError(f"Scan root is not a directory: {scan_root}")

        publish_root = scan_root
        repo_root = scan_root

        if (scan_root / PUBLISH_DIR_NAME / SITE_CONFIG_FILE).exists():
            # Repository root scanned, site served from its docs/ folder
            publish_root = scan_root / PUBLISH_DIR_NAME
        elif scan_root.name == PUBLISH_DIR_NAME and (scan_root / SITE_CONFIG_FILE).exists():
            # docs/ scanned directly, repository is its parent
            repo_root = scan_root.parent

        roots = SiteRoots(
            scan_root=scan_root,
            publish_root=publish_root,
            repo_root=repo_root,
            repo_name=repo_root.name,
        )
        logger.debug(
            "Site roots: scan=%s publish=%s repo=%s (name=%s)",
            roots.scan_root, roots.publish_root, roots.repo_root, roots.repo_name,
        )
        return roots
