# src/mdlinkcheck/utils/path_utils.py
import logging
from fnmatch import fnmatch
from pathlib import Path
from typing import Iterable, List

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for package paths and Markdown file discovery.
    """

    # --- Package specific paths

    @staticmethod
    def get_package_root() -> Path:
        """Returns the directory of the installed mdlinkcheck package."""
        return Path(__file__).resolve().parent.parent

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_package_root() / "settings.json"

    # --- Scan helpers ---

    @staticmethod
    def to_relative(path: Path, base_dir: Path) -> str:
        """
        Returns `path` relative to `base_dir` using forward slashes.
        Falls back to the absolute path when `path` lives outside `base_dir`.
        """
        try:
            return path.relative_to(base_dir).as_posix()
        except ValueError:
            return path.as_posix()

    @staticmethod
    def is_ignored(relative_path: str, ignore: Iterable[str]) -> bool:
        return any(fnmatch(relative_path, pattern) for pattern in ignore)

    @staticmethod
    def relative_pattern(base_dir: Path, pattern: str) -> str:
        """
        Rewrites an absolute glob pattern relative to `base_dir`.
        Raises ValueError when the pattern points outside `base_dir`.
        """
        pattern_path = Path(pattern)
        if not pattern_path.is_absolute():
            return pattern

        # Resolve the literal prefix so it compares against a resolved base_dir.
        parts = pattern_path.parts
        literal = 0
        while literal < len(parts) and not any(c in parts[literal] for c in "*?["):
            literal += 1
        prefix = Path(*parts[:literal]).resolve()
        rest = parts[literal:]

        try:
            relative = prefix.relative_to(base_dir)
        except ValueError:
            raise ValueError(f"Pattern {pattern!r} is outside the scan root {base_dir}") from None
        return Path(relative, *rest).as_posix()

    @staticmethod
    def discover_files(base_dir: Path, pattern: str, ignore: Iterable[str]) -> List[Path]:
        """
        Finds files below `base_dir` matching the glob `pattern`.

        Files keep their logical path below `base_dir`; symlinks are not
        resolved, so relative links are read from where the document appears.
        Ignore patterns are matched against the path relative to `base_dir`.
        Hidden files and anything inside hidden directories are skipped.
        The result is sorted so that scans are deterministic.
        """
        ignore = list(ignore or [])
        found: List[Path] = []

        for candidate in base_dir.glob(PathUtils.relative_pattern(base_dir, pattern)):
            if not candidate.is_file():
                continue
            relative = PathUtils.to_relative(candidate, base_dir)
            if any(part.startswith(".") for part in relative.split("/")):
                continue
            if PathUtils.is_ignored(relative, ignore):
                logger.debug("Ignoring %s", relative)
                continue
            found.append(base_dir / relative)

        return sorted(set(found))
