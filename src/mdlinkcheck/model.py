# src/mdlinkcheck/model.py (Link Check Layer)
import logging
from enum import Enum
from pathlib import Path
from typing import Optional, List, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)


class LinkType(str, Enum):
    ANCHOR = "anchor"
    EXTERNAL = "external"
    EMAIL = "email"
    INTERNAL = "internal"
    ERROR = "error"


class LinkRecord(BaseModel):
    """A single link or image reference found in a Markdown document."""
    line: int
    column: int = 1
    text: str = ""
    url: str


class SiteRoots(BaseModel):
    scan_root: Path
    publish_root: Path
    repo_root: Path
    repo_name: str


class ExternalCheckResult(BaseModel):
    ok: bool
    reason: Optional[str] = None


class ValidationResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    valid: bool
    type: LinkType
    reason: Optional[str] = None
    external_ok: Optional[bool] = Field(default=None, alias="externalOk")

    @property
    def is_external_warning(self) -> bool:
        """Valid external links whose liveness check failed."""
        return self.valid and self.type == LinkType.EXTERNAL and self.external_ok is False


class LinkDetail(BaseModel):
    """A LinkRecord merged with its ValidationResult, as stored in fileDetails."""
    model_config = ConfigDict(populate_by_name=True)

    line: int
    column: int
    text: str
    url: str
    valid: bool
    type: LinkType
    reason: Optional[str] = None
    external_ok: Optional[bool] = Field(default=None, alias="externalOk")

    @classmethod
    def merge(cls, link: LinkRecord, result: ValidationResult) -> "LinkDetail":
        return cls(**link.model_dump(), **result.model_dump())


class LinkIssue(BaseModel):
    file: str
    line: int
    column: int
    url: str
    text: str
    reason: Optional[str] = None


class FileReadError(BaseModel):
    file: str
    message: str


class ReportSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_files: int = Field(alias="totalFiles")
    total_links: int = Field(alias="totalLinks")
    broken_links: int = Field(alias="brokenLinks")
    external_warnings: int = Field(alias="externalWarnings")
    file_read_errors: int = Field(alias="fileReadErrors")
    success: bool


class Report(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    summary: ReportSummary
    broken_links: List[LinkIssue] = Field(default_factory=list, alias="brokenLinks")
    external_warnings: List[LinkIssue] = Field(default_factory=list, alias="externalWarnings")
    file_read_errors: List[FileReadError] = Field(default_factory=list, alias="fileReadErrors")
    file_details: Dict[str, List[LinkDetail]] = Field(default_factory=dict, alias="fileDetails")

    def to_dict(self) -> dict:
        """Serializes the report in its public camelCase JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


DEFAULT_IGNORE = [
    "node_modules/**",
    "**/node_modules/**",
    "templates/**",
    "**/templates/**",
    "examples/**",
    "**/examples/**",
]


class ScanOptions(BaseModel):
    pattern: str = Field(default="**/*.md")
    ignore: List[str] = Field(default_factory=lambda: list(DEFAULT_IGNORE))
    check_external: bool = Field(default=False, description="Check http(s) links (warnings only).")
    external_timeout_ms: int = Field(default=10000)
    show_progress: bool = Field(default=False)

    @field_validator("external_timeout_ms", mode="before")
    @classmethod
    def _normalize_timeout(cls, v) -> int:
        try:
            value = int(v)
        except (TypeError, ValueError):
            logger.warning("Invalid external timeout %r, falling back to 10000 ms.", v)
            return 10000
        if value <= 0:
            logger.warning("External timeout must be positive, got %d ms; falling back to 10000 ms.", value)
            return 10000
        return value

    @property
    def external_timeout(self) -> float:
        return self.external_timeout_ms / 1000.0
