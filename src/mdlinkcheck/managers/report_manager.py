# src/mdlinkcheck/managers/report_manager.py
import json
import logging
from pathlib import Path
from typing import List, Union

from mdlinkcheck.model import LinkIssue, Report

logger = logging.getLogger(__name__)


class ReportManager:
    """
    Serializes link check reports and renders the console summary.
    """

    @staticmethod
    def to_json(report: Report, indent: int = 2, ensure_ascii: bool = False) -> str:
        return json.dumps(report.to_dict(), ensure_ascii=ensure_ascii, indent=indent)

    def save_report(self, report: Report, output_path: Union[str, Path]) -> Path:
        path = Path(output_path)
        path.write_text(self.to_json(report), encoding="utf-8")
        logger.info("Report saved to %s", path)
        return path

    @staticmethod
    def _format_issues(issues: List[LinkIssue]) -> List[str]:
        lines = []
        for issue in issues:
            lines.append(f"  {issue.file}:{issue.line}:{issue.column}")
            lines.append(f"    Link: [{issue.text}]({issue.url})")
            lines.append(f"    Reason: {issue.reason}")
            lines.append("")
        return lines

    def format_summary(self, report: Report) -> str:
        summary = report.summary
        lines = [
            "",
            "📊 Link Check Summary",
            "─" * 40,
            f"Total files checked: {summary.total_files}",
            f"Total links found: {summary.total_links}",
        ]
        if summary.file_read_errors:
            lines.append(f"Files failed to read: {summary.file_read_errors}")
        if summary.external_warnings:
            lines.append(f"External link warnings: {summary.external_warnings}")

        if summary.broken_links == 0:
            lines.append("✅ All links are valid!")
        else:
            lines.append(f"❌ Found {summary.broken_links} broken links:")
            lines.append("")
            lines.extend(self._format_issues(report.broken_links))

        if summary.external_warnings:
            lines.append("")
            lines.append("⚠️ External link warnings (best-effort):")
            lines.append("")
            lines.extend(self._format_issues(report.external_warnings))

        return "\n".join(lines)
