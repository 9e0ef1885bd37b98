# tests/services/test_site_root_service.py
import pytest

from mdlinkcheck.services.site_root_service import SiteRootService


def test_plain_directory(tmp_path):
    roots = SiteRootService.resolve(tmp_path)
    root = tmp_path.resolve()

    assert roots.scan_root == root
    assert roots.publish_root == root
    assert roots.repo_root == root
    assert roots.repo_name == root.name


def test_repository_with_docs_site(tmp_path):
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "_config.yml").write_text("title: t\n", encoding="utf-8")

    roots = SiteRootService.resolve(tmp_path)
    root = tmp_path.resolve()

    assert roots.publish_root == root / "docs"
    assert roots.repo_root == root
    assert roots.repo_name == root.name


def test_scanning_docs_directly(tmp_path):
    docs = tmp_path / "book" / "docs"
    docs.mkdir(parents=True)
    (docs / "_config.yml").write_text("title: t\n", encoding="utf-8")

    roots = SiteRootService.resolve(docs)

    assert roots.scan_root == docs.resolve()
    assert roots.publish_root == docs.resolve()
    assert roots.repo_root == (tmp_path / "book").resolve()
    assert roots.repo_name == "book"


def test_docs_directory_without_config_is_plain(tmp_path):
    docs = tmp_path / "docs"
    docs.mkdir()

    roots = SiteRootService.resolve(docs)
    assert roots.repo_root == docs.resolve()
    assert roots.repo_name == "docs"


def test_missing_scan_root_is_fatal(tmp_path):
    with pytest.raises(FileNotFoundError):
        SiteRootService.resolve(tmp_path / "absent")


def test_file_scan_root_is_fatal(tmp_path):
    target = tmp_path / "file.md"
    target.write_text("", encoding="utf-8")
    with pytest.raises(NotADirectoryError):
        SiteRootService.resolve(target)
