"""
Basic tests for writing artifacts to disk.
"""

import pytest

from k8gen.artifacts import write_files
from k8gen.artifacts.write import ensure_output_dir, resolve_artifact_path
from k8gen.errors import ArtifactWriteError, K8GenError


def test_creates_missing_directories(tmp_path):
    target = tmp_path / "out" / "deep"
    written = write_files({"Dockerfile": "FROM scratch", "k8s/deployment.yaml": "kind: Deployment"}, target)

    assert written == [target / "Dockerfile", target / "k8s" / "deployment.yaml"]
    assert (target / "Dockerfile").read_text(encoding="utf-8") == "FROM scratch"
    assert (target / "k8s" / "deployment.yaml").read_text(encoding="utf-8") == "kind: Deployment"


def test_existing_directory_and_overwrite(tmp_path):
    (tmp_path / "a.txt").write_text("old")
    write_files({"a.txt": "new"}, tmp_path)
    assert (tmp_path / "a.txt").read_text() == "new"


def test_content_written_verbatim(tmp_path):
    write_files({"a.txt": "line1\r\nline2 ü"}, tmp_path)
    assert (tmp_path / "a.txt").read_bytes() == "line1\r\nline2 ü".encode("utf-8")


def test_empty_set_creates_directory(tmp_path):
    target = tmp_path / "k8s"
    assert write_files({}, target) == []
    assert target.is_dir()


@pytest.mark.parametrize("bad_path", ["../evil.txt", "a/../../evil.txt", "/etc/evil.txt", "", "."])
def test_unsafe_paths_rejected(tmp_path, bad_path):
    target = tmp_path / "out"
    with pytest.raises(ArtifactWriteError):
        write_files({bad_path: "x"}, target)
    assert not (tmp_path / "evil.txt").exists()


def test_inner_dotdot_allowed(tmp_path):
    path = resolve_artifact_path(tmp_path, "k8s/../Dockerfile")
    assert path.resolve() == (tmp_path / "Dockerfile").resolve()


def test_stops_at_first_failure(tmp_path):
    """Files before the failure stay written; later ones are not attempted."""
    files = {"ok.txt": "1", "../bad.txt": "2", "later.txt": "3"}
    with pytest.raises(ArtifactWriteError):
        write_files(files, tmp_path / "out")
    assert (tmp_path / "out" / "ok.txt").exists()
    assert not (tmp_path / "out" / "later.txt").exists()


def test_output_dir_is_a_file(tmp_path):
    blocker = tmp_path / "k8s"
    blocker.write_text("not a directory")
    with pytest.raises(ArtifactWriteError) as exc_info:
        ensure_output_dir(blocker)
    assert exc_info.value.path == str(blocker)


def test_file_write_failure_reports_path(tmp_path):
    files = {"blocker": "x", "blocker/child.txt": "y"}
    with pytest.raises(ArtifactWriteError) as exc_info:
        write_files(files, tmp_path)
    assert exc_info.value.path.endswith("child.txt")
    assert "Failed to write" in str(exc_info.value)


def test_error_hierarchy():
    err = ArtifactWriteError("a.txt", "disk full")
    assert isinstance(err, K8GenError)
    assert isinstance(err, OSError)
    assert str(err) == "Failed to write a.txt: disk full"
