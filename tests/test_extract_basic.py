"""
Basic tests for delimited file extraction.
"""

import logging

import yaml

from k8gen.artifacts import extract_files, files_to_yaml, format_files


def block(path, content):
    return f"-----BEGIN_FILE: {path}-----\n{content}\n-----END_FILE: {path}-----"


def test_noise_outside_blocks_ignored():
    """Text before and after the blocks is dropped."""
    blob = "ignore me\n-----BEGIN_FILE: a.txt-----\nhello\n-----END_FILE: a.txt-----\nmore noise"
    assert extract_files(blob) == {"a.txt": "hello"}


def test_empty_and_none_blob():
    assert extract_files("") == {}
    assert extract_files(None) == {}
    assert extract_files("no blocks here at all") == {}


def test_multiple_blocks_keep_order():
    blob = "\n".join([
        "Here are your files:",
        block("Dockerfile", "FROM eclipse-temurin:21-jre\nEXPOSE 8080"),
        "and the manifests",
        block("k8s/deployment.yaml", "kind: Deployment"),
        block("k8s/service.yaml", "kind: Service"),
    ])
    files = extract_files(blob)
    assert list(files) == ["Dockerfile", "k8s/deployment.yaml", "k8s/service.yaml"]
    assert files["Dockerfile"] == "FROM eclipse-temurin:21-jre\nEXPOSE 8080"


def test_content_is_trimmed():
    blob = block("a.txt", "\n\n  padded  \n\n")
    assert extract_files(blob) == {"a.txt": "padded"}


def test_empty_content_block():
    blob = "-----BEGIN_FILE: empty.txt-----\n-----END_FILE: empty.txt-----"
    assert extract_files(blob) == {"empty.txt": ""}


def test_duplicate_path_last_wins_first_position():
    """A repeated path takes the later content but keeps its first slot."""
    blob = "\n".join([block("a", "1"), block("b", "2"), block("a", "3")])
    files = extract_files(blob)
    assert list(files) == ["a", "b"]
    assert files == {"a": "3", "b": "2"}


def test_blocks_do_not_merge():
    """Each block ends at its own END marker, not the last one in the text."""
    blob = block("a", "one") + "\nbetween\n" + block("a", "two")
    assert extract_files(blob) == {"a": "two"}
    blob = block("x", "first") + "\n" + block("y", "second")
    assert extract_files(blob) == {"x": "first", "y": "second"}


def test_unterminated_block_skipped(caplog):
    """An unterminated block is skipped without swallowing the next block."""
    blob = "-----BEGIN_FILE: broken.txt-----\npartial\n" + block("ok.txt", "fine")
    with caplog.at_level(logging.WARNING, logger="k8gen.artifacts.extract"):
        files = extract_files(blob)
    assert files == {"ok.txt": "fine"}
    assert "Skipped 1" in caplog.text


def test_mismatched_end_marker_skipped():
    blob = "-----BEGIN_FILE: a.txt-----\nhello\n-----END_FILE: b.txt-----"
    assert extract_files(blob) == {}


def test_end_marker_of_other_path_is_content():
    content = "docs mention -----END_FILE: other----- inline"
    assert extract_files(block("README.md", content)) == {"README.md": content}


def test_crlf_line_endings():
    blob = "-----BEGIN_FILE: a.txt-----\r\nline1\r\nline2\r\n-----END_FILE: a.txt-----\r\n"
    assert extract_files(blob) == {"a.txt": "line1\r\nline2"}


def test_path_with_spaces_kept_verbatim():
    assert extract_files(block("my file.txt", "x")) == {"my file.txt": "x"}


def test_format_then_extract():
    files = {"Dockerfile": "FROM scratch", "k8s/configmap.yaml": "data:\n  A: b"}
    blob = format_files(files)
    assert blob.count("-----BEGIN_FILE: ") == 2
    assert extract_files(blob) == files


def test_files_to_yaml():
    files = {"Dockerfile": "FROM scratch\nEXPOSE 80", "hpa.yaml": "kind: HorizontalPodAutoscaler"}
    text = files_to_yaml(files)
    assert text.startswith("files:")
    assert "Dockerfile: |" in text
    assert yaml.safe_load(text) == {"files": files}


def test_files_to_yaml_empty():
    assert yaml.safe_load(files_to_yaml({})) == {"files": {}}

