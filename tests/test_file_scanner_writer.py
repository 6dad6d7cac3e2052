from __future__ import annotations

import io
from pathlib import Path

import pytest

from autoimport.config.config_manager import ConfigManager
from autoimport.core.file_scanner import FileScanner
from autoimport.core.file_writer import FileWriter


def _touch(path: Path, text: str = "x;\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "project"
    _touch(root / "app.js")
    _touch(root / "view.jsx")
    _touch(root / "lib" / "util.mjs")
    _touch(root / "lib" / "notes.txt")
    _touch(root / "node_modules" / "dep" / "index.js")
    return root


def _config(write_config, **file_selection):
    data = {"imports": {"x": {"from": "m"}}}
    if file_selection:
        data["file_selection"] = file_selection
    return ConfigManager(str(write_config(data)))


def test_recursive_scan_skips_excluded_directories(write_config, project):
    files = FileScanner(_config(write_config)).scan(str(project))
    names = [path.relative_to(project.resolve()).as_posix() for path in files]
    assert names == ["app.js", "lib/util.mjs", "view.jsx"]


def test_non_recursive_scan(write_config, project):
    files = FileScanner(_config(write_config, recursive=False)).scan_directory(str(project))
    assert [path.name for path in files] == ["app.js", "view.jsx"]


def test_custom_patterns(write_config, project):
    scanner = FileScanner(_config(write_config, include_patterns=["*.js"], exclude_patterns=["app.js"]))
    files = scanner.scan(str(project))
    assert [path.name for path in files] == ["index.js"]


def test_single_file_target(write_config, project):
    scanner = FileScanner(_config(write_config))
    assert scanner.scan(str(project / "app.js")) == [(project / "app.js").resolve()]
    assert scanner.scan(str(project / "lib" / "notes.txt")) == []


def test_missing_target(write_config, tmp_path):
    with pytest.raises(FileNotFoundError):
        FileScanner(_config(write_config)).scan(str(tmp_path / "nowhere"))


def test_pattern_validation(write_config):
    scanner = FileScanner(_config(write_config, include_patterns=[" "]))
    assert scanner.validate_patterns() == ["Empty pattern found"]


def _writer(write_config, stream=None, **output):
    data = {"imports": {"x": {"from": "m"}}, "output": output}
    return FileWriter(ConfigManager(str(write_config(data))), stream=stream)


def test_in_place_write(write_config, tmp_path):
    target = _touch(tmp_path / "app.js", "old\n")
    result = _writer(write_config, mode="in_place").write_transformed_code(target, "new\r\n")

    assert result.success
    assert result.output_path == target
    assert target.read_bytes() == b"new\r\n"
    assert not (tmp_path / "app.js.backup").exists()


def test_new_files_avoid_conflicts(write_config, tmp_path):
    target = _touch(tmp_path / "app.js", "old\n")
    writer = _writer(write_config, mode="new_files")

    first = writer.write_transformed_code(target, "one\n")
    second = writer.write_transformed_code(target, "two\n")

    assert first.output_path == tmp_path / "app_autoimport.js"
    assert second.output_path == tmp_path / "app_autoimport_1.js"
    assert target.read_text(encoding="utf-8") == "old\n"
    assert second.output_path.read_text(encoding="utf-8") == "two\n"


def test_stdout_mode(write_config, tmp_path):
    stream = io.StringIO()
    target = _touch(tmp_path / "app.js", "old\n")
    result = _writer(write_config, stream=stream, mode="stdout").write_transformed_code(target, "new")

    assert result.success
    assert result.output_path is None
    assert stream.getvalue() == f"// {target}\nnew\n"
    assert target.read_text(encoding="utf-8") == "old\n"
