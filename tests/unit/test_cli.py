import pathlib
import subprocess
import sys

REPO_ROOT = pathlib.Path(__file__).resolve().parents[2]
LOCATOR = str(REPO_ROOT / "json_locator.py")
CHECKER = str(REPO_ROOT / "schema_check.py")

SAMPLE = '{\n  "name": "John",\n  "address": {\n    "city": "NY"\n  }\n}\n'

def _run(*cmd):
    return subprocess.run([sys.executable, *cmd], capture_output=True, text=True)

def test_locator_prints_line(tmp_path):
    f = tmp_path / "doc.json"
    f.write_text(SAMPLE)
    cp = _run(LOCATOR, str(f), "/address/city")
    assert cp.returncode == 0
    assert cp.stdout.strip() == "4"

def test_locator_not_found_returns_1(tmp_path):
    f = tmp_path / "doc.json"
    f.write_text(SAMPLE)
    cp = _run(LOCATOR, str(f), "/missing")
    assert cp.returncode == 1
    assert "not found" in cp.stderr

def test_locator_debug_dumps_key_paths(tmp_path):
    f = tmp_path / "doc.json"
    f.write_text(SAMPLE)
    cp = _run(LOCATOR, str(f), "--debug")
    assert cp.returncode == 0
    assert cp.stdout.splitlines() == ["2\t/name", "3\t/address", "4\t/address/city"]

def test_locator_unreadable_file_returns_1(tmp_path):
    cp = _run(LOCATOR, str(tmp_path / "absent.json"), "/a")
    assert cp.returncode == 1
    assert "error:" in cp.stderr

def test_checker_reports_lines(tmp_path):
    schema = tmp_path / "schema.json"
    schema.write_text('{"properties": {"address": {"properties": {"city": {"type": "integer"}}}}}')
    data = tmp_path / "data.json"
    data.write_text(SAMPLE)
    cp = _run(CHECKER, str(schema), str(data))
    assert cp.returncode == 1
    assert f"{data}:4: [type] /address/city:" in cp.stderr

def test_checker_empty_schema_returns_1(tmp_path):
    schema = tmp_path / "schema.json"
    schema.write_text("   ")
    cp = _run(CHECKER, str(schema))
    assert cp.returncode == 1
    assert "is empty" in cp.stderr

def test_checker_reports_invalid_schema_errors_once(tmp_path):
    schema = tmp_path / "schema.json"
    schema.write_text('{\n  "type": 12\n}')
    data = tmp_path / "data.json"
    data.write_text("{}")
    cp = _run(CHECKER, str(schema), str(data))
    assert cp.returncode == 1
    lines = cp.stderr.splitlines()
    assert len(lines) == 1
    assert lines[0].startswith(f"{schema}:2: [anyOf] /type:")

def test_checker_deep_data_is_a_syntax_error(tmp_path):
    schema = tmp_path / "schema.json"
    schema.write_text('{"type": "array"}')
    data = tmp_path / "data.json"
    data.write_text("[" * 100000 + "]" * 100000)
    cp = _run(CHECKER, str(schema), str(data))
    assert cp.returncode == 1
    assert f"{data}:?: SyntaxError: Nesting too deep" in cp.stderr
    assert "Traceback" not in cp.stderr

def test_checker_self_referencing_schema_has_no_traceback(tmp_path):
    schema = tmp_path / "schema.json"
    schema.write_text('{"$ref": "#"}')
    data = tmp_path / "data.json"
    data.write_text("1")
    cp = _run(CHECKER, str(schema), str(data))
    assert cp.returncode == 1
    assert f"{data}:1: [validation] root:" in cp.stderr
    assert "Traceback" not in cp.stderr
