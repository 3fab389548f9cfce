from deliberate_thinking.core.errors import CallLoadError
from deliberate_thinking.core.io.load_calls import load_calls


def test_load_yaml_mapping_with_calls():
    calls = load_calls("examples/kickoff-session.yaml")
    assert len(calls) == 3
    assert calls[0]["thought"] == "Kickoff"


def test_load_json_list():
    calls = load_calls("examples/bad-reference.json")
    assert [c["thought"] for c in calls] == ["First", "Rethink"]


def test_load_missing_file():
    try:
        load_calls("examples/does-not-exist.yaml")
        assert False, "expected CallLoadError"
    except CallLoadError as e:
        assert e.code == "E_FILE_NOT_FOUND"


def test_load_unsupported_format(tmp_path):
    p = tmp_path / "calls.txt"
    p.write_text("hello", encoding="utf-8")
    try:
        load_calls(str(p))
        assert False, "expected CallLoadError"
    except CallLoadError as e:
        assert e.code == "E_UNSUPPORTED_FORMAT"


def test_load_bad_top_level(tmp_path):
    p = tmp_path / "calls.yaml"
    p.write_text("thought: just one\n", encoding="utf-8")
    try:
        load_calls(str(p))
        assert False, "expected CallLoadError"
    except CallLoadError as e:
        assert e.code == "E_INVALID_TOP_LEVEL"


def test_load_yaml_parse_error(tmp_path):
    p = tmp_path / "calls.yaml"
    p.write_text("calls: [\n", encoding="utf-8")
    try:
        load_calls(str(p))
        assert False, "expected CallLoadError"
    except CallLoadError as e:
        assert e.code == "E_YAML_PARSE"


def test_load_errors_name_the_script(tmp_path):
    p = tmp_path / "calls.json"
    p.write_text('{"calls": {"thought": "not a list"}}', encoding="utf-8")
    try:
        load_calls(str(p))
        assert False, "expected CallLoadError"
    except CallLoadError as e:
        assert e.code == "E_INVALID_TOP_LEVEL"
        assert e.file == str(p)
        assert e.path == "calls"
        assert str(e).startswith(f"{p}:calls: E_INVALID_TOP_LEVEL")


def test_load_file_level_errors_have_no_field_path(tmp_path):
    try:
        load_calls("examples/does-not-exist.json")
        assert False, "expected CallLoadError"
    except CallLoadError as e:
        assert e.file == "examples/does-not-exist.json"
        assert e.path is None
        assert e.to_dict()["file"] == "examples/does-not-exist.json"

    p = tmp_path / "calls.yml"
    p.write_text("- thought: [\n", encoding="utf-8")
    try:
        load_calls(str(p))
        assert False, "expected CallLoadError"
    except CallLoadError as e:
        assert e.code == "E_YAML_PARSE"
        assert e.file == str(p)
        assert e.path is None


def test_load_scalar_document_is_rejected(tmp_path):
    p = tmp_path / "calls.yaml"
    p.write_text("just words\n", encoding="utf-8")
    try:
        load_calls(str(p))
        assert False, "expected CallLoadError"
    except CallLoadError as e:
        assert e.code == "E_INVALID_TOP_LEVEL"
        assert e.path == "<document>"
        assert "got str" in e.message
