"""Tests for coding standards detection."""

from prereview.services.standards_service import StandardsService


def _touch(root, *names):
    for name in names:
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("", encoding="utf-8")


def test_nothing_detected_gives_empty_context(tmp_path):
    service = StandardsService(str(tmp_path))

    assert service.detect() == []
    assert service.get_context() == ""


def test_known_tool_configs(tmp_path):
    _touch(tmp_path, "ruff.toml", ".editorconfig")

    standards = StandardsService(str(tmp_path)).detect()

    assert [(s.name, s.config_file) for s in standards] == [("Ruff", "ruff.toml"), ("EditorConfig", ".editorconfig")]


def test_same_standard_reported_once(tmp_path):
    _touch(tmp_path, ".eslintrc", ".eslintrc.json", "eslint.config.js")

    names = [s.name for s in StandardsService(str(tmp_path)).detect()]

    assert names == ["ESLint"]


def test_framework_indicators_follow_tool_configs(tmp_path):
    _touch(tmp_path, "go.mod", ".golangci.yml")

    standards = StandardsService(str(tmp_path)).detect()

    assert [s.name for s in standards] == ["golangci-lint", "Go"]
    assert standards[1].config_file is None
    assert standards[1].kind == "package-manager"


def test_python_indicators_collapse(tmp_path):
    _touch(tmp_path, "requirements.txt", "setup.py")
    assert [s.name for s in StandardsService(str(tmp_path)).detect()] == ["Python"]


def test_custom_standards_come_first(tmp_path):
    _touch(tmp_path, ".prettierrc", "docs/style-rules.json")

    standards = StandardsService(str(tmp_path), ["docs/style-rules.json", "missing.json"]).detect()

    assert standards[0].name == "style-rules.json"
    assert standards[0].kind == "custom"
    assert standards[0].config_file == "docs/style-rules.json"
    assert [s.name for s in standards[1:]] == ["Prettier"]


def test_context_block(tmp_path):
    _touch(tmp_path, "mypy.ini", "package.json")

    context = StandardsService(str(tmp_path)).get_context()

    assert context.startswith("\n\nCoding Standards Detected in Project:\n")
    assert "- Mypy (mypy.ini): Python static type checker" in context
    assert "- Node.js: Node.js project" in context
    assert "align with these coding standards" in context
