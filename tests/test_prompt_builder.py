"""Tests for review prompt construction."""

import pytest

from prereview.services.prompt_builder import build_review_prompt, tolerance_guidance

from conftest import make_change


@pytest.fixture
def change():
    return make_change(
        "src/app.py",
        content="def main():\n    return 1\n",
        diff="@@ -1 +1,2 @@\n+def main():\n+    return 1\n",
    )


def test_sections_appear_in_fixed_order(change):
    prompt = build_review_prompt(
        change,
        tolerance="moderate",
        project_hints=["Output is escaped by the template engine"],
        standards_context="\n\nCoding Standards Detected in Project:\n- Ruff (ruff.toml): Fast Python linter\n",
    )

    markers = [
        "You are a pragmatic code reviewer",
        "TOLERANCE: MODERATE",
        "respond in this exact format",
        "LINE: <line number",
        "CRITICAL RULES",
        "Coding Standards Detected in Project",
        "PROJECT-SPECIFIC CONTEXT",
        "- Output is escaped by the template engine",
        "respond with: NO_ISSUES",
        "File: src/app.py",
        "Diff:\n@@ -1 +1,2 @@",
        "Full staged content:\ndef main():",
    ]
    positions = [prompt.index(marker) for marker in markers]
    assert positions == sorted(positions)
    assert prompt.endswith(change.content)


def test_format_contract_lists_fields_in_order(change):
    prompt = build_review_prompt(change)
    fields = ["LINE:", "END_LINE:", "SEVERITY:", "CONFIDENCE:", "CATEGORY:", "TITLE:", "DESCRIPTION:", "ORIGINAL:", "FIX:"]
    start = prompt.index("respond in this exact format")
    positions = [prompt.index(f"\n{field}", start) for field in fields]
    assert positions == sorted(positions)
    assert "<<<" in prompt and ">>>" in prompt
    assert "N/A" in prompt


@pytest.mark.parametrize(
    "tolerance, expected, absent",
    [
        ("strict", "Report all potential issues including style nitpicks", "TOLERANCE: MODERATE"),
        ("relaxed", "at least 90% confident", "TOLERANCE: STRICT"),
        ("moderate", "Skip minor style nitpicks", "TOLERANCE: RELAXED"),
    ],
)
def test_tolerance_guidance_selected(change, tolerance, expected, absent):
    prompt = build_review_prompt(change, tolerance=tolerance)
    assert expected in prompt
    assert absent not in prompt


@pytest.mark.parametrize("tolerance", [None, "", "paranoid", "STRICTISH"])
def test_unknown_tolerance_defaults_to_moderate(tolerance):
    assert "TOLERANCE: MODERATE" in tolerance_guidance(tolerance)


def test_tolerance_is_case_insensitive():
    assert "TOLERANCE: STRICT" in tolerance_guidance("Strict")


def test_empty_hints_and_standards_are_omitted(change):
    prompt = build_review_prompt(change, project_hints=["", "   "], standards_context="")
    assert "PROJECT-SPECIFIC CONTEXT" not in prompt
    assert "Coding Standards" not in prompt


def test_prompt_is_deterministic(change):
    args = dict(tolerance="strict", project_hints=["a", "b"], standards_context="ctx")
    assert build_review_prompt(change, **args) == build_review_prompt(change, **args)
