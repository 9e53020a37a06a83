"""Tests for diff statistics and display truncation."""

import pytest

from prereview.services.diff_parser import DiffParser, DiffStats, MAX_VIEW_LINES

SAMPLE_DIFF = """diff --git a/app.py b/app.py
index 83db48f..bf269f4 100644
--- a/app.py
+++ b/app.py
@@ -1,4 +1,5 @@
 import os
-import sys
+import json
+import logging
 x = 0
 def main():
@@ -10,3 +11,3 @@ def main():
     value = 1
-    return value
+    return value * 2
     # end
"""


@pytest.fixture
def parser():
    return DiffParser()


def test_counts_additions_deletions_and_hunks(parser):
    assert parser.parse(SAMPLE_DIFF) == DiffStats(additions=3, deletions=2, hunks=2)


@pytest.mark.parametrize("diff", ["", "   \n", "not a diff at all"])
def test_empty_or_foreign_input_gives_zeros(parser, diff):
    assert parser.parse(diff) == DiffStats()


def test_truncate_short_diff_keeps_everything(parser):
    lines, omitted = parser.truncate("a\nb\nc\n")
    assert lines == ["a", "b", "c"]
    assert omitted == 0


def test_truncate_long_diff(parser):
    diff = "\n".join(str(i) for i in range(MAX_VIEW_LINES + 7))

    lines, omitted = parser.truncate(diff)

    assert len(lines) == MAX_VIEW_LINES
    assert lines[-1] == str(MAX_VIEW_LINES - 1)
    assert omitted == 7


def test_truncate_exact_limit_omits_nothing(parser):
    diff = "\n".join("x" for _ in range(MAX_VIEW_LINES)) + "\n"
    assert parser.truncate(diff)[1] == 0
