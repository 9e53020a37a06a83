"""
Review prompt construction.
"""
from typing import Iterable, Optional

from prereview.protocol import NO_ISSUES
from prereview.services.git_service import FileChange

TOLERANCE_GUIDANCE = {
    "strict": """
TOLERANCE: STRICT
- Report all potential issues including style nitpicks
- Mark uncertain issues with CONFIDENCE: low
- Only mark as CONFIDENCE: high when you are 100% certain of an issue""",
    "moderate": """
TOLERANCE: MODERATE
- Report bugs, security issues, and significant code quality concerns
- Skip minor style nitpicks unless they affect readability significantly
- Mark uncertain issues with CONFIDENCE: low or medium
- Consider framework-specific patterns - what looks wrong might be idiomatic""",
    "relaxed": """
TOLERANCE: RELAXED
- Only report definite bugs, security vulnerabilities, or critical performance issues
- Skip style suggestions, minor improvements, and best-practice recommendations
- If you're not at least 90% confident about an issue, don't report it
- Skip issues that might be intentional design decisions or framework-specific patterns
- When in doubt, assume the developer knows what they're doing""",
}

PREAMBLE = """You are a pragmatic code reviewer. Your goal is to be HELPFUL, not pedantic.

IMPORTANT GUIDELINES:
1. AVOID FALSE POSITIVES - When uncertain, don't report. Users hate being blocked by incorrect suggestions.
2. UNDERSTAND CONTEXT - A function that returns multiple types based on input is common (e.g., factory patterns, polymorphism).
3. TRUST THE DEVELOPER - If code works and is reasonable, don't suggest rewrites for minor improvements.
4. FRAMEWORK AWARENESS - Many frameworks have patterns that look wrong but are correct:
   - Factory methods returning different subtypes based on input parameters
   - Type hints may be broader than actual runtime types - this is often intentional
   - Data may be sanitized/escaped at storage time, not output time
   - Different color formats (hex, rgba, hsl) are all valid depending on context
5. DON'T CREATE LOOPS - If suggesting a change would create a new issue, reconsider the suggestion.
"""

OUTPUT_FORMAT = """
For each GENUINE issue found, respond in this exact format:
---
LINE: <line number where issue starts>
END_LINE: <end line number if multi-line, otherwise same as LINE>
SEVERITY: <error|warning|info|hint>
CONFIDENCE: <high|medium|low>
CATEGORY: <security|performance|style|bug|best-practice>
TITLE: <short title>
DESCRIPTION: <detailed description explaining WHY this is an issue and the RISK if not fixed>
ORIGINAL:
<<<
the exact original code lines copied verbatim from the file
include multiple lines if needed, preserving all whitespace and indentation
>>>
FIX:
<<<
the exact replacement code
include multiple lines if needed, preserving all whitespace and indentation
>>>
---

CONFIDENCE LEVELS:
- high: You are certain this is a bug, security issue, or definite problem (>95% confident)
- medium: This is likely an issue but could be intentional (~70-95% confident)
- low: This might be an issue, or might be a valid pattern (<70% confident)

CRITICAL RULES:
1. ORIGINAL must be copied EXACTLY from the file content - character for character
2. Include enough context (2-3 lines before/after) to make the match unique
3. Preserve ALL whitespace, tabs, and indentation exactly as they appear
4. For multi-line code, include all lines between <<< and >>>
5. If no code fix is applicable, use: N/A (without <<< >>>)
6. NEVER suggest a fix that would cause a different issue
7. If the code is already sanitized/escaped upstream, don't flag it again
8. Consider the full context - a "wrong type" might be polymorphic

Focus on:
- Security vulnerabilities (CONFIDENCE: high only for definite issues)
- Actual bugs that will cause runtime errors
- Performance issues with measurable impact
- Error handling gaps that could cause crashes
"""


def tolerance_guidance(tolerance: Optional[str]) -> str:
    """Return the guidance text for a tolerance level, defaulting to moderate."""
    return TOLERANCE_GUIDANCE.get((tolerance or "").lower(), TOLERANCE_GUIDANCE["moderate"])


def build_review_prompt(
    change: FileChange,
    tolerance: str = "moderate",
    project_hints: Iterable[str] = (),
    standards_context: str = "",
) -> str:
    """
    Build the review request for one staged file.

    The section order and the output format are what the response parser
    relies on, so both must stay in sync with prereview.protocol.

    Args:
        change: The staged file.
        tolerance: strict, moderate or relaxed.
        project_hints: Free text hints from the developer.
        standards_context: Detected coding standards block.

    Returns:
        The prompt document.
    """
    sections = [PREAMBLE, tolerance_guidance(tolerance), "\n", OUTPUT_FORMAT]

    if standards_context:
        sections.append(standards_context)

    hints = [hint for hint in project_hints if hint and hint.strip()]
    if hints:
        sections.append("\n\nPROJECT-SPECIFIC CONTEXT (trust these hints from the developer):\n")
        sections.extend(f"- {hint.strip()}\n" for hint in hints)

    sections.append(
        "\nIf no issues are found (or only uncertain low-confidence issues in relaxed mode), "
        f"respond with: {NO_ISSUES}\n"
        f"\nFile: {change.path}\n"
        f"\nDiff:\n{change.diff}\n"
        f"\nFull staged content:\n{change.content}"
    )
    return "".join(sections)
