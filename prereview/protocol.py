"""
Tokens of the plain-text suggestion format shared by the prompt and the parser.
"""

NO_ISSUES = "NO_ISSUES"
NOT_APPLICABLE = "N/A"

RECORD_SEPARATOR = "---"
BLOCK_OPEN = "<<<"
BLOCK_CLOSE = ">>>"

FIELD_LINE = "LINE"
FIELD_END_LINE = "END_LINE"
FIELD_SEVERITY = "SEVERITY"
FIELD_CONFIDENCE = "CONFIDENCE"
FIELD_CATEGORY = "CATEGORY"
FIELD_TITLE = "TITLE"
FIELD_DESCRIPTION = "DESCRIPTION"
FIELD_ORIGINAL = "ORIGINAL"
FIELD_FIX = "FIX"

BLOCK_FIELDS = (FIELD_ORIGINAL, FIELD_FIX)
