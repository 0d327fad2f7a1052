"""
Shared utilities used across the pattern engine.

- stopwords.py: default stopword set for journal text
- helpers.py: label formatting and text helpers
"""

from energytune.shared.stopwords import PATTERN_STOP
from energytune.shared.helpers import format_label, normalize_whitespace, truncate_text
