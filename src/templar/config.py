"""Local configuration for templar."""

from __future__ import annotations

import os

DEFAULT_PANDOC_PATH = "pandoc"
DEFAULT_OUTPUT_FORMAT = "html"
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_SECTION_SIGIL = "%%%"

CODE_FENCE = "```"

# Reserved version names.
NONE_VERSION = "none"
SOLUTION_VERSION = "solution"

TEMPLAR_PANDOC_PATH = os.getenv("TEMPLAR_PANDOC_PATH", DEFAULT_PANDOC_PATH)
TEMPLAR_OUTPUT_FORMAT = os.getenv("TEMPLAR_OUTPUT_FORMAT", DEFAULT_OUTPUT_FORMAT)
TEMPLAR_LOG_LEVEL = os.getenv("TEMPLAR_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
TEMPLAR_SECTION_SIGIL = os.getenv("TEMPLAR_SECTION_SIGIL", DEFAULT_SECTION_SIGIL)
