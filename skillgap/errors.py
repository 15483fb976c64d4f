"""Error taxonomy for the gap analysis pipeline.

Only invalid input and aggregation failures reach the caller. A single team
member whose analysis blows up is recorded as a failed outcome instead.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    INVALID_INPUT = "V001"
    MEMBER_ANALYSIS_FAILED = "A001"
    AGGREGATION_FAILED = "A002"
    EXTRACTOR_ERROR = "E001"


class SkillGapError(Exception):
    def __init__(self, code: ErrorCode, message: str, **context: Any):
        self.code = code
        self.message = message
        self.context = context
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.code.value,
            "message": self.message,
            "context": self.context,
        }


class InvalidInputError(SkillGapError):
    """Request data that cannot enter the pipeline."""

    def __init__(self, message: str, **context: Any):
        super().__init__(ErrorCode.INVALID_INPUT, message, **context)


class AggregationError(SkillGapError):
    """Merging well-formed member results failed; indicates a defect."""

    def __init__(self, message: str, **context: Any):
        super().__init__(ErrorCode.AGGREGATION_FAILED, message, **context)


class ExtractorError(SkillGapError):
    def __init__(self, message: str, **context: Any):
        super().__init__(ErrorCode.EXTRACTOR_ERROR, message, **context)
