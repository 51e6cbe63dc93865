"""Page selection and DOM signal tools."""

from cursor_blocker.tools.page_selector import rank_pages, score_page, select_best_page
from cursor_blocker.tools.detection import (
    COMPOSER_STRATEGY,
    DetectionStrategy,
    SignalResult,
    extract_signal,
)

__all__ = [
    "rank_pages",
    "score_page",
    "select_best_page",
    "COMPOSER_STRATEGY",
    "DetectionStrategy",
    "SignalResult",
    "extract_signal",
]
