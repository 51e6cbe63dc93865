"""Generating-signal extraction from the Cursor workbench DOM.

The queries are sent as self-contained string expressions. Nothing is
injected into the page: Cursor's renderer enforces a content security
policy, and helpers emitted by a bundler would not exist in the page context.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError
from playwright.async_api import Page
from playwright.async_api import Error as PlaywrightError

from cursor_blocker.core.errors import EvaluationError
from cursor_blocker.models.snapshot import (
    MAX_BUTTON_SAMPLES,
    MAX_CLASS_NAME_LENGTH,
    MAX_TEXT_LENGTH,
    ButtonSample,
    DebugDump,
)

COMPOSER_GENERATING_SELECTOR = '.composer-bar.editor[data-composer-status="generating"]'
BUTTON_CONTAINER_SELECTOR = '.chat-view, .sidebar, [role="complementary"], .panel'


def build_existence_query(selector: str) -> str:
    """Build an expression returning ``{generating: bool}`` for a CSS selector."""
    return f"""(() => {{
      const match = document.querySelector({json.dumps(selector)});
      return {{ generating: match !== null }};
    }})()"""


def build_button_dump_query(container_selector: str, limit: int = MAX_BUTTON_SAMPLES) -> str:
    """Build an expression sampling button metadata inside the given containers."""
    return f"""(() => {{
      const containers = document.querySelectorAll({json.dumps(container_selector)});
      const roots = containers.length > 0 ? Array.from(containers) : [document.body];
      const buttons = [];
      for (const root of roots) {{
        buttons.push(...Array.from(root.querySelectorAll('button')));
      }}
      const uniq = Array.from(new Set(buttons));
      const buttonSamples = uniq.slice(0, {limit}).map((b) => ({{
        ariaLabel: b.getAttribute('aria-label'),
        text: (b.textContent || '').trim().slice(0, {MAX_TEXT_LENGTH}) || null,
        className: b.className ? String(b.className).slice(0, {MAX_CLASS_NAME_LENGTH}) : null,
      }}));
      return {{ buttonSamples }};
    }})()"""


class DetectionStrategy(BaseModel):
    """The page queries used to detect generation.

    Cursor's markup changes between releases, so the marker is a value the
    watcher is given rather than a constant it owns.

    Attributes:
        name: Short label used in logs.
        generating_query: Expression evaluating to ``{generating: bool}``.
        debug_query: Expression evaluating to ``{buttonSamples: [...]}``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    generating_query: str
    debug_query: str

    @classmethod
    def from_selector(
        cls,
        name: str,
        selector: str,
        container_selector: str = BUTTON_CONTAINER_SELECTOR,
    ) -> "DetectionStrategy":
        """Create a strategy that reports generating while ``selector`` matches."""
        return cls(
            name=name,
            generating_query=build_existence_query(selector),
            debug_query=build_button_dump_query(container_selector),
        )


COMPOSER_STRATEGY = DetectionStrategy.from_selector("composer-bar", COMPOSER_GENERATING_SELECTOR)


class SignalResult(BaseModel):
    """Outcome of one signal extraction."""

    model_config = ConfigDict(frozen=True)

    generating: bool
    debug: DebugDump | None = None


async def extract_signal(
    page: Page,
    include_diagnostics: bool = False,
    strategy: DetectionStrategy = COMPOSER_STRATEGY,
) -> SignalResult:
    """Evaluate the detection queries against the page.

    Args:
        page: The selected Cursor page.
        include_diagnostics: If True, also sample button metadata.
        strategy: Queries to evaluate.

    Returns:
        A SignalResult with the generating flag and optional debug payload.

    Raises:
        EvaluationError: If the page cannot be queried or returns an unexpected shape.
    """
    base = await _evaluate(page, strategy.generating_query)
    if not isinstance(base, dict) or "generating" not in base:
        raise EvaluationError(f"Unexpected result from {strategy.name} query: {base!r}")
    generating = bool(base["generating"])

    if not include_diagnostics:
        return SignalResult(generating=generating)

    dump = await _evaluate(page, strategy.debug_query)
    return SignalResult(generating=generating, debug=_parse_debug_dump(dump))


async def _evaluate(page: Page, expression: str) -> Any:
    try:
        return await page.evaluate(expression)
    except PlaywrightError as e:
        raise EvaluationError(e.message) from e


def _parse_debug_dump(raw: Any) -> DebugDump:
    """Convert the raw button dump into a bounded DebugDump."""
    if not isinstance(raw, dict):
        raise EvaluationError(f"Unexpected debug dump: {raw!r}")

    samples: list[ButtonSample] = []
    for item in (raw.get("buttonSamples") or [])[:MAX_BUTTON_SAMPLES]:
        if not isinstance(item, dict):
            continue
        text = item.get("text")
        class_name = item.get("className")
        try:
            samples.append(
                ButtonSample(
                    aria_label=item.get("ariaLabel"),
                    text=str(text)[:MAX_TEXT_LENGTH] if text else None,
                    class_name=str(class_name)[:MAX_CLASS_NAME_LENGTH] if class_name else None,
                )
            )
        except ValidationError as e:
            raise EvaluationError(f"Malformed button sample: {e}") from e
    return DebugDump(button_samples=samples)
