from typing import Any, Optional

from playwright.async_api import Error as PlaywrightError

from webscraper.core.errors import ExtractionError
from webscraper.model.config import FieldMode, FieldRule

# Reads element[attribute] of `selector` inside `container` (document when empty).
EXTRACT_SCRIPT = """({container, selector, attribute}) => {
    let scope = document;
    try {
        if (container) {
            scope = document.querySelector(container);
            if (scope == null) {
                return { error: "container", detail: container };
            }
        }
        const element = scope.querySelector(selector);
        if (element == null) {
            return { error: "element", detail: selector };
        }
        const value = element[attribute];
        if (value === undefined || value === null) {
            return { error: "value", detail: attribute };
        }
        return { value: String(value) };
    } catch (e) {
        return { error: "selector", detail: e.message };
    }
}"""


class FieldExtractor:
    """Reads one configured field from the page currently loaded."""

    async def extract(self, page: Any, container: str, rule: FieldRule, field: str = "field") -> Optional[str]:
        """
        Return the field value.

        A manual rule returns its static value without touching the page, and
        a rule with nothing configured returns None. DOM lookups that find
        nothing raise ``ExtractionError``.
        """
        if rule.mode is FieldMode.MANUAL:
            return rule.auxiliary
        if rule.mode is FieldMode.EMPTY:
            return None

        try:
            result = await page.evaluate(EXTRACT_SCRIPT, {
                "container": container,
                "selector": rule.selector,
                "attribute": rule.attribute,
            })
        except PlaywrightError as e:
            raise ExtractionError(field, "value", str(e)) from e

        if not isinstance(result, dict):
            raise ExtractionError(field, "value", f"unexpected page result {result!r}")
        if "error" in result:
            raise ExtractionError(field, result["error"], result.get("detail", ""))
        return result["value"]
