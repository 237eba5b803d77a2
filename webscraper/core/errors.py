from typing import List, Optional


class ScraperError(Exception):
    """Base class of every error raised by the scrape engine."""


class ConfigurationError(ScraperError):
    """Scrape configuration or settings are malformed; no cycle is attempted."""

    def __init__(self, message: str, errors: Optional[List[str]] = None, warnings: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors or [message])
        self.warnings = list(warnings or [])


class NavigationError(ScraperError):
    """Page failed to reach its wait target (timeout or network failure)."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Cannot navigate to {url}: {reason}")
        self.url = url
        self.reason = reason


class NavigationTimeoutError(NavigationError):
    """Page did not reach its wait target in time; worth another attempt."""


class RenderTimeoutError(ScraperError):
    """The mandatory price selector never became visible."""

    def __init__(self, url: str, selector: str):
        super().__init__(f"Cannot find price element '{selector}' in page {url}")
        self.url = url
        self.selector = selector


class ExtractionError(ScraperError):
    """A container, element or attribute was not found while reading a field."""

    def __init__(self, field: str, reason: str, detail: str = ""):
        message = f"Cannot find {field} {reason}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.field = field
        self.reason = reason


class PersistenceError(ScraperError):
    """Snapshot could not be written to its destination."""


class SessionError(ScraperError):
    """Browser session could not be launched."""
