from dataclasses import dataclass, field
from typing import List

from webscraper.core.config import SettingsManager
from webscraper.core.errors import ConfigurationError
from webscraper.model.config import FieldMode, ScrapeConfig, ScrapeGroup, ScrapeObserver


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class ConfigValidator:
    """
    Checks a scrape configuration before any navigation happens.

    Errors make the configuration unusable (no cycle is attempted); warnings
    flag settings that only degrade the output, like a missing title rule.
    """

    def __init__(self, config: ScrapeConfig):
        if config is None:
            raise ConfigurationError("Cannot validate not existing configuration")
        self.config = config
        self.result = ValidationResult()

    def check(self) -> ValidationResult:
        """Collect errors and warnings without raising."""
        self.result = ValidationResult()
        for group_no, group in enumerate(self.config.groups, start=1):
            self._validate_group(group, group_no)
            for observer in group.observers:
                self._validate_observer(observer, group)
        return self.result

    def validate(self) -> ValidationResult:
        """Like ``check`` but raises ``ConfigurationError`` when errors were found."""
        result = self.check()
        if not result.ok:
            raise ConfigurationError(
                f"Invalid scrape configuration ({len(result.errors)} errors): {result.errors[0]}",
                errors=result.errors,
                warnings=result.warnings,
            )
        return result

    def _validate_group(self, group: ScrapeGroup, group_no: int) -> None:
        label = group.name or f"#{group_no}"
        # observer paths are resolved against the domain
        if not group.domain:
            self.result.errors.append(f"Missing required domain in group {label}")
        else:
            try:
                SettingsManager.validate_url(group.domain)
            except ValueError as e:
                self.result.errors.append(f"Invalid domain in group {label}: {e}")
        if not group.name:
            self.result.warnings.append(f"Empty group name (group {label})")

    def _validate_observer(self, observer: ScrapeObserver, group: ScrapeGroup) -> None:
        where = f"observer {observer.label or '[unnamed]'} (group {group.name or '[unnamed]'})"
        if not observer.path:
            self.result.errors.append(f"Missing required observer path in {where}")
        # price is the mandatory payload
        if not observer.price.selector:
            self.result.errors.append(f"Missing required 'price.selector' in {where}")
        if not observer.price.attribute:
            self.result.errors.append(f"Missing required 'price.attribute' in {where}")
        for name in ("title", "image"):
            if getattr(observer, name).mode is FieldMode.EMPTY:
                self.result.warnings.append(
                    f"Empty {name} 'selector'/'attribute' and 'auxiliary' in {where}"
                )
