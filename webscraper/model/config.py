"""
Scrape configuration model: groups of observers, each with three field rules.

The model is immutable once built. Structural problems (wrong types, unknown
wait targets or history modes) are reported while building; semantic checks
live in ``webscraper.model.validator``.
"""
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from webscraper.core.errors import ConfigurationError
from webscraper.core.logging import log
from webscraper.utils.file_io import read_json


class WaitTarget(str, Enum):
    """Page lifecycle event a navigation must reach before extraction."""
    LOAD = "load"
    DOMCONTENTLOADED = "domcontentloaded"
    NETWORKIDLE0 = "networkidle0"
    NETWORKIDLE2 = "networkidle2"

    @property
    def wait_until(self) -> str:
        """Equivalent Playwright ``wait_until`` value."""
        return {
            WaitTarget.LOAD: "load",
            WaitTarget.DOMCONTENTLOADED: "domcontentloaded",
            WaitTarget.NETWORKIDLE0: "networkidle",
            WaitTarget.NETWORKIDLE2: "load",
        }[self]

    @property
    def idle_grace(self) -> bool:
        """True when a best-effort network idle wait follows the navigation."""
        return self is WaitTarget.NETWORKIDLE2


class HistoryMode(str, Enum):
    OFF = "off"
    ON = "on"
    ON_CHANGE = "onChange"


class FieldMode(Enum):
    AUTO = "auto"
    MANUAL = "manual"
    EMPTY = "empty"


class FieldRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    selector: str = ""
    attribute: str = ""
    auxiliary: str = ""

    @field_validator("selector", "attribute", "auxiliary", mode="before")
    @classmethod
    def blank_if_none(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def mode(self) -> FieldMode:
        # A static value always wins over DOM extraction
        if self.auxiliary:
            return FieldMode.MANUAL
        if self.selector and self.attribute:
            return FieldMode.AUTO
        return FieldMode.EMPTY


class ScrapeObserver(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    path: str = ""
    target: WaitTarget = WaitTarget.LOAD
    history: HistoryMode = HistoryMode.OFF
    container: str = ""
    title: FieldRule = Field(default_factory=FieldRule)
    image: FieldRule = Field(default_factory=FieldRule)
    price: FieldRule = Field(default_factory=FieldRule)

    @field_validator("name", "path", "container", mode="before")
    @classmethod
    def blank_if_none(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("target", mode="before")
    @classmethod
    def default_target(cls, value: Any) -> Any:
        return WaitTarget.LOAD if value in (None, "") else value

    @field_validator("history", mode="before")
    @classmethod
    def default_history(cls, value: Any) -> Any:
        return HistoryMode.OFF if value in (None, "") else value

    @field_validator("title", "image", "price", mode="before")
    @classmethod
    def empty_rule_if_none(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def label(self) -> str:
        return self.name or self.path


class ScrapeGroup(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    category: str = ""
    domain: str = ""
    observers: List[ScrapeObserver] = Field(default_factory=list)

    @field_validator("name", "category", "domain", mode="before")
    @classmethod
    def blank_if_none(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("observers", mode="before")
    @classmethod
    def empty_list_if_none(cls, value: Any) -> Any:
        return [] if value is None else value


class ScrapeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: str = ""
    groups: List[ScrapeGroup] = Field(default_factory=list)

    @field_validator("user", mode="before")
    @classmethod
    def blank_if_none(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("groups", mode="before")
    @classmethod
    def empty_list_if_none(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def observer_count(self) -> int:
        return sum(len(group.observers) for group in self.groups)


def build_config(data: Dict[str, Any]) -> ScrapeConfig:
    """Build the configuration model without semantic validation."""
    if not isinstance(data, dict):
        raise ConfigurationError("Scrape configuration must be a JSON object")
    try:
        return ScrapeConfig.model_validate(data)
    except ValidationError as e:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise ConfigurationError("Malformed scrape configuration", errors=errors)


def parse_config(data: Dict[str, Any]) -> ScrapeConfig:
    """Build and validate a configuration; warnings are logged, errors raised."""
    from webscraper.model.validator import ConfigValidator

    config = build_config(data)
    result = ConfigValidator(config).validate()
    for warning in result.warnings:
        log(f"Configuration warning: {warning}", level="warning", user=config.user)
    return config


def load_config(path: Path) -> ScrapeConfig:
    """Read a scrape configuration from a JSON file and validate it."""
    return parse_config(read_json(Path(path)))
