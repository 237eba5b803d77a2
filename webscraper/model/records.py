from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ItemRecord:
    name: str
    icon: str
    price: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class GroupRecord:
    name: str
    items: List[ItemRecord] = field(default_factory=list)
    failures: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "items": [item.to_dict() for item in self.items],
        }


@dataclass
class Snapshot:
    """One complete cycle output; replaces the previously persisted snapshot."""
    groups: List[GroupRecord] = field(default_factory=list)

    def to_list(self) -> List[Dict[str, Any]]:
        return [group.to_dict() for group in self.groups]

    @property
    def item_count(self) -> int:
        return sum(len(group.items) for group in self.groups)


@dataclass
class CycleReport:
    started_at: datetime
    finished_at: Optional[datetime] = None
    groups: int = 0
    items: int = 0
    failures: int = 0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return round((self.finished_at - self.started_at).total_seconds(), 2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "groups": self.groups,
            "items": self.items,
            "failures": self.failures,
            "error": self.error,
            "success": self.success,
            "duration_seconds": self.duration_seconds,
        }
