import json
import os
import tempfile
import traceback
from pathlib import Path
from typing import Any

from webscraper.core.errors import ConfigurationError, PersistenceError
from webscraper.core.logging import log


def read_json(path: Path) -> Any:
    """Read a JSON document that must exist and parse."""
    path = Path(path)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {path}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Corrupted JSON in {path.name}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}")


def atomic_write_json(path: Path, data: Any) -> None:
    """
    Write data as JSON, replacing the destination in a single rename.
    Parent directories are created; on failure the old content is left intact.
    """
    path = Path(path)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except (OSError, TypeError, ValueError) as e:
        log(f"Cannot write {path}: {traceback.format_exc()}", level="debug")
        raise PersistenceError(f"Cannot write snapshot to {path}: {e}") from e
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.remove(tmp_name)
