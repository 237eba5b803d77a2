import json
from unittest.mock import patch

import pytest

from webscraper.core.errors import ConfigurationError, PersistenceError
from webscraper.utils.file_io import atomic_write_json, read_json


def test_read_json_missing_is_configuration_error(tmp_path):
    with pytest.raises(ConfigurationError, match="not found"):
        read_json(tmp_path / "nope.json")


def test_read_json_corrupt_is_configuration_error(tmp_path):
    f = tmp_path / "corrupt.json"
    f.write_text("{invalid")
    with pytest.raises(ConfigurationError, match="Corrupted JSON"):
        read_json(f)


def test_atomic_write_json_creates_directories(tmp_path):
    f = tmp_path / "users" / "u" / "data.json"
    atomic_write_json(f, [{"name": "G", "items": []}])
    assert json.loads(f.read_text(encoding="utf-8")) == [{"name": "G", "items": []}]
    assert [p.name for p in f.parent.iterdir()] == ["data.json"]


def test_atomic_write_json_overwrites(tmp_path):
    f = tmp_path / "data.json"
    atomic_write_json(f, [1, 2, 3])
    atomic_write_json(f, [4])
    assert json.loads(f.read_text(encoding="utf-8")) == [4]


@patch("webscraper.utils.file_io.os.replace")
def test_atomic_write_json_failure_keeps_old_content(mock_replace, tmp_path):
    f = tmp_path / "data.json"
    f.write_text("[1]", encoding="utf-8")
    mock_replace.side_effect = PermissionError("Denied")

    with pytest.raises(PersistenceError, match="Denied"):
        atomic_write_json(f, [2])

    assert f.read_text(encoding="utf-8") == "[1]"
    assert [p.name for p in tmp_path.iterdir()] == ["data.json"]
