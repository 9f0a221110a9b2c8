import json
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    """Empty custom data tree with the four category folders."""
    root = tmp_path / "data"
    for category in ("backgrounds", "classes", "races", "spells"):
        (root / category).mkdir(parents=True)
    return root


@pytest.fixture
def write_json(content_dir: Path):
    """Write a JSON document under the data tree: write_json("spells/x.json", {...})."""
    def _write(relative: str, data: Any) -> Path:
        path = content_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data))
        return path
    return _write
