from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from fee_policy.util.config import config_path_for_filename


def write_config(root_path: Path, config: Dict[str, Any], filename: str = "config.yaml") -> Path:
    path = config_path_for_filename(root_path, filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(config, f)
    return path
