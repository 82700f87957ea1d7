from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path
from typing import Any, Dict, Iterator, Union

import yaml
from filelock import FileLock

log = logging.getLogger(__name__)

DEFAULT_ROOT_PATH = Path(os.path.expanduser(os.getenv("FEE_POLICY_ROOT", "~/.fee_policy"))).resolve()


def path_from_root(root: Path, path_str: Union[str, Path]) -> Path:
    """
    If path is relative, prepend root
    If path is absolute, return it directly.
    """
    root = Path(os.path.expanduser(str(root)))
    path = Path(path_str)
    if not path.is_absolute():
        path = root / path
    return path.resolve()


def config_path_for_filename(root_path: Path, filename: Union[str, Path]) -> Path:
    path_filename = Path(filename)
    if path_filename.is_absolute():
        return path_filename
    return root_path / "config" / filename


@contextlib.contextmanager
def lock_config(root_path: Path, filename: Union[str, Path]) -> Iterator[None]:
    config_path = config_path_for_filename(root_path, filename)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with FileLock(config_path.with_name(config_path.name + ".lock")):
        yield


def load_config(root_path: Path, filename: Union[str, Path]) -> Dict[str, Any]:
    path = config_path_for_filename(root_path, filename)

    if not path.is_file():
        raise ValueError("Config not found")

    r: Dict[str, Any]
    with lock_config(root_path, filename):
        with open(path) as opened_config_file:
            r = yaml.safe_load(opened_config_file)
    if r is None:
        log.error(f"yaml.safe_load returned None: {path}")
        r = {}
    return r
