from __future__ import annotations
import json
from pathlib import Path
from typing import Tuple
import numpy as np
import yaml
from ..core.errors import DimensionMismatchError, TPSError
from ..core.model import TPSModel

class PointFileError(TPSError, ValueError):
    """A point or model file could not be parsed."""

def _read(path: str|Path):
    path = Path(path)
    text = path.read_text()
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise PointFileError(f"{path}: cannot parse file ({e})") from e

def _pairs(data, what: str) -> np.ndarray:
    try:
        arr = np.asarray(data, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise DimensionMismatchError(f"{what} must be a list of [x, y] number pairs") from e
    if arr.size == 0: return np.zeros((0, 2))
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise DimensionMismatchError(f"{what} must be a list of [x, y] pairs, got shape {arr.shape}")
    return arr

def load_points(path: str|Path) -> Tuple[np.ndarray, np.ndarray]:
    """
    Control point file (JSON or YAML):
        {"src": [[x, y], ...], "dst": [[x, y], ...]}
    """
    data = _read(path)
    if not isinstance(data, dict) or "src" not in data or "dst" not in data:
        raise DimensionMismatchError(f"{path}: expected a mapping with 'src' and 'dst' lists")
    return _pairs(data["src"], "src"), _pairs(data["dst"], "dst")

def load_query(path: str|Path) -> np.ndarray:
    """Query file: a bare list of [x, y] pairs, or {"points": [...]}."""
    data = _read(path)
    if isinstance(data, dict):
        data = data.get("points", [])
    return _pairs(data, "query points")

def save_model(path: str|Path, model: TPSModel, indent: int=2):
    Path(path).write_text(json.dumps({"type": "tps", "model": model.to_dict()}, indent=indent))

def load_model(path: str|Path) -> TPSModel:
    data = _read(Path(path))
    if isinstance(data, dict) and isinstance(data.get("model"), dict):
        data = data["model"]
    if not isinstance(data, dict):
        raise PointFileError(f"{path}: expected a model mapping with 'src', 'linear' and 'weights'")
    return TPSModel.from_dict(data)
