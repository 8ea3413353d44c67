from __future__ import annotations
from pathlib import Path
from typing import Optional
import yaml
from pydantic import BaseModel, ConfigDict, Field

class Settings(BaseModel):
    """
    Tunables shared by the CLI. `pivot_tol` is handed to the solver
    (None keeps its matrix-scaled default).
    """
    model_config = ConfigDict(extra="forbid")
    pivot_tol: Optional[float] = Field(default=None, ge=0.0)
    log_level: str = "WARNING"
    indent: int = Field(default=2, ge=0)

def load_settings(path: str|Path|None) -> Settings:
    if path is None:
        return Settings()
    if not Path(path).is_file():
        raise FileNotFoundError(f"settings file not found: {path}")
    with open(path, "r") as f: cfg = yaml.safe_load(f) or {}
    return Settings.model_validate(cfg)
