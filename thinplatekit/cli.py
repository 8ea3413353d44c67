from __future__ import annotations
import typer, json, yaml
from rich import print
from rich.markup import escape
from pathlib import Path
from typing import Optional
from pydantic import ValidationError
from .config import load_settings, Settings
from .log import setup_logging
from .core.errors import TPSError
from .core.model import generate, project, project_many
from .io.points import load_points, load_query, save_model, load_model

app = typer.Typer(add_completion=False, help="thinplatekit CLI (tpk)")

def _settings(config: Optional[str]) -> Settings:
    try:
        cfg = load_settings(config)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        _fail(e)
    setup_logging(cfg.log_level)
    return cfg

def _fail(e: Exception):
    print(f"[red]error:[/red] {escape(str(e))}")
    raise typer.Exit(code=1)

@app.command()
def fit(points: Path = typer.Argument(..., exists=True, dir_okay=False), save: str=".tpk_model.json",
        config: Optional[str]=typer.Option(None, help="YAML settings file")):
    """
    Fit a thin plate spline to a control point file ({"src": [...], "dst": [...]}) and save it as JSON.
    """
    cfg = _settings(config)
    try:
        src, dst = load_points(points)
        model = generate(src, dst, tol=cfg.pivot_tol)
    except TPSError as e:
        _fail(e)
    save_model(save, model, indent=cfg.indent)
    print(f"[green]Saved model[/green] {save} => {model.n} control points, bending energy {model.bending_energy():.6g}")

@app.command("project")
def project_cmd(model: Path = typer.Argument(..., exists=True, dir_okay=False), x: float = typer.Argument(...),
                y: float = typer.Argument(...), config: Optional[str]=typer.Option(None)):
    """
    Project a single point through a saved model.
    """
    _settings(config)
    try:
        m = load_model(model)
    except TPSError as e:
        _fail(e)
    px, py = project(m, x, y)
    print(json.dumps({"x": px, "y": py}))

@app.command()
def warp(model: Path = typer.Argument(..., exists=True, dir_okay=False), query: Path = typer.Argument(..., exists=True, dir_okay=False),
         out: Optional[str]=typer.Option(None, help="write a JSON list instead of printing JSON lines"),
         config: Optional[str]=typer.Option(None)):
    """
    Project every point of a query file ([[x, y], ...]) through a saved model.
    """
    cfg = _settings(config)
    try:
        m = load_model(model)
        pts = load_query(query)
    except TPSError as e:
        _fail(e)
    res = project_many(m, pts)
    if out:
        Path(out).write_text(json.dumps(res.tolist(), indent=cfg.indent))
        print(f"[green]Wrote[/green] {len(res)} points to {out}")
        return
    for px, py in res.tolist():
        print(json.dumps({"x": px, "y": py}))

if __name__ == "__main__":
    app()
