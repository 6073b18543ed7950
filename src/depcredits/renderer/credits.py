"""Render resolved dependencies to a CREDITS.md file."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from string import Template

from depcredits.errors import WriteError
from depcredits.model import Dependency

_TEMPLATE_PATH = Path(__file__).with_name("template.md")

_HEADER = (
    "| Package | Version | Author(s) | License | Context |\n"
    "| ---- | ---- | ---- | ---- | ---- |\n"
)


def oxford_and(items: list[str] | tuple[str, ...]) -> str:
    if len(items) < 3:
        return " and ".join(items)
    return f"{', '.join(items[:-1])}, and {items[-1]}"


def _row(dep: Dependency) -> str:
    name = f"[{dep.name}]({dep.url})" if dep.url else dep.name
    return (
        f"| {name} | {dep.version} | {oxford_and(dep.authors)} "
        f"| {dep.license or ''} | {dep.context} |\n"
    )


def _body(deps: list[Dependency]) -> str:
    if not deps:
        return "This project has no dependencies.\n"
    # Always-needed packages first; sorted() is stable so name order holds.
    ordered = sorted(deps, key=lambda d: d.conditional)
    return _HEADER + "".join(_row(d) for d in ordered)


def render_credits(
    name: str,
    version: str,
    deps: list[Dependency],
    *,
    generated: datetime | None = None,
) -> str:
    """Return the markdown for *deps*, which should already be sorted."""
    generated = generated or datetime.now(timezone.utc)
    template = Template(_TEMPLATE_PATH.read_text(encoding="utf-8"))
    return template.safe_substitute(
        name=name,
        version=version,
        generated=generated.strftime("%Y-%m-%d %H:%M:%S"),
        body=_body(deps),
    ).rstrip("\n") + "\n"


def write_credits(text: str, output_path: Path) -> None:
    """Write *text* to *output_path*, creating parent directories."""
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise WriteError(output_path, e.strerror or str(e)) from e
