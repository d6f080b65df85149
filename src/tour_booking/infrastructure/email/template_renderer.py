"""Jinja2 rendering of account email bodies."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html_body: str
    text_body: str


class EmailTemplateRenderer:
    """Render the html and plain-text variants of one named template."""

    def __init__(self, *, template_dir: Path = _TEMPLATE_DIR) -> None:
        self._env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(enabled_extensions=("html",), default=False),
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render(self, *, template: str, subject: str, context: dict[str, Any]) -> RenderedEmail:
        variables = {**context, "subject": subject}
        return RenderedEmail(
            subject=subject,
            html_body=self._env.get_template(f"{template}.html").render(**variables),
            text_body=self._env.get_template(f"{template}.txt").render(**variables),
        )


def first_name_of(name: str) -> str:
    parts = name.split()
    return parts[0] if parts else name
