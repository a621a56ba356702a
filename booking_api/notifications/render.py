"""
Rendu des e-mails (Jinja2).
- .html: autoescape activé, le texte saisi par le client (notes, noms) est échappé
- .txt: rendu brut pour la partie text/plain
"""
from pathlib import Path
from typing import Any, Dict, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(enabled_extensions=("html",), default_for_string=True),
    undefined=StrictUndefined,
    keep_trailing_newline=True,
)


def render_message(name: str, context: Dict[str, Any]) -> Tuple[str, str]:
    """Retourne (text, html) pour le gabarit `name` (owner | customer)."""
    text = env.get_template(f"{name}.txt").render(**context)
    html = env.get_template(f"{name}.html").render(**context)
    return text, html
