"""Render de configuraciones Terraform de test.

Por qué está en adapters:
- Las configuraciones HCL son plantillas Jinja2 (detalle de infraestructura).
- Los fixtures solo eligen plantilla y pasan `TestData`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined


_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_config(template_name: str, **context: Any) -> str:
    """Renderiza `templates/<template_name>` con el contexto dado.

    Variables ausentes fallan (`StrictUndefined`): una config a medias nunca
    debería llegar a `terraform apply`.
    """

    return _get_env().get_template(template_name).render(**context)


def available_templates(prefix: str) -> list[str]:
    """Nombres de escenario (`basic`, `complete`, ...) bajo `templates/<prefix>/`."""

    folder = _TEMPLATES_DIR / prefix
    return sorted(p.name.removesuffix(".tf.j2") for p in folder.glob("*.tf.j2"))
