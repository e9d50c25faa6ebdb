from __future__ import annotations

import re
from typing import TYPE_CHECKING

import jinja2

if TYPE_CHECKING:
    from arbor.models.context import ScaffoldContext

# ``{{ .Name }}`` placeholders are rewritten to jinja2 expressions wrapped in NUL-guarded
# delimiters, so {% %} and {# #} stay literal text. Any other {{ is rejected by render().
_DOT_REFERENCE = re.compile(r"\{\{(-?)\s*\.([A-Za-z_][A-Za-z0-9_]*)\s*(-?)\}\}")

VARIABLE_START = "\x00{{"
VARIABLE_END = "}}\x00"

_environment = jinja2.Environment(
    variable_start_string=VARIABLE_START,
    variable_end_string=VARIABLE_END,
    block_start_string="\x00{%",
    block_end_string="%}\x00",
    comment_start_string="\x00{#",
    comment_end_string="#}\x00",
    line_statement_prefix=None,
    line_comment_prefix=None,
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)


class TemplateRenderError(Exception):
    def __init__(self, message: str, key: str = "") -> None:
        self.key = key
        super().__init__(message)


def to_jinja(template: str) -> str:
    return _DOT_REFERENCE.sub(
        lambda m: f"{VARIABLE_START}{m.group(1)} {m.group(2)} {m.group(3)}{VARIABLE_END}", template
    )


def render(template: str, variables: dict[str, str]) -> str:
    """Render ``template`` against ``variables``; undefined names raise TemplateRenderError.

    Only ``{{ .Name }}`` actions are understood. Any other ``{{`` is an error.
    """
    if "{{" not in template:
        return template

    leftover = _DOT_REFERENCE.sub("", template)
    if "{{" in leftover:
        start = leftover.index("{{")
        raise TemplateRenderError(f"invalid template: unsupported action near {leftover[start:start + 20]!r}")

    try:
        compiled = _environment.from_string(to_jinja(template))
    except jinja2.TemplateSyntaxError as e:
        raise TemplateRenderError(f"invalid template: {e}") from e

    try:
        return compiled.render(**variables)
    except jinja2.UndefinedError as e:
        key = _missing_key(str(e))
        raise TemplateRenderError(
            f"template references undefined key {key!r}" if key else f"template execution failed: {e}",
            key=key,
        ) from e


def render_for_context(template: str, context: ScaffoldContext) -> str:
    return render(template, context.snapshot_for_template())


def _missing_key(message: str) -> str:
    match = re.match(r"'([^']+)' is undefined", message)
    return match.group(1) if match else ""
