"""Template rendering engine."""

from __future__ import annotations

import logging
from typing import Mapping

from jinja2 import DictLoader, Environment, StrictUndefined, TemplateError

from ..core.log import TRACE

logger = logging.getLogger(__name__)

SERVER_NAME = "server_name"

VARIABLE_START = "{{"
VARIABLE_END = "}}"

# Only {{ }} expands. Block and comment tags are moved to NUL-delimited
# markers so shell and config syntax such as ${#x} or {% passes through.
_BLOCK_START, _BLOCK_END = "{%\x00", "\x00%}"
_COMMENT_START, _COMMENT_END = "{#\x00", "\x00#}"

LINE_ENDINGS = ("\r\n", "\r", "\n")


class MixedLineEndingsError(TemplateError):
    """Raised when a template with variables mixes line-ending styles."""


def line_ending(source: str) -> str | None:
    """Return the line ending used by ``source``.

    Defaults to ``\\n`` for single-line text; None when styles are mixed.
    """
    crlf = source.count("\r\n")
    counts = {
        "\r\n": crlf,
        "\r": source.count("\r") - crlf,
        "\n": source.count("\n") - crlf,
    }
    used = [ending for ending in LINE_ENDINGS if counts[ending]]
    if len(used) > 1:
        return None
    return used[0] if used else "\n"


class TemplateRegistry:
    """Owned Jinja2 environments with templates registered by name.

    Jinja2 rewrites template line endings to the environment's
    ``newline_sequence``, so there is one environment per line-ending style,
    all reading from the same registry. Registering a name again replaces
    the previous source; the compiled template is rebuilt on the next lookup.
    """

    def __init__(self) -> None:
        self._sources: dict[str, str] = {}
        loader = DictLoader(self._sources)
        self.environments = {
            ending: Environment(
                loader=loader,
                undefined=StrictUndefined,
                autoescape=False,
                keep_trailing_newline=True,
                newline_sequence=ending,
                variable_start_string=VARIABLE_START,
                variable_end_string=VARIABLE_END,
                block_start_string=_BLOCK_START,
                block_end_string=_BLOCK_END,
                comment_start_string=_COMMENT_START,
                comment_end_string=_COMMENT_END,
            )
            for ending in LINE_ENDINGS
        }

    def __contains__(self, name: str) -> bool:
        return name in self._sources

    def __len__(self) -> int:
        return len(self._sources)

    def register(self, name: str, source: str) -> None:
        if name in self._sources:
            logger.log(TRACE, f"Replacing template {name}")
        self._sources[name] = source

    def render(self, name: str, variables: Mapping[str, str]) -> str:
        """Render a registered template, keeping its line endings.

        Raises:
            jinja2.TemplateError: On syntax errors, undefined variables or a
                template with variables and mixed line endings
        """
        source = self._sources[name]
        ending = line_ending(source)
        if ending is None:
            if VARIABLE_START not in source:
                logger.log(TRACE, f"{name} mixes line endings, copying it unrendered")
                return source
            raise MixedLineEndingsError(
                f"{name} mixes line endings and cannot be rendered verbatim"
            )
        template = self.environments[ending].get_template(name)
        return template.render(dict(variables))


def template_variables(variables: Mapping[str, str], context_name: str) -> dict[str, str]:
    """Copy of ``variables`` with ``server_name`` bound to the context."""
    scoped = dict(variables)
    scoped[SERVER_NAME] = context_name
    return scoped


def render_text(
    registry: TemplateRegistry,
    name: str,
    source: str,
    context_name: str,
    variables: Mapping[str, str],
) -> str:
    """Register ``source`` under ``name`` and render it for one context."""
    logger.log(TRACE, f"Rendering template {name} for context {context_name}")
    registry.register(name, source)
    return registry.render(name, template_variables(variables, context_name))


__all__ = [
    "MixedLineEndingsError",
    "TemplateError",
    "TemplateRegistry",
    "line_ending",
    "render_text",
    "template_variables",
]
