"""Jinja2-based widget templates."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    DictLoader,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    TemplateSyntaxError,
    UndefinedError,
)
from jinja2.exceptions import SecurityError
from jinja2.sandbox import SandboxedEnvironment


class TemplateError(Exception):
    """Error in template lookup or rendering (including sandbox violations)."""


class WidgetTemplates:
    """Sandboxed, async-enabled Jinja2 environment for widget markup.

    Templates are addressed as `<module-name>/<template>.html`. Inline
    templates (mostly for tests and small sites) take precedence over
    templates found in directories.

    Example:
        templates = WidgetTemplates(
            templates={"hero-widgets/widget.html": "<h1>{{ widget.title }}</h1>"}
        )
        html = await templates.render(
            "hero-widgets/widget.html", widget=widget, options={}, manager=hero
        )
    """

    def __init__(
        self,
        directories: Sequence[str | Path] = (),
        *,
        templates: Mapping[str, str] | None = None,
    ) -> None:
        loaders: list[BaseLoader] = []
        if templates:
            loaders.append(DictLoader(dict(templates)))
        if directories:
            loaders.append(FileSystemLoader([str(d) for d in directories]))

        # Widget markup is HTML: escape everything not explicitly marked safe
        self._env = SandboxedEnvironment(
            loader=ChoiceLoader(loaders),
            undefined=StrictUndefined,
            autoescape=True,
            enable_async=True,
        )

    async def render(self, name: str, **variables: Any) -> str:
        """Render a named template.

        Args:
            name: Template name, e.g. "hero-widgets/widget.html"
            **variables: Template variables

        Returns:
            Rendered markup

        Raises:
            TemplateError: If the template is missing, invalid, references an
                undefined variable or violates the sandbox
        """
        try:
            template = self._env.get_template(name)
        except TemplateNotFound as e:
            raise TemplateError(f"Template not found: {name}") from e
        except TemplateSyntaxError as e:
            raise TemplateError(f"Invalid template syntax in {name}: {e}") from e

        try:
            return await template.render_async(**variables)
        except UndefinedError as e:
            raise TemplateError(f"Undefined variable in {name}: {e}") from e
        except SecurityError as e:
            raise TemplateError(f"Sandbox violation in {name}: {e}") from e
