"""Mustache renderer for topic name templates.

Topic templates use ``{{placeholder}}`` markers, e.g.
``topic-{{functionality}}-{{action}}``. Rendering follows Mustache rules:
a placeholder with no matching variable, or whose value is None, renders as
an empty string. Dotted names walk nested mappings; any other characters
(``-`` included) are part of the name.
"""

import logging
from typing import Any, Mapping, Optional

import chevron
from chevron.tokenizer import ChevronError, tokenize

from topic_resolver.errors import TemplateRenderError

logger = logging.getLogger(__name__)

# Tokens that look a name up in the variables
NAME_TAGS = ("variable", "no escape", "section", "inverted section")


class TemplateRenderer:
    """Renders topic name templates with optional variables."""

    def render(
            self,
            template: str,
            variables: Optional[Mapping[str, Any]] = None,
            name: Optional[str] = None,
    ) -> str:
        """Render a template string.

        Args:
            template: Template source
            variables: Placeholder values, matched by name
            name: Template name, used in error messages

        Returns:
            Rendered string

        Raises:
            TemplateRenderError: If the template source is malformed
        """
        variables = dict(variables or {})
        try:
            missing = {key for key in self.placeholders(template) if key.split(".")[0] not in variables}
            if missing:
                logger.debug(f"Template {name or template!r} rendered without values for {sorted(missing)}")
            return chevron.render(template, variables, warn=False)
        except ChevronError as e:
            raise TemplateRenderError(
                f"Cannot render topic template '{name or template}': {e}", name
            ) from e

    def placeholders(self, template: str) -> set[str]:
        """Return the placeholder names referenced by a template.

        Raises:
            chevron.tokenizer.ChevronError: If the template source is malformed
        """
        return {
            key for tag, key in tokenize(template)
            if tag in NAME_TAGS and key != "."
        }
