"""RFC 6570 URI template expansion backed by the ``uritemplate`` package."""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

import uritemplate

UriTemplateExpander = Callable[[str, Mapping[str, Any]], str]


def expand_template(template: str, variables: Optional[Mapping[str, Any]] = None) -> str:
    """
    Expand a URI template with the given variables.
    Example: expand_template('/users{?page}', {'page': 2}) -> '/users?page=2'
    Undefined variables are dropped from the result.
    """
    return uritemplate.expand(template, dict(variables or {}))


__all__ = ["UriTemplateExpander", "expand_template"]
