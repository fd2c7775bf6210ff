from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, PrivateAttr, field_validator

from .uri_template import UriTemplateExpander, expand_template

LINK_FIELDS = (
    "href",
    "templated",
    "type",
    "deprecation",
    "name",
    "profile",
    "title",
    "hreflang",
)


class Link(BaseModel):
    """
    A single HAL link object.
    - href is a URI (RFC 3986) or, when templated, a URI template (RFC 6570)
    - every other attribute is optional and serialized only when set
    - attributes can be reassigned after construction (validated on assignment)
    """

    href: str
    templated: Optional[bool] = None
    type: Optional[str] = None
    deprecation: Optional[str] = None
    name: Optional[str] = None
    profile: Optional[str] = None
    title: Optional[str] = None
    hreflang: Optional[str] = None

    model_config = ConfigDict(
        extra="ignore",
        validate_assignment=True,
        coerce_numbers_to_str=True,
    )

    # a function default would be bound as a method on attribute access
    _expander: Optional[UriTemplateExpander] = PrivateAttr(default=None)

    @field_validator("href")
    @classmethod
    def _href_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("href must not be empty")
        return value

    def use_expander(self, expander: UriTemplateExpander) -> "Link":
        self._expander = expander
        return self

    @property
    def is_templated(self) -> bool:
        return bool(self.templated)

    @property
    def is_deprecated(self) -> bool:
        """True when a (non-empty) deprecation hint is present."""
        return bool(self.deprecation)

    def get_uri(self, variables: Optional[Mapping[str, Any]] = None) -> str:
        """
        Returns the target URI.
        Templated links are expanded with the given variables; plain links
        return href unchanged.
        """
        if not self.templated:
            return self.href
        expander = self._expander or expand_template
        return expander(self.href, variables or {})

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Link):
            return NotImplemented
        return self.to_dict() == other.to_dict()


__all__ = ["Link", "LINK_FIELDS"]
