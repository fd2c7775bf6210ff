"""Builds Resource graphs from decoded HAL+JSON documents."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .link import LINK_FIELDS, Link
from .resource import Resource
from .uri_template import UriTemplateExpander, expand_template

log = logging.getLogger("hal_client.factory")


def _is_hal_document(value: Mapping[str, Any]) -> bool:
    return value.get("_links") is not None or value.get("_embedded") is not None


def _as_relations(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _link_from_scalar(value: Any) -> Optional[Dict[str, Any]]:
    # a bare string is shorthand for {"href": string}
    return {"href": value} if str(value).strip() != "" else None


def _resource_from_scalar(value: Any) -> List[Any]:
    return [value]


class ResourceFactory:
    """
    Converts loosely structured HAL+JSON into Resource/Link objects.

    Parsing is lenient and never raises: malformed link and embedded entries
    are dropped one by one. Links built here expand their URI templates with
    the injected expander.
    """

    def __init__(self, expander: Optional[UriTemplateExpander] = None):
        self.expander: UriTemplateExpander = expander or expand_template

    def create_resource(self, data: Any) -> Resource:
        if isinstance(data, Mapping):
            properties = dict(data)
        elif isinstance(data, (list, tuple)):
            properties = {str(i): v for i, v in enumerate(data)}
        else:
            properties = {}

        raw_links = _as_relations(properties.pop("_links", None))
        raw_embedded = _as_relations(properties.pop("_embedded", None))

        embedded: Dict[str, List[Resource]] = {}
        for rel, item in raw_embedded.items():
            embedded[rel] = [
                self.create_resource(entry)
                for entry in self._normalize(item, _resource_from_scalar)
            ]

        links: Dict[str, List[Link]] = {}
        for rel, item in raw_links.items():
            entries = self._normalize(item, _link_from_scalar)
            built = [
                link for link in map(self.create_link, entries) if link is not None
            ]
            if item and not built:
                log.debug("hal.link_relation_dropped", extra={"rel": rel})
                continue
            links[rel] = built

        return Resource(self._convert_nested(properties), links, embedded)

    def create_link(self, data: Any) -> Optional[Link]:
        """Builds a Link from a raw link object; None when href is missing or invalid."""
        if not isinstance(data, Mapping) or data.get("href") is None:
            return None

        fields = {name: data.get(name) for name in LINK_FIELDS}
        fields = {
            name: None if isinstance(value, (dict, list)) else value
            for name, value in fields.items()
        }
        if fields["href"] is None:
            return None

        try:
            link = Link.model_validate(fields)
        except ValidationError as exc:
            log.debug(
                "hal.link_invalid",
                extra={"href": fields["href"], "errors": exc.error_count()},
            )
            return None
        return link.use_expander(self.expander)

    @staticmethod
    def _normalize(data: Any, scalar_adapter: Callable[[Any], Any]) -> List[Any]:
        """
        Turns a relation value into a list of entries.
        - falsy values yield no entries
        - a single object becomes a one-element list
        - scalar entries are passed through scalar_adapter; None results are dropped
        """
        if not data:
            return []
        if not isinstance(data, list):
            data = [data]

        entries = []
        for entry in data:
            if entry is not None and not isinstance(entry, (dict, list)):
                entry = scalar_adapter(entry)
            if entry is not None:
                entries.append(entry)
        return entries

    def _convert_nested(self, value: Any) -> Any:
        # nested objects carrying _links/_embedded become Resources at any depth
        if isinstance(value, dict):
            return {
                key: self.create_resource(item)
                if isinstance(item, dict) and _is_hal_document(item)
                else self._convert_nested(item)
                for key, item in value.items()
            }
        if isinstance(value, list):
            return [
                self.create_resource(item)
                if isinstance(item, dict) and _is_hal_document(item)
                else self._convert_nested(item)
                for item in value
            ]
        return value


__all__ = ["ResourceFactory"]
