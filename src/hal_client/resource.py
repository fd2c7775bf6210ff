from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from .link import Link
from .property import Property


def _serialize(value: Any) -> Any:
    if isinstance(value, Resource):
        return value.to_dict()
    if isinstance(value, dict):
        return {k: _serialize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize(v) for v in value]
    return value


def _collapse(items: List[Any]) -> Any:
    # one entry serializes as a bare object, anything else as a list
    if len(items) == 1:
        return items[0].to_dict()
    return [item.to_dict() for item in items]


class Resource:
    """
    A parsed HAL document.

    Holds flat properties, links grouped by relation and embedded resources
    grouped by relation. Relations can be addressed by their short name when
    the document declares a matching CURIE (e.g. "users" finds "ns:users").
    """

    def __init__(
        self,
        properties: Optional[Dict[str, Any]] = None,
        links: Optional[Dict[str, List[Link]]] = None,
        embedded: Optional[Dict[str, List["Resource"]]] = None,
    ):
        self._properties: Dict[str, Any] = dict(properties or {})
        self._links: Dict[str, List[Link]] = {
            rel: list(items) for rel, items in (links or {}).items()
        }
        self._embedded: Dict[str, List[Resource]] = {
            rel: list(items) for rel, items in (embedded or {}).items()
        }

    # --- Properties ---

    def has_properties(self) -> bool:
        return len(self._properties) > 0

    def get_properties(self) -> Dict[str, Any]:
        return self._properties

    def has_property(self, name: str) -> bool:
        return name in self._properties

    def get_property(self, name: str) -> Any:
        return self._properties.get(name)

    def set_property(self, name: str, value: Any) -> None:
        self._properties[name] = value

    def get_value(self, name: str) -> Property:
        """Typed accessor for a property; missing names yield a None-valued Property."""
        return Property(name, self._properties.get(name))

    # --- Links ---

    def has_links(self) -> bool:
        return len(self._links) > 0

    def get_links(self) -> Dict[str, List[Link]]:
        return self._links

    def has_link(self, rel: str) -> bool:
        return self._resolve(rel, self._links) is not None

    def get_link(self, rel: str) -> List[Link]:
        key = self._resolve(rel, self._links)
        return self._links[key] if key is not None else []

    def get_first_link(self, rel: str) -> Optional[Link]:
        links = self.get_link(rel)
        return links[0] if links else None

    def set_link(self, rel: str, links: Iterable[Link]) -> None:
        key = self._resolve(rel, self._links)
        self._links[key if key is not None else rel] = list(links)

    # --- Embedded resources ---

    def has_resources(self) -> bool:
        return len(self._embedded) > 0

    def get_resources(self) -> Dict[str, List["Resource"]]:
        return self._embedded

    def has_resource(self, rel: str) -> bool:
        return self._resolve(rel, self._embedded) is not None

    def get_resource(self, rel: str) -> List["Resource"]:
        key = self._resolve(rel, self._embedded)
        return self._embedded[key] if key is not None else []

    def get_first_resource(self, rel: str) -> Optional["Resource"]:
        resources = self.get_resource(rel)
        return resources[0] if resources else None

    def set_resource(self, rel: str, resources: Iterable["Resource"]) -> None:
        key = self._resolve(rel, self._embedded)
        self._embedded[key if key is not None else rel] = list(resources)

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializes back to the HAL+JSON shape: _links, _embedded, then the
        properties, each in insertion order.
        """
        result: Dict[str, Any] = {}
        if self._links:
            result["_links"] = {
                rel: _collapse(items) for rel, items in self._links.items()
            }
        if self._embedded:
            result["_embedded"] = {
                rel: _collapse(items) for rel, items in self._embedded.items()
            }
        for name, value in self._properties.items():
            result[name] = _serialize(value)
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"Resource(properties={list(self._properties)!r}, "
            f"links={list(self._links)!r}, embedded={list(self._embedded)!r})"
        )

    def _resolve(self, rel: str, relations: Dict[str, Any]) -> Optional[str]:
        """Resolves rel to a key of relations, falling back to CURIE prefixes."""
        if rel in relations:
            return rel

        for curie in self._links.get("curies", []):
            if not curie.name:
                continue
            namespaced = f"{curie.name}:{rel}"
            if namespaced in relations:
                return namespaced

        return None


__all__ = ["Resource"]
