# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Content-type schema models for the Strapi query SDK.

Provides strongly-typed representations of the schemas returned by the
Strapi content-type-builder API, plus helpers to walk relation paths.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from ..core._error_codes import SCHEMA_ATTRIBUTE_NOT_RELATION, SCHEMA_CONTENT_TYPE_NOT_FOUND
from ..core.errors import SchemaError

# Type alias for semantic clarity
ContentTypeUid = str  # e.g., "api::article.article"


@dataclass
class AttributeInfo:
    """
    Attribute (field) metadata of a content type.

    :param name: Attribute name.
    :type name: str
    :param type: Strapi attribute type (e.g., "string", "integer", "relation", "media").
    :type type: str
    :param relation: Relation kind for relation attributes (e.g., "manyToOne").
    :type relation: str | None
    :param target: Target content-type UID for relation attributes.
    :type target: str | None
    """

    name: str
    type: str
    relation: Optional[str] = None
    target: Optional[ContentTypeUid] = None
    required: bool = False
    unique: bool = False
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    inversed_by: Optional[str] = None
    mapped_by: Optional[str] = None

    @property
    def is_relation(self) -> bool:
        return self.relation is not None

    @classmethod
    def from_api_response(cls, name: str, response_data: Dict[str, Any]) -> "AttributeInfo":
        return cls(
            name=name,
            type=response_data.get("type", "unknown"),
            relation=response_data.get("relation"),
            target=response_data.get("target"),
            required=bool(response_data.get("required", False)),
            unique=bool(response_data.get("unique", False)),
            min_length=response_data.get("minLength"),
            max_length=response_data.get("maxLength"),
            inversed_by=response_data.get("inversedBy"),
            mapped_by=response_data.get("mappedBy"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "relation": self.relation,
            "target": self.target,
            "required": self.required,
            "unique": self.unique,
            "min_length": self.min_length,
            "max_length": self.max_length,
            "inversed_by": self.inversed_by,
            "mapped_by": self.mapped_by,
        }


@dataclass
class ContentTypeInfo:
    """
    Content-type schema.

    :param uid: Unique identifier (e.g., "api::article.article").
    :type uid: str
    :param api_id: API identifier (e.g., "article").
    :type api_id: str
    :param kind: "collectionType" or "singleType".
    :type kind: str
    :param plural_name: Plural name used in REST URLs (e.g., "articles").
    :type plural_name: str
    :param attributes: Attributes keyed by name, in schema order.
    :type attributes: dict[str, AttributeInfo]

    Example::

        for ct in client.content_types.list():
            print(ct.display_name, ct.scalar_fields(), ct.relation_fields())
    """

    uid: ContentTypeUid
    api_id: str
    kind: str = "collectionType"
    singular_name: str = ""
    plural_name: str = ""
    display_name: str = ""
    description: Optional[str] = None
    draft_and_publish: Optional[bool] = None
    attributes: Dict[str, AttributeInfo] = field(default_factory=dict)

    @classmethod
    def from_api_response(cls, response_data: Dict[str, Any]) -> "ContentTypeInfo":
        """
        Create a ContentTypeInfo from a content-type-builder payload.

        Accepts the detail payload (schema under ``schema``) as well as the
        bare list entry, which may lack a schema.
        """
        schema = response_data.get("schema") or {}
        info = response_data.get("info") or {}
        options = response_data.get("options") or {}
        raw_attributes = schema.get("attributes", response_data.get("attributes")) or {}
        api_id = response_data.get("apiID", "")
        return cls(
            uid=response_data.get("uid", ""),
            api_id=api_id,
            kind=schema.get("kind") or response_data.get("kind") or "collectionType",
            singular_name=schema.get("singularName") or info.get("singularName") or "",
            plural_name=schema.get("pluralName") or info.get("pluralName") or "",
            display_name=schema.get("displayName") or info.get("displayName") or api_id,
            description=schema.get("description", info.get("description")),
            draft_and_publish=schema.get("draftAndPublish", options.get("draftAndPublish")),
            attributes={
                name: AttributeInfo.from_api_response(name, attr)
                for name, attr in raw_attributes.items()
                if isinstance(attr, dict)
            },
        )

    def matches(self, collection: Optional[str]) -> bool:
        """Whether ``collection`` names this content type by plural name or API ID."""
        if not collection:
            return False
        return collection in (self.plural_name, self.api_id)

    def scalar_fields(self) -> List[str]:
        """Names of attributes that are not relations."""
        return [name for name, attr in self.attributes.items() if not attr.is_relation]

    def relation_fields(self) -> List[str]:
        """Names of relation attributes."""
        return [name for name, attr in self.attributes.items() if attr.is_relation]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uid": self.uid,
            "api_id": self.api_id,
            "kind": self.kind,
            "singular_name": self.singular_name,
            "plural_name": self.plural_name,
            "display_name": self.display_name,
            "description": self.description,
            "draft_and_publish": self.draft_and_publish,
            "attributes": {name: attr.to_dict() for name, attr in self.attributes.items()},
        }


class ContentTypeRegistry:
    """
    Lookup and relation-path helpers over a list of content types.

    A path is a sequence of relation names starting at a collection, e.g.
    ``["author", "company"]`` from ``"articles"``.
    """

    def __init__(self, content_types: Iterable[ContentTypeInfo] = ()) -> None:
        self._content_types: List[ContentTypeInfo] = list(content_types)
        self._by_uid: Dict[str, ContentTypeInfo] = {ct.uid: ct for ct in self._content_types}

    def __iter__(self):
        return iter(self._content_types)

    def __len__(self) -> int:
        return len(self._content_types)

    def __bool__(self) -> bool:
        return bool(self._content_types)

    def find(self, collection: Optional[str]) -> Optional[ContentTypeInfo]:
        """Content type whose plural name or API ID equals ``collection``."""
        for ct in self._content_types:
            if ct.matches(collection):
                return ct
        return None

    def by_uid(self, uid: Optional[str]) -> Optional[ContentTypeInfo]:
        if uid is None:
            return None
        return self._by_uid.get(uid)

    def resolve_path(self, collection: str, path: Sequence[str]) -> ContentTypeInfo:
        """
        Follow ``path`` from ``collection`` and return the content type it ends on.

        :raises ~strapi_query.core.errors.SchemaError: If a content type or relation is unknown.
        """
        current = self.find(collection)
        if current is None:
            raise SchemaError(
                f"Unknown collection '{collection}'.",
                subcode=SCHEMA_CONTENT_TYPE_NOT_FOUND,
                details={"collection": collection},
            )
        for name in path:
            attr = current.attributes.get(name)
            if attr is None or attr.target is None:
                raise SchemaError(
                    f"'{name}' is not a relation of '{current.uid}'.",
                    subcode=SCHEMA_ATTRIBUTE_NOT_RELATION,
                    details={"content_type": current.uid, "attribute": name},
                )
            target = self.by_uid(attr.target)
            if target is None:
                raise SchemaError(
                    f"Relation '{name}' targets unknown content type '{attr.target}'.",
                    subcode=SCHEMA_CONTENT_TYPE_NOT_FOUND,
                    details={"content_type": attr.target},
                )
            current = target
        return current

    def visited_uids(self, collection: str, path: Sequence[str]) -> Set[str]:
        """UIDs on the branch: the root collection plus every relation target along ``path``."""
        visited: Set[str] = set()
        current = self.find(collection)
        if current is None:
            return visited
        visited.add(current.uid)
        for name in path:
            attr = current.attributes.get(name)
            if attr is None or attr.target is None:
                break
            visited.add(attr.target)
            current = self.by_uid(attr.target)
            if current is None:
                break
        return visited

    def relation_candidates(self, collection: str, path: Sequence[str] = ()) -> List[str]:
        """
        Relations that may be populated at the end of ``path``.

        At the top level every relation is offered. Below it, relations whose
        target already appears on the branch (root collection included) are
        left out, so circular relations cannot nest forever.
        """
        try:
            current = self.resolve_path(collection, path)
        except SchemaError:
            return []
        if not path:
            return current.relation_fields()
        visited = self.visited_uids(collection, path)
        return [
            name
            for name, attr in current.attributes.items()
            if attr.is_relation and not (attr.target and attr.target in visited)
        ]


__all__ = ["AttributeInfo", "ContentTypeInfo", "ContentTypeRegistry", "ContentTypeUid"]
