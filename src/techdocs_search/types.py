from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

TECHDOCS_REF_ANNOTATION = "backstage.io/techdocs-ref"
RELATION_OWNED_BY = "ownedBy"
DEFAULT_NAMESPACE = "default"


@dataclass(frozen=True)
class EntityKey:
    kind: str
    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.kind}/{self.name}"


@dataclass(frozen=True)
class TechDocsDocument:
    title: str
    text: str
    location: str
    path: str
    kind: str
    namespace: str
    name: str
    entity_title: str | None
    component_type: str
    lifecycle: str
    owner: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "text": self.text,
            "location": self.location,
            "path": self.path,
            "kind": self.kind,
            "namespace": self.namespace,
            "name": self.name,
            "entityTitle": self.entity_title,
            "componentType": self.component_type,
            "lifecycle": self.lifecycle,
            "owner": self.owner,
        }


class EntityRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    kind: str = ""
    namespace: str = DEFAULT_NAMESPACE
    name: str = ""


class EntityRelation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str = ""
    target: EntityRef | None = None


class EntityMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    namespace: str | None = None
    title: str | None = None
    annotations: dict[str, Any] = Field(default_factory=dict)


class Entity(BaseModel):
    """A catalog entity, reduced to the fields the collator reads."""

    model_config = ConfigDict(extra="ignore")

    kind: str
    metadata: EntityMetadata
    spec: dict[str, Any] | None = None
    relations: list[EntityRelation] = Field(default_factory=list)

    @property
    def namespace(self) -> str:
        return self.metadata.namespace or DEFAULT_NAMESPACE

    def has_techdocs(self) -> bool:
        return bool(self.metadata.annotations.get(TECHDOCS_REF_ANNOTATION))

    def spec_value(self, key: str) -> str:
        value = (self.spec or {}).get(key)
        if value is None:
            return ""
        return str(value)

    def owner_name(self) -> str:
        for relation in self.relations:
            if relation.type == RELATION_OWNED_BY:
                return relation.target.name if relation.target is not None else ""
        return ""


@dataclass(frozen=True)
class EntitiesResponse:
    items: list[Entity]


class SearchIndexEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    text: str | None = None
    location: str


class SearchIndex(BaseModel):
    model_config = ConfigDict(extra="ignore")

    docs: list[SearchIndexEntry]
