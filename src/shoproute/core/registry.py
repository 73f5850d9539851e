"""Pydantic models for the data read from the config store.

Registry entries form a closed set of variants (:class:`EntryKind`): a path
alone, a path with a template, or a path with a template and a layout. A raw
registry item is validated one at a time by :func:`parse_registry_entry`, so
a single malformed item never rejects the rest of its package; the builder
logs and reports every item it had to skip.

Layout records keep ``enabled`` as stored; the layout matcher insists on the
boolean ``True``.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from shoproute.exceptions import MalformedRegistryEntry

__all__ = [
    "EntryKind",
    "LayoutRecord",
    "Package",
    "RegistryEntry",
    "Shop",
    "parse_registry_entry",
]


class EntryKind(str, Enum):
    PATH = "path"
    PATH_TEMPLATE = "path+template"
    PATH_TEMPLATE_LAYOUT = "path+template+layout"


class RegistryEntry(BaseModel):
    """One potential route contributed by a package."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    route: str = Field(min_length=1)
    template: Optional[str] = None
    name: Optional[str] = None
    layout: Optional[str] = None
    workflow: Optional[str] = None
    triggers_enter: List[Callable[..., Any]] = Field(default_factory=list, alias="triggersEnter")
    triggers_exit: List[Callable[..., Any]] = Field(default_factory=list, alias="triggersExit")

    @field_validator("triggers_enter", "triggers_exit", mode="before")
    @classmethod
    def _coerce_hooks(cls, value: Any) -> Any:
        if value is None:
            return []
        if callable(value):
            return [value]
        return value

    @property
    def kind(self) -> EntryKind:
        if self.template and self.layout:
            return EntryKind.PATH_TEMPLATE_LAYOUT
        if self.template:
            return EntryKind.PATH_TEMPLATE
        return EntryKind.PATH

    def render_options(self) -> Dict[str, Optional[str]]:
        return {"template": self.template, "layout": self.layout, "workflow": self.workflow}


class Package(BaseModel):
    """Installed feature unit; ``registry`` holds the raw items."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    registry: List[Any] = Field(default_factory=list)

    @field_validator("registry", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class LayoutRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    layout: Optional[str] = None
    workflow: Optional[str] = None
    # kept as stored; only the boolean True enables a record
    enabled: Any = False
    structure: Dict[str, Any] = Field(default_factory=dict)


class Shop(BaseModel):
    model_config = ConfigDict(extra="allow")

    shop_id: str = Field(validation_alias=AliasChoices("shop_id", "shopId", "_id"))
    name: str = ""
    layout: List[LayoutRecord] = Field(default_factory=list)

    @field_validator("layout", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


def parse_registry_entry(package_name: Optional[str], item: Any) -> RegistryEntry:
    """Validate one raw registry item.

    Raises:
        MalformedRegistryEntry: the item is not a mapping, has no ``route`` or
            fails model validation.
    """
    label = package_name or "<unnamed>"
    if isinstance(item, RegistryEntry):
        return item
    if not isinstance(item, Mapping):
        raise MalformedRegistryEntry(label, f"expected a mapping, got {type(item).__name__}", item)
    if not item.get("route"):
        raise MalformedRegistryEntry(label, "missing route", item)
    try:
        return RegistryEntry.model_validate(dict(item))
    except ValidationError as exc:
        fields = ", ".join(".".join(str(loc) for loc in err["loc"]) for err in exc.errors())
        raise MalformedRegistryEntry(label, f"invalid fields: {fields}", item) from exc
