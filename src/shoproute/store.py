"""Config store contract and an in-memory implementation.

The router core only reads from the store: installed packages at startup, the
current shop document and the readiness of the shop subscription on every
render. Stores announce changes on their :class:`ChangeBus` so reactive
renders can re-run:

- ``ready_topic`` when the shop subscription becomes ready or stops being so;
- ``shop_topic(shop_id)`` when a shop document is inserted, replaced or
  updated.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from shoproute.core.reactive import ChangeBus
from shoproute.core.registry import Package, Shop

__all__ = ["ConfigStore", "MemoryConfigStore"]

logger = logging.getLogger(__name__)


class ConfigStore:
    """Read interface consumed by the builder and the layout dispatcher."""

    ready_topic = "shops.ready"

    def __init__(self, shop_id: str, *, bus: Optional[ChangeBus] = None):
        self.shop_id = shop_id
        self.bus = bus or ChangeBus()

    @staticmethod
    def shop_topic(shop_id: str) -> str:
        return f"shops:{shop_id}"

    def packages(self) -> List[Package]:  # pragma: no cover - interface
        raise NotImplementedError

    def shop(self, shop_id: str) -> Optional[Shop]:  # pragma: no cover - interface
        raise NotImplementedError

    def shops_ready(self) -> bool:  # pragma: no cover - interface
        raise NotImplementedError

    def shop_name(self) -> str:
        shop = self.shop(self.shop_id)
        return shop.name if shop else ""


class MemoryConfigStore(ConfigStore):
    """Dict backed store, mutable at runtime like an admin would."""

    def __init__(
        self,
        shop_id: str,
        *,
        packages: Iterable[Union[Package, Mapping[str, Any]]] = (),
        shops: Iterable[Union[Shop, Mapping[str, Any]]] = (),
        ready: bool = True,
        bus: Optional[ChangeBus] = None,
    ):
        super().__init__(shop_id, bus=bus)
        self._packages: List[Package] = [self._as_package(pkg) for pkg in packages]
        self._shops: Dict[str, Shop] = {}
        for shop in shops:
            doc = self._as_shop(shop)
            self._shops[doc.shop_id] = doc
        self._ready = bool(ready)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def packages(self) -> List[Package]:
        return list(self._packages)

    def shop(self, shop_id: str) -> Optional[Shop]:
        return self._shops.get(shop_id)

    def shops_ready(self) -> bool:
        return self._ready

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add_package(self, package: Union[Package, Mapping[str, Any]]) -> Package:
        pkg = self._as_package(package)
        self._packages.append(pkg)
        return pkg

    def put_shop(self, shop: Union[Shop, Mapping[str, Any]]) -> Shop:
        doc = self._as_shop(shop)
        self._shops[doc.shop_id] = doc
        self.bus.emit(self.shop_topic(doc.shop_id))
        return doc

    def update_shop(self, shop_id: str, **changes: Any) -> Shop:
        current = self._shops.get(shop_id)
        if current is None:
            raise KeyError(f"Unknown shop '{shop_id}'")
        data = current.model_dump()
        data.update(changes)
        data["shop_id"] = shop_id
        return self.put_shop(data)

    def set_ready(self, ready: bool = True) -> None:
        ready = bool(ready)
        if ready == self._ready:
            return
        self._ready = ready
        logger.debug("shop subscription ready=%s", ready)
        self.bus.emit(self.ready_topic)

    @staticmethod
    def _as_package(package: Union[Package, Mapping[str, Any]]) -> Package:
        if isinstance(package, Package):
            return package
        return Package.model_validate(dict(package))

    @staticmethod
    def _as_shop(shop: Union[Shop, Mapping[str, Any]]) -> Shop:
        if isinstance(shop, Shop):
            return shop
        return Shop.model_validate(dict(shop))
