from __future__ import annotations

from types import ModuleType
from typing import Callable

from stream_conduit.adapters.contracts import AdapterRole, get_adapter_meta

AdapterFactory = Callable[[dict[str, object]], object]


class AdapterDiscoveryError(RuntimeError):
    # Duplicate adapter names, non-callable targets or unknown names at build time.
    pass


def discover_adapters(modules: list[ModuleType], *, role: AdapterRole | None = None) -> dict[str, AdapterFactory]:
    # Collect @adapter factories by name, optionally only those with the given role.
    discovered: dict[str, AdapterFactory] = {}
    for module in modules:
        for value in module.__dict__.values():
            meta = get_adapter_meta(value)
            if meta is None or not meta.name:
                continue
            if role is not None and meta.role != role:
                continue
            if not callable(value):
                raise AdapterDiscoveryError(f"Adapter '{meta.name}' target is not callable")
            known = discovered.get(meta.name)
            if known is value:
                # Same factory re-exported through another module.
                continue
            if known is not None:
                raise AdapterDiscoveryError(f"Duplicate adapter name discovered: {meta.name}")
            discovered[meta.name] = value
    return discovered


def build_adapter(adapters: dict[str, AdapterFactory], name: str, settings: dict[str, object] | None = None) -> object:
    factory = adapters.get(name)
    if factory is None:
        raise AdapterDiscoveryError(f"Unknown adapter: {name} (known: {sorted(adapters)})")
    return factory(dict(settings or {}))
