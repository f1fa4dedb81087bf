from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Literal, TypeVar

T = TypeVar("T")

# Where a factory's product sits in a pipeline.
AdapterRole = Literal["source", "sink", "log"]
ADAPTER_ROLES: tuple[AdapterRole, ...] = ("source", "sink", "log")


@dataclass(frozen=True, slots=True)
class AdapterMeta:
    # What a settings-driven factory builds and the element types flowing through it.
    name: str
    role: AdapterRole
    consumes: tuple[type[object], ...]
    emits: tuple[type[object], ...]

    def __post_init__(self) -> None:
        if self.role not in ADAPTER_ROLES:
            raise ValueError(f"Adapter '{self.name}' has unknown role: {self.role}")
        # A source has no upstream and a sink no downstream.
        if self.role == "source" and self.consumes:
            raise ValueError(f"Source adapter '{self.name}' cannot consume")
        if self.role in ("sink", "log") and self.emits:
            raise ValueError(f"Adapter '{self.name}' with role {self.role} cannot emit")


def adapter(
    *,
    role: AdapterRole,
    name: str | None = None,
    consumes: Iterable[type[object]] | None = None,
    emits: Iterable[type[object]] | None = None,
) -> Callable[[T], T]:
    """Mark a ``factory(settings) -> Source | Sink | LogSink``.

    The name defaults to the function name; discovery looks factories up by
    it when building pipelines from config.
    """

    def _decorate(target: T) -> T:
        resolved_name = name or getattr(target, "__name__", "")
        setattr(
            target,
            "__adapter_meta__",
            AdapterMeta(name=resolved_name, role=role, consumes=tuple(consumes or ()), emits=tuple(emits or ())),
        )
        return target

    return _decorate


def get_adapter_meta(target: object) -> AdapterMeta | None:
    meta = getattr(target, "__adapter_meta__", None)
    return meta if isinstance(meta, AdapterMeta) else None
