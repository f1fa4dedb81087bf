from .domain import LogMessage


def discovery_modules() -> list[str]:
    # Modules contributing log adapters for discovery.
    return ["stream_conduit.observability.adapters.logging"]


__all__ = ["LogMessage", "discovery_modules"]
