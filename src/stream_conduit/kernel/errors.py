from __future__ import annotations


class ConduitError(Exception):
    # Base class for failures raised by pipeline primitives and their collaborators.
    pass


class ResourceError(ConduitError):
    # Acquisition or I/O failure on a scoped resource (missing file, full disk, failed release).
    pass


class EncodingError(ConduitError):
    # A codec stage cannot represent a value in the target charset (either direction).
    def __init__(self, charset: str, message: str) -> None:
        self.charset = charset
        super().__init__(f"{charset}: {message}")


class UsageError(ConduitError):
    # Contract violation (e.g. pulling a source after it closed); a programming fault, not retried.
    pass
