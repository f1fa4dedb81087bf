from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stream_conduit.config.validator import validate_runtime_config

# Config models map YAML sections to typed structures; the runtime section is owned by the framework.


class FibsConfig(BaseModel):
    # How many numbers to write, where, and which fusion layout to use.
    model_config = ConfigDict(extra="forbid")
    count: int = Field(default=20, ge=0)
    output: str = "fibs.txt"
    layout: Literal["source_fused", "sink_fused", "conduit"] = "source_fused"


class CopyFileConfig(BaseModel):
    # Copy of the written file, made with the constant-memory copy pipeline.
    model_config = ConfigDict(extra="forbid")
    enabled: bool = True
    destination: str = "fibs2.txt"


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    version: int = 1
    fibs: FibsConfig = Field(default_factory=FibsConfig)
    copy_file: CopyFileConfig = Field(default_factory=CopyFileConfig)
    runtime: dict[str, Any] = Field(default_factory=lambda: validate_runtime_config(None))

    @field_validator("runtime", mode="before")
    @classmethod
    def _validate_runtime(cls, value: object) -> dict[str, object]:
        # Framework validation fills defaults and rejects unknown keys.
        return validate_runtime_config(value)
