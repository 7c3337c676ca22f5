from enum import Enum
from typing import FrozenSet

from pydantic import BaseModel, field_validator

STDOUT_SENTINEL = "-"

# Receivers whose method calls are instrumentation, not behaviour
NOISE_RECEIVERS: FrozenSet[str] = frozenset({"metrics", "span", "tracing", "log", "logger", "logging"})


class OutputSink(str, Enum):
    STDOUT = "stdout"
    FILE = "file"

    @classmethod
    def for_path(cls, out: str) -> "OutputSink":
        return cls.STDOUT if out == STDOUT_SENTINEL else cls.FILE


class FlowConfig(BaseModel):
    start: str = "main"
    out: str = "flow.md"
    root: str = "."
    noise_receivers: FrozenSet[str] = NOISE_RECEIVERS

    @field_validator("start", "out")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @property
    def sink(self) -> OutputSink:
        return OutputSink.for_path(self.out)
