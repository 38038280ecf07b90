from typing import Optional, Literal
from pydantic import BaseModel, Field

OutcomeKind = Literal["success", "decode_failure", "io_failure"]
Strategy = Literal["stream", "mmap"]

class ReplacementOutcome(BaseModel):
    path: str
    kind: OutcomeKind
    reason: str = ""
    encoding: Optional[str] = None
    changed: bool = False

    @property
    def ok(self) -> bool:
        return self.kind == "success"

    @classmethod
    def success(cls, path, *, encoding=None, changed=False):
        return cls(path=str(path), kind="success", encoding=encoding, changed=changed)

    @classmethod
    def decode_failure(cls, path, reason):
        return cls(path=str(path), kind="decode_failure", reason=str(reason))

    @classmethod
    def io_failure(cls, path, reason):
        return cls(path=str(path), kind="io_failure", reason=str(reason))

class RunSummary(BaseModel):
    root: str
    dirs_listed: int = Field(0, ge=0)
    dirs_unreadable: int = Field(0, ge=0)
    dirs_revisited: int = Field(0, ge=0)
    files_seen: int = Field(0, ge=0)
    files_matched: int = Field(0, ge=0)
    succeeded: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    faults: int = Field(0, ge=0)
    peak_in_flight: int = Field(0, ge=0)
