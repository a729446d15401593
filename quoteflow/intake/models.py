from dataclasses import dataclass, field


@dataclass(frozen=True)
class CandidateFile:
    """A file picked or dropped by the user, before submission."""

    name: str
    size: int
    media_type: str
    content: bytes = field(default=b"", repr=False)

    @classmethod
    def from_bytes(cls, name: str, content: bytes, media_type: str) -> "CandidateFile":
        return cls(name=name, size=len(content), media_type=media_type, content=content)

    def same_as(self, other: "CandidateFile") -> bool:
        """Duplicate check used by intake: same name and same byte size."""
        return self.name == other.name and self.size == other.size


@dataclass(frozen=True)
class IntakeResult:
    """Outcome of validating one incoming batch against the accepted set."""

    accepted: tuple[CandidateFile, ...]
    rejections: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.accepted)
