from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class ScanMatch:
    """A single regex hit inside a project file."""

    file: str
    line: int
    evidence: str

    def to_dict(self) -> dict:
        return asdict(self)
