"""Core data models for the Framez page builder."""

from dataclasses import dataclass, field
from typing import List, Dict, Any, Optional


EMBED_SENTINEL = "@@PLUGINFILE@@"


@dataclass
class Card:
    """A single question/answer pair of a deck."""
    question: str
    answer: str
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Card":
        """Build a card from a mapping, keeping unknown fields on ``extra``."""
        extra = {k: v for k, v in data.items() if k not in ("question", "answer")}
        return cls(
            question=data.get("question", ""),
            answer=data.get("answer", ""),
            extra=extra
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data["question"] = self.question
        data["answer"] = self.answer
        return data


# Presentation order is input order.
CardDeck = List[Card]


@dataclass(frozen=True)
class LibraryDependency:
    """An interactive-content library pinned at major.minor granularity."""
    machine_name: str
    major_version: int
    minor_version: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "machineName": self.machine_name,
            "majorVersion": str(self.major_version),
            "minorVersion": str(self.minor_version)
        }

    def __str__(self) -> str:
        return f"{self.machine_name} {self.major_version}.{self.minor_version}"


@dataclass
class PackageManifest:
    """Metadata manifest of a content package (``h5p.json``)."""
    title: str
    language: str
    main_library: str
    dependencies: List[LibraryDependency]
    embed_types: List[str] = field(default_factory=lambda: ["iframe"])
    license: str = "U"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "language": self.language,
            "mainLibrary": self.main_library,
            "embedTypes": list(self.embed_types),
            "license": self.license,
            "preloadedDependencies": [d.to_dict() for d in self.dependencies]
        }


@dataclass
class DeckContent:
    """Content document of a card deck package (``content/content.json``)."""
    dialogs: List[Dict[str, str]]
    behaviour: Dict[str, bool]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dialogs": [dict(d) for d in self.dialogs],
            "behaviour": dict(self.behaviour)
        }


@dataclass(frozen=True)
class ContentPackage:
    """A built, immutable card deck package."""
    manifest: PackageManifest
    content: DeckContent
    archive_bytes: bytes
    filename: str

    @property
    def size(self) -> int:
        return len(self.archive_bytes)


@dataclass(frozen=True)
class EmbedReference:
    """Placeholder token resolved downstream to a stored package."""
    filename: str
    sentinel: str = EMBED_SENTINEL

    @property
    def token(self) -> str:
        return f"{self.sentinel}/{self.filename}"


@dataclass
class StoredContent:
    """Reference returned by a content store after a write."""
    reference: str
    filename: str
    size: int
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class SessionData:
    """Session material fetched from the remote API."""
    summary: str
    flashcards: List[Any]
    namespace_name: str


@dataclass
class PageRecord:
    """A course page as held by the host page store."""
    page_id: int
    course_id: str
    name: str
    content: str
    time_modified: float


@dataclass
class PageResult:
    """Outcome of a create-or-update page request."""
    page_id: int
    action: str  # 'created', 'updated'
    package: Optional[ContentPackage] = None
    stored: Optional[StoredContent] = None
    warnings: List[Dict[str, Any]] = field(default_factory=list)
