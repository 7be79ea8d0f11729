"""DOM probe port — the page-side collaborator the bust scanner depends on."""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Optional, Protocol


@dataclass
class DomElement:
    """A clickable element as seen by the scanner. ``handle`` is adapter-specific."""

    text: str
    classes: FrozenSet[str] = field(default_factory=frozenset)
    handle: Optional[Any] = None

    @property
    def normalized_text(self) -> str:
        return (self.text or "").strip().lower()

    def has_class(self, name: str) -> bool:
        return name in self.classes


class DomProbe(Protocol):
    async def query_clickable(self) -> List[DomElement]:
        """Return clickable elements in document order."""
        ...

    async def click(self, element: DomElement) -> None:
        ...

    async def release(self) -> None:
        """Undo any side effects the probe registered on the page."""
        ...
