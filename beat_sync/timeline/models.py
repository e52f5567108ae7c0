"""
Data models for the sync timeline.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Iterable, Union
import json


class ElementType(Enum):
    TEXT = "text"
    IMAGE = "image"
    BACKGROUND = "background"
    TRANSITION = "transition"
    ANIMATION = "animation"     # Generic fallback


class SyncAction(Enum):
    HIGHLIGHT = "highlight"     # Downbeats (every 4th beat)
    TRANSFORM = "transform"     # Middle of every other bar
    PULSE = "pulse"             # Everything else


class GenerationStatus(Enum):
    IDLE = "idle"
    GENERATING = "generating"
    READY = "ready"
    FAILED = "failed"


class GenerationOutcome(Enum):
    SUCCESS = "success"
    EMPTY = "empty"             # No elements or no beats; not an error
    ERROR = "error"


# Substring conventions used when a registry entry carries no explicit type
_TYPE_CONVENTIONS = (
    ("text", ElementType.TEXT),
    ("image", ElementType.IMAGE),
    ("img", ElementType.IMAGE),
    ("bg", ElementType.BACKGROUND),
    ("transition", ElementType.TRANSITION),
)


def infer_element_type(element_id: str) -> ElementType:
    """Guess an element's type from its identifier."""
    for needle, element_type in _TYPE_CONVENTIONS:
        if needle in element_id:
            return element_type
    return ElementType.ANIMATION


@dataclass
class AnimationDescriptor:
    """Animation applied to one element when a sync point fires."""
    type: str = "scale"
    duration: float = 0.3       # seconds
    delay: float = 0.0
    easing: str = "ease-out"
    custom_params: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "duration": self.duration,
            "delay": self.delay,
            "easing": self.easing,
            "custom_params": dict(self.custom_params)
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'AnimationDescriptor':
        return cls(
            type=data.get("type", "scale"),
            duration=data.get("duration", 0.3),
            delay=data.get("delay", 0.0),
            easing=data.get("easing", "ease-out"),
            custom_params=dict(data.get("custom_params", {}))
        )


@dataclass
class ElementRef:
    """A visual element as seen by the engine."""
    id: str
    type: Optional[ElementType] = None      # None = infer from id
    section_id: Optional[str] = None
    animation: Optional[AnimationDescriptor] = None  # Element's own animation, if any

    @property
    def resolved_type(self) -> ElementType:
        return self.type if self.type is not None else infer_element_type(self.id)

    @classmethod
    def from_dict(cls, data: dict) -> 'ElementRef':
        raw_type = data.get("type")
        animation = data.get("animation")
        return cls(
            id=data["id"],
            type=_parse_element_type(raw_type),
            section_id=data.get("section_id"),
            animation=AnimationDescriptor.from_dict(animation) if animation else None
        )


def _parse_element_type(raw: Optional[str]) -> Optional[ElementType]:
    if raw is None:
        return None
    try:
        return ElementType(raw)
    except ValueError:
        return None


@dataclass
class SyncParams:
    intensity: float = 0.7
    duration: float = 0.3       # seconds

    def to_dict(self) -> dict:
        return {"intensity": self.intensity, "duration": self.duration}


@dataclass
class SyncPoint:
    """A beat mapped to an element and an action."""
    id: str
    timestamp: float            # seconds from start
    element_id: str
    element_type: ElementType = ElementType.ANIMATION
    action: SyncAction = SyncAction.PULSE
    params: SyncParams = field(default_factory=SyncParams)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "element_id": self.element_id,
            "element_type": self.element_type.value,
            "action": self.action.value,
            "params": self.params.to_dict()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SyncPoint':
        params = data.get("params", {})
        return cls(
            id=data["id"],
            timestamp=data.get("timestamp", 0.0),
            element_id=data["element_id"],
            element_type=ElementType(data.get("element_type", "animation")),
            action=SyncAction(data.get("action", "pulse")),
            params=SyncParams(
                intensity=params.get("intensity", 0.7),
                duration=params.get("duration", 0.3)
            )
        )


@dataclass
class Section:
    """A group of elements in the authoring document."""
    id: str
    elements: List[ElementRef] = field(default_factory=list)


class ElementRegistry:
    """
    Ordered view of the elements in an authoring document.

    Sections keep their order, and elements keep their order within a
    section. snapshot() flattens them in that order.
    """

    def __init__(self, sections: Optional[Iterable[Section]] = None):
        self.sections: List[Section] = list(sections or [])

    @classmethod
    def from_elements(cls, elements: Iterable[Union[str, ElementRef]],
                      section_id: Optional[str] = None) -> 'ElementRegistry':
        """Build a single-section registry from ids or ElementRefs."""
        refs = [e if isinstance(e, ElementRef) else ElementRef(id=e) for e in elements]
        return cls([Section(id=section_id or "main", elements=refs)])

    @classmethod
    def from_dict(cls, data: dict) -> 'ElementRegistry':
        sections = []
        for s in data.get("sections", []):
            sections.append(Section(
                id=s["id"],
                elements=[ElementRef.from_dict(e) for e in s.get("elements", [])]
            ))
        return cls(sections)

    def add_section(self, section: Section):
        self.sections.append(section)

    def remove_element(self, element_id: str) -> bool:
        """Remove an element by ID."""
        for section in self.sections:
            for i, element in enumerate(section.elements):
                if element.id == element_id:
                    section.elements.pop(i)
                    return True
        return False

    def snapshot(self) -> List[ElementRef]:
        """All elements, in document order."""
        refs = []
        for section in self.sections:
            for element in section.elements:
                refs.append(ElementRef(
                    id=element.id,
                    type=element.type,
                    section_id=element.section_id or section.id,
                    animation=element.animation
                ))
        return refs

    def get_element(self, element_id: str) -> Optional[ElementRef]:
        for section in self.sections:
            for element in section.elements:
                if element.id == element_id:
                    return element
        return None

    def get_section_id(self, element_id: str) -> Optional[str]:
        """Section an element belongs to; an explicit ElementRef.section_id wins."""
        for section in self.sections:
            for element in section.elements:
                if element.id == element_id:
                    return element.section_id or section.id
        return None

    def __len__(self) -> int:
        return sum(len(s.elements) for s in self.sections)


@dataclass
class PlaybackClock:
    """Read-only view of the player: is it running, and where is it."""
    is_playing: bool = False
    current_time: float = 0.0   # seconds


@dataclass
class GenerationResult:
    """Outcome of one sync-point generation."""
    outcome: GenerationOutcome
    points: List[SyncPoint] = field(default_factory=list)
    beats: List[float] = field(default_factory=list)
    tempo: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, points: List[SyncPoint], beats: List[float],
                tempo: Optional[int] = None) -> 'GenerationResult':
        return cls(GenerationOutcome.SUCCESS, points=points, beats=beats, tempo=tempo)

    @classmethod
    def empty(cls, beats: Optional[List[float]] = None,
              tempo: Optional[int] = None) -> 'GenerationResult':
        return cls(GenerationOutcome.EMPTY, beats=list(beats or []), tempo=tempo)

    @classmethod
    def failure(cls, error: str) -> 'GenerationResult':
        return cls(GenerationOutcome.ERROR, error=error)

    @property
    def ok(self) -> bool:
        return self.outcome != GenerationOutcome.ERROR

    def to_json(self, indent: int = 2) -> str:
        return json.dumps({
            "outcome": self.outcome.value,
            "error": self.error,
            "beat_count": len(self.beats),
            "tempo": self.tempo,
            "points": [p.to_dict() for p in self.points]
        }, indent=indent)
