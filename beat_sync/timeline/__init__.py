"""
Timeline module for beat-synced animation.
Provides sync point generation, scheduling, and animation dispatch.
"""

from .scheduler import SyncScheduler, CooldownHandle
from .generator import SyncPointGenerator, build_sync_points
from .models import (
    SyncPoint,
    SyncAction,
    ElementType,
    ElementRef,
    ElementRegistry,
    Section,
    AnimationDescriptor,
    PlaybackClock,
    GenerationResult,
    GenerationStatus,
    GenerationOutcome,
)

__all__ = [
    'SyncScheduler',
    'CooldownHandle',
    'SyncPointGenerator',
    'build_sync_points',
    'SyncPoint',
    'SyncAction',
    'ElementType',
    'ElementRef',
    'ElementRegistry',
    'Section',
    'AnimationDescriptor',
    'PlaybackClock',
    'GenerationResult',
    'GenerationStatus',
    'GenerationOutcome',
]
