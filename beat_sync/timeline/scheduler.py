"""
Sync Scheduler for beat-synced animation playback.
Matches the playback clock against sync points and fires animations.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..config import SchedulerConfig
from .animation import AnimationDispatcher, compose_animation
from .generator import SyncPointGenerator
from .models import (
    ElementRegistry,
    GenerationResult,
    GenerationStatus,
    PlaybackClock,
    SyncPoint,
)

logger = logging.getLogger('sync_scheduler')


@dataclass
class CooldownHandle:
    """Blocks a fired sync point from firing again until it expires."""
    point_id: str
    expires_at: float       # scheduler clock time
    cancelled: bool = False

    def cancel(self):
        self.cancelled = True

    def is_expired(self, now: float) -> bool:
        return self.cancelled or now >= self.expires_at


class SyncScheduler:
    """
    Runtime loop for beat-synced animations.

    Owns the sync point timeline and the per-point cooldowns. Call tick()
    regularly (e.g., every frame) with the current playback clock.
    Generation runs as an asyncio task; results are committed only if the
    sound they were generated for is still the current one.
    """

    def __init__(
        self,
        registry: Optional[ElementRegistry] = None,
        apply_animation: Optional[Callable[..., None]] = None,
        config: Optional[SchedulerConfig] = None,
        generator: Optional[SyncPointGenerator] = None,
        time_fn: Callable[[], float] = time.monotonic,
    ):
        self.config = config or SchedulerConfig()
        self.registry = registry
        self.generator = generator or SyncPointGenerator()
        self._dispatcher = AnimationDispatcher(apply_animation)
        self._time = time_fn

        # Timeline
        self.sync_points: List[SyncPoint] = []
        self.active_animations: Dict[str, CooldownHandle] = {}

        # Generation state
        self.status: GenerationStatus = GenerationStatus.IDLE
        self.error: Optional[str] = None
        self._sound: Any = None
        self._generation_token: int = 0
        self._running_token: Optional[int] = None  # Generation that owns GENERATING
        self._task: Optional[asyncio.Task] = None
        self._auto_armed: bool = False
        self._closed: bool = False

        # Callbacks
        self._on_fire: Optional[Callable[[SyncPoint], None]] = None
        self._on_status_change: Optional[Callable[[GenerationStatus], None]] = None

    def set_callbacks(
        self,
        on_fire: Optional[Callable[[SyncPoint], None]] = None,
        on_status_change: Optional[Callable[[GenerationStatus], None]] = None
    ):
        """Set callback functions for scheduler events."""
        self._on_fire = on_fire
        self._on_status_change = on_status_change

    def set_apply_animation(self, apply_animation: Optional[Callable[..., None]]):
        self._dispatcher.set_handler(apply_animation)

    def set_registry(self, registry: Optional[ElementRegistry]):
        self.registry = registry

    @property
    def sound(self) -> Any:
        return self._sound

    @property
    def has_sync_points(self) -> bool:
        return len(self.sync_points) > 0

    def set_sound(self, sound: Any):
        """
        Switch the active sound.

        Any generation still running for the previous sound becomes stale and
        its result will be dropped.
        """
        if sound is self._sound:
            return

        self._sound = sound
        self._generation_token += 1
        self.sync_points = []
        self.error = None
        self._auto_armed = sound is not None
        self._running_token = None
        self._set_status(GenerationStatus.IDLE)
        logger.info("Sound changed" if sound is not None else "Sound cleared")

    async def generate(self) -> Optional[GenerationResult]:
        """
        Generate sync points for the current sound and registry snapshot.

        Returns:
            The GenerationResult, or None if a generation is already running
            or the scheduler is closed. A returned result is not necessarily
            committed: stale results are discarded.
        """
        if self._closed:
            return None

        if self.status == GenerationStatus.GENERATING:
            logger.debug("Generation already in progress")
            return None

        self._generation_token += 1
        token = self._generation_token
        sound = self._sound
        elements = self.registry.snapshot() if self.registry else []

        self._running_token = token
        self._set_status(GenerationStatus.GENERATING)

        try:
            result = await self.generator.generate(sound, elements)
        except asyncio.CancelledError:
            self._release(token)
            raise
        except Exception as e:
            logger.exception(f"Unexpected error generating sync points: {e}")
            result = GenerationResult.failure(f"Failed to generate beat sync points: {e}")

        if not self._is_current(token, sound):
            logger.info("Discarding stale sync points")
            self._release(token)
            return result

        self._commit(result)
        return result

    def clear(self):
        """
        Remove all sync points. Running cooldowns expire on their own.

        A generation still in flight is invalidated; the status stays
        GENERATING until it finishes.
        """
        self._generation_token += 1
        self.sync_points = []
        self.error = None
        if self._running_token is None:
            self._set_status(GenerationStatus.IDLE)
        logger.info("Sync points cleared")

    def tick(self, clock: PlaybackClock) -> List[SyncPoint]:
        """
        Process one clock tick. Call this every frame.

        Args:
            clock: Current playback state (is_playing, current_time)

        Returns:
            Sync points fired on this tick, in timeline order
        """
        if self._closed:
            return []

        now = self._time()
        self._expire_cooldowns(now)
        self._maybe_auto_generate()

        if not clock.is_playing or not self.sync_points:
            return []

        tolerance = self.config.tolerance_window
        due = [
            point for point in self.sync_points
            if abs(point.timestamp - clock.current_time) < tolerance
            and point.id not in self.active_animations
        ]
        due.sort(key=lambda p: p.timestamp)

        fired = []
        for point in due:
            if self._fire(point, now):
                fired.append(point)
        return fired

    def close(self):
        """Cancel pending work and cooldowns. The scheduler fires nothing afterwards."""
        self._closed = True
        self._generation_token += 1

        if self._task and not self._task.done():
            self._task.cancel()
        self._task = None

        for handle in self.active_animations.values():
            handle.cancel()
        self.active_animations.clear()
        logger.info("Scheduler closed")

    def get_status(self) -> Dict[str, Any]:
        """Get current scheduler status for display."""
        return {
            "status": self.status.value,
            "error": self.error,
            "sync_points": len(self.sync_points),
            "active_animations": len(self.active_animations),
            "auto_sync": self.config.auto_sync,
            "closed": self._closed,
        }

    # === Private Methods ===

    def _is_current(self, token: int, sound: Any) -> bool:
        return (not self._closed
                and token == self._generation_token
                and sound is self._sound)

    def _release(self, token: int):
        """Return to IDLE if this generation still owns the GENERATING status."""
        if self._running_token == token:
            self._running_token = None
            self._set_status(GenerationStatus.IDLE)

    def _commit(self, result: GenerationResult):
        self._running_token = None
        if result.ok:
            self.sync_points = list(result.points)
            self.error = None
            self._set_status(GenerationStatus.READY)
            logger.info(f"Committed {len(self.sync_points)} sync points ({result.outcome.value})")
        else:
            self.sync_points = []
            self.error = result.error
            self._set_status(GenerationStatus.FAILED)
            logger.warning(f"Sync generation failed: {result.error}")

    def _fire(self, point: SyncPoint, now: float) -> bool:
        """Apply one sync point's animation. Returns False if skipped."""
        element = self.registry.get_element(point.element_id) if self.registry else None
        if element is None:
            # Deleted since generation
            logger.debug(f"Skipping sync point {point.id}: element {point.element_id} not found")
            return False

        self.active_animations[point.id] = CooldownHandle(
            point_id=point.id,
            expires_at=now + self.config.cooldown
        )

        animation = compose_animation(point, element, self.config.intensity)
        section_id = self.registry.get_section_id(point.element_id)
        self._dispatcher.dispatch(point.element_id, section_id, animation)

        logger.debug(f"Fired {point.action.value} on {point.element_id} at {point.timestamp:.3f}s")
        if self._on_fire:
            self._on_fire(point)
        return True

    def _expire_cooldowns(self, now: float):
        expired = [pid for pid, handle in self.active_animations.items() if handle.is_expired(now)]
        for pid in expired:
            del self.active_animations[pid]

    def _maybe_auto_generate(self):
        """Start one generation when auto-sync is on and everything is in place."""
        if not (self.config.auto_sync and self._auto_armed):
            return
        if self._sound is None or self.registry is None or not self.registry.snapshot():
            return
        if self.sync_points or self.status != GenerationStatus.IDLE:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("Auto-sync needs a running event loop")
            return

        self._auto_armed = False
        self._task = loop.create_task(self.generate())
        logger.info("Auto-sync generation started")

    def _set_status(self, status: GenerationStatus):
        if status == self.status:
            return
        self.status = status
        if self._on_status_change:
            self._on_status_change(status)
