"""
Animation dispatch for fired sync points.
Translates sync point actions into animation descriptors and hands them to
the host application.
"""

import logging
from typing import Callable, Optional

from .models import AnimationDescriptor, ElementRef, SyncAction, SyncPoint

logger = logging.getLogger('animation')

# (animation type, fallback duration, custom param prefix) per action
ACTION_STYLES = {
    SyncAction.PULSE: ("scale", 0.3, "pulse"),
    SyncAction.HIGHLIGHT: ("custom", 0.5, "highlight"),
    SyncAction.TRANSFORM: ("rotate", 0.4, "transform"),
}


def compose_animation(
    point: SyncPoint,
    element: Optional[ElementRef] = None,
    intensity: float = 1.0,
) -> AnimationDescriptor:
    """
    Build the animation for a fired sync point.

    The element's own animation (if any) provides delay and easing; the
    action decides type, duration and custom params.

    Args:
        point: The sync point that fired
        element: Target element
        intensity: Global multiplier applied to the point's intensity
    """
    base = element.animation if element and element.animation else AnimationDescriptor()

    style = ACTION_STYLES.get(point.action)
    if style is None:
        return AnimationDescriptor.from_dict(base.to_dict())

    anim_type, fallback_duration, prefix = style
    effect_intensity = (point.params.intensity or 1.0) * intensity

    return AnimationDescriptor(
        type=anim_type,
        duration=point.params.duration or fallback_duration,
        delay=base.delay,
        easing=base.easing,
        custom_params={
            prefix: True,
            f"{prefix}Intensity": effect_intensity,
            "beatTimestamp": point.timestamp,
        },
    )


class AnimationDispatcher:
    """
    Calls the host's apply-animation function.

    The host function is called as fn(section_id, element_id, update) when
    the element's section is known, else fn(element_id, update), where
    update is {"animation": descriptor}.
    """

    def __init__(self, apply_animation: Optional[Callable[..., None]] = None):
        self._apply = apply_animation

    def set_handler(self, apply_animation: Optional[Callable[..., None]]):
        self._apply = apply_animation

    def dispatch(self, element_id: str, section_id: Optional[str],
                 animation: AnimationDescriptor) -> bool:
        """Apply an animation. Returns False if nothing was applied."""
        if not self._apply:
            return False

        update = {"animation": animation}
        try:
            if section_id:
                self._apply(section_id, element_id, update)
            else:
                self._apply(element_id, update)
            logger.debug(f"Applied {animation.type} to {element_id}")
            return True
        except Exception as e:
            logger.error(f"Error applying animation to {element_id}: {e}")
            return False
