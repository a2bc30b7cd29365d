from __future__ import annotations

"""Auto-advancing cyclic index over the best-per-source slides."""
import asyncio
import enum
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

LOGGER = logging.getLogger(__name__)

DEFAULT_INTERVAL = 3.0

SlideListener = Callable[[int], None]


class CarouselState(enum.Enum):
    IDLE = "idle"
    SINGLE = "single"
    RUNNING = "running"


@dataclass(frozen=True)
class CarouselWindow:
    left: int
    center: int
    right: int
    hidden: Tuple[int, ...] = ()


class Carousel:
    def __init__(self, interval: float = DEFAULT_INTERVAL, on_change: Optional[SlideListener] = None) -> None:
        self._interval = interval
        self._on_change = on_change
        self._task: asyncio.Task[None] | None = None
        self.state = CarouselState.IDLE
        self.current_index = 0
        self.total_slides = 0

    @property
    def timer_active(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, slide_count: int) -> None:
        self._cancel_timer()
        self.current_index = 0
        self.total_slides = max(slide_count, 0)
        if self.total_slides == 0:
            self.state = CarouselState.IDLE
            return
        if self.total_slides == 1:
            self.state = CarouselState.SINGLE
            return
        self._arm_timer()
        self.state = CarouselState.RUNNING
        LOGGER.debug("Carousel started with %d slides", self.total_slides)

    def stop(self) -> None:
        self._cancel_timer()
        self.state = CarouselState.IDLE
        self.current_index = 0
        self.total_slides = 0

    def advance(self) -> int:
        if self.total_slides == 0:
            return self.current_index
        self.current_index = (self.current_index + 1) % self.total_slides
        self._notify()
        return self.current_index

    def jump_to(self, index: int) -> None:
        if not 0 <= index < self.total_slides:
            raise IndexError(f"slide {index} is out of range for {self.total_slides} slides")
        self.current_index = index
        self._notify()
        self._cancel_timer()
        if self.total_slides > 1:
            self._arm_timer()

    def window(self) -> CarouselWindow:
        total = self.total_slides
        if total == 0:
            return CarouselWindow(left=0, center=0, right=0)
        left = (self.current_index - 1) % total
        right = (self.current_index + 1) % total
        visible = {left, self.current_index, right}
        hidden = tuple(index for index in range(total) if index not in visible)
        return CarouselWindow(left=left, center=self.current_index, right=right, hidden=hidden)

    def roles(self) -> List[str]:
        """Role per slide index; an index filling several roles takes the first of left, center, right."""
        window = self.window()
        roles: List[str] = []
        for index in range(self.total_slides):
            if index == window.left:
                roles.append("left")
            elif index == window.center:
                roles.append("center")
            elif index == window.right:
                roles.append("right")
            else:
                roles.append("hidden")
        return roles

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self.current_index)

    def _arm_timer(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            LOGGER.warning("No running event loop, carousel will not auto-advance")
            return
        self._task = loop.create_task(self._run())

    def _cancel_timer(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            LOGGER.debug("Carousel tick")
            try:
                self.advance()
            except Exception:  # noqa: BLE001
                LOGGER.exception("Carousel listener failed")
