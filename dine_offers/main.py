from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .config import Settings, load_settings
from .i18n import Translator
from .services.session import OfferSession
from .services.storage import SqliteStore

LOGGER = logging.getLogger(__name__)


def build_session(settings: Optional[Settings] = None) -> OfferSession:
    settings = settings or load_settings()
    store = SqliteStore(settings.state_path)
    translator = Translator(default_locale=settings.locale)
    return OfferSession(settings, store, translator=translator)


def _log_screen(session: OfferSession) -> None:
    screen = session.screen
    if screen is None:
        LOGGER.info("Selected cards: %s", ", ".join(session.selected_chips()) or "none")
        return
    slide = screen.slides[session.carousel.current_index] if screen.slides else None
    if slide is not None:
        LOGGER.info("Best on %s: %s %s", slide.source, slide.headline, slide.card_label)


async def run(url_query: str = "") -> None:
    settings = load_settings()
    session = build_session(settings)
    session.subscribe(_log_screen)
    if not await session.load(url_query):
        return
    try:
        while session.carousel.timer_active:
            await asyncio.sleep(settings.carousel_interval)
    finally:
        session.close()


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    LOGGER.info("Starting dining offers session")
    try:
        asyncio.run(run(settings.shared_query))
    except KeyboardInterrupt:
        LOGGER.info("Session closed")


if __name__ == "__main__":
    main()
