# stardom/recording.py
from __future__ import annotations

import math
import random
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from stardom.config import (
    BASE_STUDIO_RENT,
    BASE_GHOSTWRITER_FEE,
    FEE_JITTER_MIN,
    FEE_JITTER_SPAN,
    SESSION_NOTES_REQUIRED,
    SLIDER_MIN,
    SLIDER_MAX,
    SLIDER_BASE_SPEED,
    SLIDER_SPEED_PER_TAP,
)
from stardom.catalog import get_featured_artist
from stardom.formulas import tap_score
from stardom.models import StudioSession


def jittered_fee(rng: random.Random, base: int) -> int:
    return math.floor(base * (FEE_JITTER_MIN + rng.random() * FEE_JITTER_SPAN))


def quote_session(
    rng: random.Random,
    *,
    title: str,
    genre: str,
    use_ghostwriter: bool = False,
    featured_artist: Optional[str] = None,
) -> StudioSession:
    """
    Price a recording session. Rent and the ghostwriter fee wobble +/-20%
    around their base; both are drawn even when no ghostwriter is hired so
    the number of rng draws doesn't depend on the options.
    """
    rent = jittered_fee(rng, BASE_STUDIO_RENT)
    ghost_fee = jittered_fee(rng, BASE_GHOSTWRITER_FEE)

    artist = get_featured_artist(featured_artist)
    return StudioSession(
        title=title,
        genre=genre,
        rent=rent,
        ghostwriter_fee=ghost_fee if use_ghostwriter else 0,
        featured_artist=artist.name if artist else None,
        feature_fee=artist.fee if artist else 0,
        feature_fame=artist.fame if artist else 0,
    )


# --- Tap-timing mini-game ---

@dataclass(frozen=True)
class TapSession:
    """Slider state for one take. Scores are 0..100 per tap."""
    position: float = SLIDER_MIN
    direction: int = 1
    scores: Tuple[float, ...] = ()

    @property
    def speed(self) -> float:
        return SLIDER_BASE_SPEED + len(self.scores) * SLIDER_SPEED_PER_TAP

    @property
    def complete(self) -> bool:
        return len(self.scores) >= SESSION_NOTES_REQUIRED


def advance_slider(session: TapSession) -> TapSession:
    """Move the marker one frame, bouncing off both ends of the bar."""
    nxt = session.position + session.direction * session.speed
    if nxt > SLIDER_MAX:
        return replace(session, position=SLIDER_MAX, direction=-1)
    if nxt < SLIDER_MIN:
        return replace(session, position=SLIDER_MIN, direction=1)
    return replace(session, position=nxt)


def tap(session: TapSession) -> TapSession:
    if session.complete:
        return session
    return replace(session, scores=session.scores + (tap_score(session.position),))


def tap_feedback(score: float) -> str:
    if score > 95:
        return "PERFECT!"
    if score > 80:
        return "GREAT!"
    if score > 60:
        return "GOOD"
    return "MISS"
