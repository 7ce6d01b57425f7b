# stardom/catalog.py
from __future__ import annotations

from typing import Dict, List, Optional

from stardom.models import FeaturedArtist, Label


GENRES: List[str] = [
    "Pop", "Hip-Hop", "Rock", "R&B", "Electronic", "Country", "Jazz", "Indie"
]

# Closed set: Player.followers always carries every one of these.
PLATFORMS: List[str] = ["Instagram", "TikTok", "YouTube", "Spotify", "AppleMusic"]
VIDEO_PLATFORMS = frozenset({"YouTube"})

SELF_RELEASED = "indie_self"

LABELS: Dict[str, Label] = {
    label.id: label
    for label in [
        Label(
            id=SELF_RELEASED,
            name="Independent",
            prestige=1,
            fame_requirement=0,
            signing_bonus=0,
            revenue_split=100,
            description="You own your masters and keep every cent.",
        ),
        Label(
            id="basement_records",
            name="Basement Records",
            prestige=2,
            fame_requirement=50_000,
            signing_bonus=10_000,
            revenue_split=80,
            description="A scrappy boutique label with real street credibility.",
        ),
        Label(
            id="neon_wave",
            name="Neon Wave Music",
            prestige=3,
            fame_requirement=500_000,
            signing_bonus=100_000,
            revenue_split=60,
            description="Playlist placement machine with a strong radio team.",
        ),
        Label(
            id="apex_sound",
            name="Apex Sound Group",
            prestige=4,
            fame_requirement=2_000_000,
            signing_bonus=500_000,
            revenue_split=45,
            description="Major distribution and stadium-sized marketing budgets.",
        ),
        Label(
            id="titan_global",
            name="Titan Global",
            prestige=5,
            fame_requirement=10_000_000,
            signing_bonus=2_000_000,
            revenue_split=30,
            description="The biggest name in the business. They take their cut.",
        ),
    ]
}

FEATURED_ARTISTS: Dict[str, FeaturedArtist] = {
    a.name: a
    for a in [
        FeaturedArtist(name="Lil Static", fame=800_000, fee=4_000),
        FeaturedArtist(name="Mara Vex", fame=2_500_000, fee=12_000),
        FeaturedArtist(name="The Velvet Hours", fame=5_000_000, fee=25_000),
        FeaturedArtist(name="DJ Horizon", fame=9_000_000, fee=45_000),
        FeaturedArtist(name="Aurelia", fame=15_000_000, fee=80_000),
    ]
}


def is_platform(name: str) -> bool:
    return name in PLATFORMS


def get_label(label_id: Optional[str]) -> Optional[Label]:
    if label_id is None:
        return None
    return LABELS.get(label_id)


def revenue_share(label_id: Optional[str]) -> float:
    """Fraction of royalties the artist keeps; unknown or no label means self-released."""
    label = get_label(label_id)
    split = label.revenue_split if label else 100
    return split / 100


def get_featured_artist(name: Optional[str]) -> Optional[FeaturedArtist]:
    if not name:
        return None
    return FEATURED_ARTISTS.get(name)
