# stardom/events.py
from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional, Tuple

from stardom.models import Player

# (player, rng) -> (updated player, narrative shown to the user)
Effect = Callable[[Player, random.Random], Tuple[Player, str]]

SUCCESS_ROLL = 0.45  # a roll above this succeeds (55%)


@dataclass(frozen=True)
class EventOption:
    label: str
    description: str
    risk: str  # Low | Medium | High
    effect: Effect


@dataclass(frozen=True)
class CareerEvent:
    key: str
    title: str
    description: str
    options: Tuple[EventOption, EventOption]


def _charisma(player: Player, delta: int) -> Player:
    skills = replace(player.skills, charisma=max(0, player.skills.charisma + delta))
    return replace(player, skills=skills)


def _followers(player: Player, platform: str, delta: int) -> Player:
    followers = dict(player.followers)
    followers[platform] = max(0, followers[platform] + delta)
    return replace(player, followers=followers)


def _ignore_feud(p: Player, rng: random.Random) -> Tuple[Player, str]:
    return (
        _charisma(p, 2),
        "Your fans appreciate your maturity. You spent the week in the studio instead (+2 Charisma).",
    )


def _clap_back(p: Player, rng: random.Random) -> Tuple[Player, str]:
    if rng.random() > SUCCESS_ROLL:
        return (
            replace(p, fans=p.fans + 15_000, fame=p.fame + 100_000),
            "The internet loved it! You're trending worldwide (+15k Fans, +100k Fame).",
        )
    return (
        _charisma(replace(p, fans=max(0, p.fans - 5_000)), -5),
        "You came off as desperate. The industry is cringing (-5k Fans, -5 Charisma).",
    )


def _lean_into_trend(p: Player, rng: random.Random) -> Tuple[Player, str]:
    return (
        _followers(replace(p, fans=p.fans + 50_000), "TikTok", 10_000),
        "The trend exploded! You're officially a 'TikTok artist' now (for better or worse).",
    )


def _stay_distant(p: Player, rng: random.Random) -> Tuple[Player, str]:
    return (
        _charisma(replace(p, fans=p.fans + 10_000), 5),
        "Fans respect your artistic distance. The trend continues without you.",
    )


def _take_festival_slot(p: Player, rng: random.Random) -> Tuple[Player, str]:
    if rng.random() > SUCCESS_ROLL:
        skills = replace(p.skills, vocals=p.skills.vocals + 3)
        return (
            replace(p, fans=p.fans + 25_000, fame=p.fame + 40_000, skills=skills),
            "You owned the tiny stage. Word travels fast (+25k Fans, +40k Fame, +3 Vocals).",
        )
    return (
        replace(p, money=p.money - 2_000),
        "Rain, feedback and a half-empty field. Travel costs still had to be paid (-$2,000).",
    )


def _skip_festival(p: Player, rng: random.Random) -> Tuple[Player, str]:
    skills = replace(p.skills, songwriting=p.skills.songwriting + 3)
    return (
        replace(p, skills=skills),
        "You stayed home and finished three new hooks (+3 Songwriting).",
    )


def _embrace_leak(p: Player, rng: random.Random) -> Tuple[Player, str]:
    return (
        _followers(replace(p, fans=p.fans + 8_000, fame=p.fame + 20_000), "Instagram", 3_000),
        "You posted the leak yourself with a wink. The rawness won people over.",
    )


def _fight_leak(p: Player, rng: random.Random) -> Tuple[Player, str]:
    if rng.random() > SUCCESS_ROLL:
        skills = replace(p.skills, production=p.skills.production + 4)
        return (
            replace(p, skills=skills),
            "Takedowns worked and you reworked the track properly (+4 Production).",
        )
    return (
        _charisma(replace(p, fans=max(0, p.fans - 3_000)), -3),
        "The takedowns looked petty and the demo spread anyway (-3k Fans, -3 Charisma).",
    )


CAREER_EVENTS: List[CareerEvent] = [
    CareerEvent(
        key="twitter_feud",
        title="The Twitter Feud",
        description="A bigger artist just sub-tweeted your last release, calling it 'derivative'.",
        options=(
            EventOption("Ignore the Drama", "Focus on the music. Avoid the controversy.", "Low", _ignore_feud),
            EventOption("Clap Back", "Post a savage reply. Go for the engagement.", "High", _clap_back),
        ),
    ),
    CareerEvent(
        key="viral_sound",
        title="Viral TikTok Sound",
        description="A popular influencer used your song for a transition video. It's gaining steam.",
        options=(
            EventOption("Lean Into It", "Post your own version of the trend.", "Low", _lean_into_trend),
            EventOption(
                "Stay Distant",
                "Let it grow naturally. Avoid looking like you're chasing it.",
                "Low",
                _stay_distant,
            ),
        ),
    ),
    CareerEvent(
        key="festival_slot",
        title="Festival Slot Offer",
        description="A mid-size festival lost an opener and wants you on the bill this weekend.",
        options=(
            EventOption("Take the Slot", "Unpaid, but a big crowd if the weather holds.", "Medium", _take_festival_slot),
            EventOption("Stay in the Studio", "Keep your head down and write.", "Low", _skip_festival),
        ),
    ),
    CareerEvent(
        key="leaked_demo",
        title="Leaked Demo",
        description="An unfinished demo of yours is circulating on a forum.",
        options=(
            EventOption("Own It", "Share it officially and call it a sneak peek.", "Low", _embrace_leak),
            EventOption("Issue Takedowns", "Scrub it from the internet.", "High", _fight_leak),
        ),
    ),
]

EVENTS_BY_KEY: Dict[str, CareerEvent] = {e.key: e for e in CAREER_EVENTS}


def pick_event(rng: random.Random) -> CareerEvent:
    return CAREER_EVENTS[int(rng.random() * len(CAREER_EVENTS))]


def get_event(key: Optional[str]) -> Optional[CareerEvent]:
    if key is None:
        return None
    return EVENTS_BY_KEY.get(key)
