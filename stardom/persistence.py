# stardom/persistence.py
"""
Save games as one JSON file per key. Dates are stored as ISO strings.
A save that can't be read is treated as no save at all.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional, Union

from stardom.models import (
    Award,
    CareerState,
    Comment,
    FanInteraction,
    FanReplyOption,
    HistoryPoint,
    Player,
    PostImpact,
    Skills,
    SocialPost,
    Song,
    SponsoredOffer,
)
from stardom.simulation import clamp_state

logger = logging.getLogger(__name__)

SAVE_VERSION = 1

# errors a damaged save file can raise while decoding
UNREADABLE_SAVE = (
    OSError, ValueError, KeyError, TypeError, AttributeError, OverflowError, RecursionError,
)


def _reject_constant(name: str):
    raise ValueError(f"non-finite number {name} in save")


def _encode(obj: Any):
    if isinstance(obj, date):
        return obj.isoformat()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def career_to_dict(state: CareerState) -> Dict[str, Any]:
    data = asdict(state)
    data["version"] = SAVE_VERSION
    # round through json so dates and tuples come out as plain JSON types
    return json.loads(json.dumps(data, default=_encode))


def _song(raw: Dict[str, Any]) -> Song:
    return Song(
        id=str(raw["id"]),
        title=str(raw["title"]),
        genre=str(raw["genre"]),
        quality=int(raw["quality"]),
        release_date=date.fromisoformat(raw["release_date"]),
        streams=int(raw.get("streams", 0)),
        revenue=float(raw.get("revenue", 0.0)),
        lyrics=raw.get("lyrics"),
        featured_artist=raw.get("featured_artist"),
        is_mastered=bool(raw.get("is_mastered", False)),
        is_music_video=bool(raw.get("is_music_video", False)),
    )


def _post(raw: Dict[str, Any]) -> SocialPost:
    impact = raw["impact"]
    return SocialPost(
        id=str(raw["id"]),
        platform=str(raw["platform"]),
        content=str(raw["content"]),
        type=str(raw["type"]),
        likes=int(raw["likes"]),
        comments=tuple(Comment(user=str(c["user"]), text=str(c["text"])) for c in raw.get("comments", [])),
        timestamp=date.fromisoformat(raw["timestamp"]),
        impact=PostImpact(
            fans=int(impact["fans"]),
            fame=int(impact["fame"]),
            streams_boost=impact.get("streams_boost"),
        ),
        video_title=raw.get("video_title"),
        video_description=raw.get("video_description"),
        thumbnail_url=raw.get("thumbnail_url"),
    )


def _fan_interaction(raw: Optional[Dict[str, Any]]) -> Optional[FanInteraction]:
    if raw is None:
        return None
    return FanInteraction(
        username=str(raw["username"]),
        message=str(raw["message"]),
        options=tuple(
            FanReplyOption(
                label=str(o["label"]),
                result=str(o["result"]),
                bonus_type=str(o["bonus_type"]),
                bonus_value=int(o["bonus_value"]),
            )
            for o in raw["options"]
        ),
    )


def career_from_dict(data: Dict[str, Any]) -> CareerState:
    p = data["player"]
    player = Player(
        name=str(p["name"]),
        stage_name=str(p["stage_name"]),
        genre=str(p["genre"]),
        fans=int(p["fans"]),
        fame=int(p["fame"]),
        money=float(p["money"]),
        followers={str(k): int(v) for k, v in p["followers"].items()},
        skills=Skills(**{k: int(v) for k, v in p["skills"].items()}),
        label_id=p.get("label_id"),
    )
    return CareerState(
        player=player,
        current_date=date.fromisoformat(data["current_date"]),
        current_week=int(data["current_week"]),
        songs=tuple(_song(s) for s in data.get("songs", [])),
        unreleased_songs=tuple(_song(s) for s in data.get("unreleased_songs", [])),
        awards=tuple(Award(**a) for a in data.get("awards", [])),
        social_posts=tuple(_post(x) for x in data.get("social_posts", [])),
        trending_topics=tuple(str(t) for t in data.get("trending_topics", [])),
        active_offers=tuple(SponsoredOffer(**o) for o in data.get("active_offers", [])),
        history=tuple(HistoryPoint(month=int(h["month"]), fans=int(h["fans"])) for h in data.get("history", [])),
        news=tuple(str(n) for n in data.get("news", [])),
        unsettled_streams=int(data.get("unsettled_streams", 0)),
        pending_event=data.get("pending_event"),
        pending_fan_interaction=_fan_interaction(data.get("pending_fan_interaction")),
    )


class JsonSaveStore:
    """Key-value save slots under one directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def save(self, state: CareerState, key: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(career_to_dict(state), ensure_ascii=False, indent=2)
        # write-then-rename so a crash mid-save never leaves half a file behind
        fd, tmp = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp, self.path_for(key))
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        logger.debug("Saved %s (week %d, %s)", key, state.current_week, state.current_date)

    def load(self, key: str) -> Optional[CareerState]:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f, parse_constant=_reject_constant)
            return clamp_state(career_from_dict(data))
        except UNREADABLE_SAVE as e:
            logger.warning("Ignoring unreadable save %s: %s", path, e)
            return None

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        if path.exists():
            path.unlink()


def save_quietly(store: JsonSaveStore, state: CareerState, key: str) -> None:
    """Fire-and-forget save: a failure is logged, never raised."""
    try:
        store.save(state, key)
    except Exception as e:
        logger.error("Error saving game %s: %s", key, e)
