# stardom/actions.py
"""
Player actions. Each handler takes the current CareerState and returns an
ActionResult holding the next one. A rejected action hands back the state
it was given, untouched, with a message for the player.

Oracle calls are all awaited before the next state is built, so a handler
either commits a complete new state or nothing at all.
"""
from __future__ import annotations

import logging
import math
import random
from dataclasses import replace
from datetime import date
from typing import Dict, Optional, Sequence

from stardom.config import (
    START_FANS,
    START_FAME,
    START_MONEY,
    START_FOLLOWERS,
    START_SKILLS,
    START_LABEL_ID,
    START_TRENDING,
    START_HEADLINE,
    START_YEAR,
    SESSION_NOTES_REQUIRED,
    AUDIO_DISTRIBUTION_FEE,
    VIDEO_DISTRIBUTION_FEE,
    FAN_INTERACTION_THRESHOLD,
    FAN_INTERACTION_CHANCE,
    MUSIC_VIDEO_COST,
    MUSIC_VIDEO_FAN_MULTIPLIER,
    MUSIC_VIDEO_FAME_PER_QUALITY,
    SPONSORED_PLATFORM,
    SPONSORED_LIKE_RATE,
    SPONSORED_FAME_IMPACT,
)
from stardom.catalog import (
    GENRES,
    LABELS,
    VIDEO_PLATFORMS,
    get_label,
    is_platform,
)
from stardom.events import get_event
from stardom.formulas import (
    distribution_impact,
    social_post_impact,
    song_quality,
    trending_matches,
)
from stardom.models import (
    ActionResult,
    CareerState,
    HistoryPoint,
    Player,
    PostImpact,
    Skills,
    SocialPost,
    Song,
    StudioSession,
    new_id,
)
from stardom.oracle import Narrator
from stardom.recording import quote_session
from stardom.simulation import push_headline

logger = logging.getLogger(__name__)


def _reject(state: CareerState, message: str) -> ActionResult:
    logger.debug("Rejected: %s", message)
    return ActionResult(state=state, accepted=False, message=message)


def _bump_followers(followers: Dict[str, int], platform: str, delta: int) -> Dict[str, int]:
    out = dict(followers)
    out[platform] = max(0, out.get(platform, 0) + delta)
    return out


def _find(songs: Sequence[Song], song_id: str) -> Optional[Song]:
    return next((s for s in songs if s.id == song_id), None)


# --- Career lifecycle ---

def new_career(name: str, stage_name: str, genre: str = "Pop", *, start: Optional[date] = None) -> CareerState:
    player = Player(
        name=name,
        stage_name=stage_name,
        genre=genre if genre in GENRES else GENRES[0],
        fans=START_FANS,
        fame=START_FAME,
        money=START_MONEY,
        followers=dict(START_FOLLOWERS),
        skills=Skills(**START_SKILLS),
        label_id=START_LABEL_ID,
    )
    return CareerState(
        player=player,
        current_date=start or date(START_YEAR, 1, 1),
        current_week=0,
        trending_topics=tuple(START_TRENDING),
        history=(HistoryPoint(month=0, fans=START_FANS),),
        news=(START_HEADLINE,),
    )


async def career_recap(state: CareerState, narrator: Narrator) -> str:
    """One-line recap for the continue screen."""
    return await narrator.career_summary(state.player, len(state.songs), len(state.awards))


# --- Studio ---

def plan_session(
    state: CareerState,
    rng: random.Random,
    *,
    title: str,
    genre: Optional[str] = None,
    use_ghostwriter: bool = False,
    featured_artist: Optional[str] = None,
) -> ActionResult:
    """Book studio time. Costs are quoted now and only charged at mastering."""
    title = (title or "").strip()
    if not title:
        return _reject(state, "Give the song a title first.")
    genre = genre if genre in GENRES else state.player.genre

    session = quote_session(
        rng,
        title=title,
        genre=genre,
        use_ghostwriter=use_ghostwriter,
        featured_artist=featured_artist,
    )
    if featured_artist and session.featured_artist is None:
        return _reject(state, f"{featured_artist} isn't taking features right now.")
    if session.total_cost > state.player.money:
        return _reject(
            state,
            f"Not enough money for this session (${session.total_cost:,} needed).",
        )
    return ActionResult(state=state, message=f"Session booked: ${session.total_cost:,}", session=session)


def plan_session_from_draft(state: CareerState, rng: random.Random, song_id: str) -> ActionResult:
    """Book a session to record a draft already sitting in the vault."""
    draft = _find(state.unreleased_songs, song_id)
    if draft is None or draft.is_mastered:
        return _reject(state, "That draft isn't in your vault.")
    result = plan_session(
        state,
        rng,
        title=draft.title,
        genre=draft.genre,
        featured_artist=draft.featured_artist,
    )
    if result.accepted and result.session is not None:
        result.session = replace(result.session, lyrics=draft.lyrics or "")
    return result


async def write_lyrics(session: StudioSession, narrator: Narrator) -> StudioSession:
    lyrics = await narrator.lyrics(session.title, session.genre)
    return replace(session, lyrics=lyrics)


def save_draft(state: CareerState, session: StudioSession) -> ActionResult:
    """Park the idea in the vault: unmastered, zero quality, nothing charged."""
    song = Song(
        id=new_id(),
        title=session.title,
        genre=session.genre,
        quality=0,
        release_date=state.current_date,
        lyrics=session.lyrics or None,
        featured_artist=session.featured_artist,
        is_mastered=False,
    )
    nxt = replace(state, unreleased_songs=(song, *state.unreleased_songs))
    return ActionResult(state=nxt, message="Song idea saved to Vault!")


def master_song(
    state: CareerState,
    session: StudioSession,
    tap_scores: Sequence[float],
    rng: random.Random,
) -> ActionResult:
    """
    Finish a recording: charge the session, score the take and put the master
    in the vault, replacing any unmastered draft with the same title.
    """
    if len(tap_scores) != SESSION_NOTES_REQUIRED:
        return _reject(
            state,
            f"The take isn't finished ({len(tap_scores)}/{SESSION_NOTES_REQUIRED} notes).",
        )
    player = state.player
    if session.total_cost > player.money:
        return _reject(state, f"Not enough money to pay the studio (${session.total_cost:,}).")

    scores = [min(100.0, max(0.0, float(s))) for s in tap_scores]
    quality = song_quality(
        rng,
        skills=player.skills,
        tap_scores=scores,
        use_ghostwriter=session.use_ghostwriter,
        featured_artist_fame=session.feature_fame,
    )
    song = Song(
        id=new_id(),
        title=session.title,
        genre=session.genre,
        quality=quality,
        release_date=state.current_date,
        lyrics=session.lyrics or None,
        featured_artist=session.featured_artist,
        is_mastered=True,
    )
    vault = tuple(
        s for s in state.unreleased_songs if s.is_mastered or s.title != session.title
    )
    nxt = replace(
        state,
        player=replace(player, money=player.money - session.total_cost),
        unreleased_songs=(song, *vault),
    )
    return ActionResult(state=nxt, message=f"Master Recorded: {song.title} ({quality}% quality)")


# --- Releases ---

async def distribute_song(
    state: CareerState,
    song_id: str,
    platform: str,
    *,
    rng: random.Random,
    narrator: Narrator,
) -> ActionResult:
    if not is_platform(platform):
        return _reject(state, f"Unknown platform: {platform}")
    song = _find(state.unreleased_songs, song_id)
    if song is None:
        return _reject(state, "That song isn't in your vault.")
    if not song.is_mastered:
        return _reject(state, "Record the draft before releasing it.")

    is_video = platform in VIDEO_PLATFORMS
    fee = VIDEO_DISTRIBUTION_FEE if is_video else AUDIO_DISTRIBUTION_FEE
    player = state.player
    if fee > player.money:
        return _reject(state, f"Distribution on {platform} costs ${fee:,}.")

    base_gain, reception = await narrator.song_impact(song.title, song.quality, player.fans, song.genre)
    fans, fame = distribution_impact(platform=platform, quality=song.quality, base_fan_gain=base_gain)
    thumbnail = await narrator.thumbnail(song.title, player.stage_name, song.genre) if is_video else None

    content = f"'{song.title}' is out now on {platform}!"
    comments = await narrator.social_engagement(player.stage_name, content, platform)
    headline = await narrator.industry_headline(player.stage_name, f"released '{song.title}' on {platform}")

    interaction = None
    if (
        fans > FAN_INTERACTION_THRESHOLD
        and state.pending_fan_interaction is None
        and rng.random() < FAN_INTERACTION_CHANCE
    ):
        interaction = await narrator.fan_interaction(player.stage_name, content)

    released = replace(song, release_date=state.current_date, is_music_video=is_video)
    post = SocialPost(
        id=new_id(),
        platform=platform,
        content=content,
        type="Music Video" if is_video else "Release",
        likes=fans * 2,
        comments=tuple(comments),
        timestamp=state.current_date,
        impact=PostImpact(fans=fans, fame=fame),
        video_title=song.title if is_video else None,
        video_description=reception if is_video else None,
        thumbnail_url=thumbnail,
    )
    nxt = replace(
        state,
        player=replace(
            player,
            money=player.money - fee,
            fans=player.fans + fans,
            fame=player.fame + fame,
            followers=_bump_followers(player.followers, platform, fans),
        ),
        songs=(released, *state.songs),
        unreleased_songs=tuple(s for s in state.unreleased_songs if s.id != song.id),
        social_posts=(post, *state.social_posts),
        news=push_headline(state.news, headline),
        pending_fan_interaction=interaction or state.pending_fan_interaction,
    )
    return ActionResult(state=nxt, message=f"Published to {platform}!", narrative=reception)


async def produce_music_video(state: CareerState, song_id: str, *, narrator: Narrator) -> ActionResult:
    song = _find(state.songs, song_id)
    if song is None:
        return _reject(state, "Only released songs can get a video.")
    if song.is_music_video:
        return _reject(state, f"'{song.title}' already has a music video.")
    player = state.player
    if MUSIC_VIDEO_COST > player.money:
        return _reject(state, f"A music video costs ${MUSIC_VIDEO_COST:,}.")

    base_gain, reception = await narrator.song_impact(song.title, song.quality, player.fans, song.genre)
    fans = base_gain * MUSIC_VIDEO_FAN_MULTIPLIER
    fame = song.quality * MUSIC_VIDEO_FAME_PER_QUALITY
    thumbnail = await narrator.thumbnail(song.title, player.stage_name, song.genre)
    content = f"The official video for '{song.title}' is live!"
    comments = await narrator.social_engagement(player.stage_name, content, "YouTube")
    headline = await narrator.industry_headline(
        player.stage_name, f"dropped a music video for '{song.title}'"
    )

    post = SocialPost(
        id=new_id(),
        platform="YouTube",
        content=content,
        type="Music Video",
        likes=fans * 2,
        comments=tuple(comments),
        timestamp=state.current_date,
        impact=PostImpact(fans=fans, fame=fame),
        video_title=f"{player.stage_name} - {song.title} (Official Music Video)",
        video_description=reception,
        thumbnail_url=thumbnail,
    )
    nxt = replace(
        state,
        player=replace(
            player,
            money=player.money - MUSIC_VIDEO_COST,
            fans=player.fans + fans,
            fame=player.fame + fame,
            followers=_bump_followers(player.followers, "YouTube", fans),
        ),
        songs=tuple(replace(s, is_music_video=True) if s.id == song.id else s for s in state.songs),
        social_posts=(post, *state.social_posts),
        news=push_headline(state.news, headline),
    )
    return ActionResult(state=nxt, message="Music video premiered on YouTube!", narrative=reception)


# --- Social ---

async def publish_post(
    state: CareerState,
    platform: str,
    content: str,
    *,
    narrator: Narrator,
    post_type: str = "Photo",
) -> ActionResult:
    content = (content or "").strip()
    if not content:
        return _reject(state, "Write something before posting.")
    if not is_platform(platform):
        return _reject(state, f"Unknown platform: {platform}")

    player = state.player
    matches = trending_matches(content, state.trending_topics)
    fans, fame = social_post_impact(platform=platform, fans=player.fans, matches=matches)
    comments = await narrator.social_engagement(player.stage_name, content, platform)

    post = SocialPost(
        id=new_id(),
        platform=platform,
        content=content,
        type=post_type,
        likes=fans * 2,
        comments=tuple(comments),
        timestamp=state.current_date,
        impact=PostImpact(fans=fans, fame=fame),
    )
    nxt = replace(
        state,
        player=replace(
            player,
            fans=player.fans + fans,
            fame=player.fame + fame,
            followers=_bump_followers(player.followers, platform, fans),
        ),
        social_posts=(post, *state.social_posts),
    )
    msg = f"Posted to {platform}!"
    if matches:
        msg += f" Riding {matches} trending topic{'s' if matches > 1 else ''}."
    return ActionResult(state=nxt, message=msg)


async def accept_offer(state: CareerState, offer_id: str, *, narrator: Narrator) -> ActionResult:
    offer = next((o for o in state.active_offers if o.id == offer_id), None)
    if offer is None:
        return _reject(state, "That offer has expired.")

    player = state.player
    comments = await narrator.social_engagement(player.stage_name, offer.requirement, SPONSORED_PLATFORM)

    post = SocialPost(
        id=new_id(),
        platform=SPONSORED_PLATFORM,
        content=offer.requirement,
        type="Sponsored",
        likes=math.floor(player.fans * SPONSORED_LIKE_RATE),
        comments=tuple(comments),
        timestamp=state.current_date,
        impact=PostImpact(fans=0, fame=SPONSORED_FAME_IMPACT),
    )
    skills = replace(player.skills, charisma=max(0, player.skills.charisma - offer.charisma_penalty))
    remaining = list(state.active_offers)
    remaining.remove(offer)
    nxt = replace(
        state,
        player=replace(player, money=player.money + offer.payout, skills=skills),
        active_offers=tuple(remaining),
        social_posts=(post, *state.social_posts),
    )
    return ActionResult(
        state=nxt,
        message=f"Contract with {offer.brand} signed! Received ${offer.payout:,.0f}",
    )


# --- Business ---

def sign_label(state: CareerState, label_id: str) -> ActionResult:
    label = get_label(label_id)
    if label is None:
        return _reject(state, "No such label.")
    player = state.player
    if player.label_id == label.id:
        return _reject(state, f"You're already signed to {label.name}.")
    if player.fame < label.fame_requirement:
        return _reject(
            state,
            f"{label.name} wants {label.fame_requirement:,} fame before they'll talk to you.",
        )
    logger.info("%s signed with %s", player.stage_name, label.name)
    nxt = replace(
        state,
        player=replace(player, money=player.money + label.signing_bonus, label_id=label.id),
        news=push_headline(state.news, f"{player.stage_name} signs with {label.name}!"),
    )
    return ActionResult(state=nxt, message=f"Signed with {label.name}! +${label.signing_bonus:,}")


def available_labels(state: CareerState):
    """(label, eligible) pairs for everything except self-release."""
    return [
        (label, state.player.fame >= label.fame_requirement)
        for label in LABELS.values()
        if label.id != START_LABEL_ID
    ]


# --- Pending choices ---

def resolve_event(state: CareerState, option_index: int, rng: random.Random) -> ActionResult:
    event = get_event(state.pending_event)
    if event is None:
        return _reject(state, "Nothing is waiting on you.")
    if option_index not in range(len(event.options)):
        return _reject(state, "Pick one of the two options.")

    player, narrative = event.options[option_index].effect(state.player, rng)
    nxt = replace(state, player=player, pending_event=None)
    return ActionResult(state=nxt, message=event.title, narrative=narrative)


def resolve_fan_interaction(state: CareerState, option_index: int) -> ActionResult:
    interaction = state.pending_fan_interaction
    if interaction is None:
        return _reject(state, "No messages waiting.")
    if option_index not in range(len(interaction.options)):
        return _reject(state, "Pick one of the replies.")

    option = interaction.options[option_index]
    player = state.player
    value = option.bonus_value
    if option.bonus_type == "fans":
        player = replace(player, fans=max(0, player.fans + value))
    elif option.bonus_type == "fame":
        player = replace(player, fame=max(0, player.fame + value))
    elif option.bonus_type == "money":
        player = replace(player, money=player.money + value)
    elif option.bonus_type == "charisma":
        player = replace(
            player, skills=replace(player.skills, charisma=max(0, player.skills.charisma + value))
        )
    nxt = replace(state, player=player, pending_fan_interaction=None)
    return ActionResult(state=nxt, message=f"Replied to @{interaction.username}", narrative=option.result)
