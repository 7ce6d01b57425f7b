"""
NarrativeOracle backed by a chat LLM. Prompts ask for JSON where structure
matters; answers are parsed tolerantly and validated with pydantic.
Anything that doesn't validate raises, and the Narrator falls back.
"""

import json
import logging
import re
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field

from stardom.formulas import clamp_int
from stardom.llm_client import LLMClient, create_llm_client
from stardom.models import (
    Comment,
    FanInteraction,
    FanReplyOption,
    Player,
    SponsoredOffer,
    new_id,
)
from stardom.oracle import MAX_CHARISMA_PENALTY, MIN_CHARISMA_PENALTY, NarrativeOracle, Narrator
from stardom.settings import OracleSettings, get_settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You write short, punchy flavor text for a music-industry career game. "
    "Never break character and never add commentary."
)


def safe_json_loads(text: str):
    """Extract JSON from LLM output, tolerating markdown fences and prose."""
    fenced = re.search(r"```(?:json)?\s*\n?(.*?)```", text, re.DOTALL)
    if fenced:
        return json.loads(fenced.group(1).strip())
    for start_char, end_char in [("{", "}"), ("[", "]")]:
        start = text.find(start_char)
        if start == -1:
            continue
        depth = 0
        for i in range(start, len(text)):
            if text[i] == start_char:
                depth += 1
            elif text[i] == end_char:
                depth -= 1
                if depth == 0:
                    return json.loads(text[start : i + 1])
    return json.loads(text.strip())


def _unwrap(data, key: str):
    # json_object mode forces a top-level object; accept either shape
    if isinstance(data, dict) and key in data:
        return data[key]
    return data


class OfferPayload(BaseModel):
    brand: str = Field(min_length=1)
    payout: float = Field(ge=0)
    requirement: str = Field(min_length=1)
    charismaPenalty: float


class ImpactPayload(BaseModel):
    fanGain: int = Field(ge=0)
    reception: str


class CommentPayload(BaseModel):
    user: str
    text: str


class FanOptionPayload(BaseModel):
    label: str
    result: str
    bonusType: str
    bonusValue: int


class FanInteractionPayload(BaseModel):
    username: str
    message: str
    options: List[FanOptionPayload] = Field(min_length=1)


class LLMOracle(NarrativeOracle):
    def __init__(self, client: LLMClient):
        self.client = client

    async def _text(self, prompt: str) -> str:
        return (await self.client.generate(prompt, SYSTEM_PROMPT)).strip().strip('"')

    async def _json(self, prompt: str):
        raw = await self.client.generate(prompt, SYSTEM_PROMPT, json_mode=True)
        return safe_json_loads(raw)

    async def generate_lyrics(self, title: str, genre: str) -> str:
        return await self._text(
            f'Write a snippet of hit {genre} lyrics for a song titled "{title}". '
            "Keep it catchy and under 40 words."
        )

    async def generate_trending_topics(self) -> List[str]:
        data = await self._json(
            "Generate 5 current trending social media hashtags/topics in the music "
            'and pop culture world. Return JSON: {"topics": ["#Tag", ...]}. '
            "Examples: #AIFilters, #RetroRevival, #WorldTour2025."
        )
        topics = _unwrap(data, "topics")
        if not isinstance(topics, list):
            raise ValueError(f"expected a list of topics, got {type(topics).__name__}")
        return [str(t) for t in topics]

    async def generate_sponsored_offer(self, fame: int) -> SponsoredOffer:
        data = await self._json(
            f"Generate a brand sponsorship offer for a music artist with {fame} fame. "
            "Return JSON with fields: brand (name of brand), payout (number, higher "
            "for more fame), requirement (short instruction on what to post), "
            "charismaPenalty (1-10, based on how 'sell-out' it is)."
        )
        payload = OfferPayload.model_validate(data)
        return SponsoredOffer(
            id=new_id("offer"),
            brand=payload.brand,
            payout=payload.payout,
            requirement=payload.requirement,
            charisma_penalty=clamp_int(
                int(round(payload.charismaPenalty)), MIN_CHARISMA_PENALTY, MAX_CHARISMA_PENALTY
            ),
        )

    async def generate_industry_headline(self, artist_name: str, event: str) -> str:
        return await self._text(
            f'Write a short music industry news headline (max 15 words) about the artist '
            f'"{artist_name}" who just {event}. Make it sound like Rolling Stone or Pitchfork.'
        )

    async def generate_social_engagement(
        self, artist_name: str, content: str, platform: str
    ) -> List[Comment]:
        data = await self._json(
            f"Generate 3 short {platform} comments (max 10 words each) from fans reacting "
            f'to this post by artist "{artist_name}": "{content}". Use platform-appropriate '
            'slang and emojis. Return JSON: {"comments": [{"user": "...", "text": "..."}]}.'
        )
        items = _unwrap(data, "comments")
        if not isinstance(items, list):
            raise ValueError("expected a list of comments")
        return [Comment(**CommentPayload.model_validate(i).model_dump()) for i in items]

    async def calculate_song_impact(
        self, title: str, quality: int, fans: int, genre: str
    ) -> Tuple[int, str]:
        data = await self._json(
            f'Based on a {genre} song titled "{title}" with {quality}/100 quality released '
            f"by an artist with {fans} fans, calculate the numeric fan gain and a "
            'one-sentence reception summary. Return JSON: {"fanGain": int, "reception": str}.'
        )
        payload = ImpactPayload.model_validate(data)
        return payload.fanGain, payload.reception

    async def generate_thumbnail(self, title: str, artist_name: str, genre: str) -> Optional[str]:
        return await self.client.generate_image(
            f'A professional high-quality YouTube thumbnail for a {genre} music video titled '
            f'"{title}" by the artist "{artist_name}". Vibrant colors, eye-catching '
            "typography, cinematic atmosphere."
        )

    async def generate_fan_interaction(
        self, artist_name: str, content: str
    ) -> Optional[FanInteraction]:
        data = await self._json(
            f'An artist named "{artist_name}" just posted: "{content}". Generate a simulated '
            "private fan message (DM) and up to 3 response options with different effects. "
            'Return JSON: {"username": str, "message": str, "options": [{"label": str, '
            '"result": str, "bonusType": "fans"|"charisma"|"fame"|"money", "bonusValue": int}]}.'
        )
        if data is None:
            return None
        payload = FanInteractionPayload.model_validate(data)
        return FanInteraction(
            username=payload.username,
            message=payload.message,
            options=tuple(
                FanReplyOption(
                    label=o.label,
                    result=o.result,
                    bonus_type=o.bonusType,
                    bonus_value=o.bonusValue,
                )
                for o in payload.options
            ),
        )

    async def generate_career_summary(
        self, player: Player, song_count: int, award_count: int
    ) -> str:
        return await self._text(
            "Write a 1-sentence epic recap of this artist's career for a load screen.\n"
            f"Stage Name: {player.stage_name}\n"
            f"Genre: {player.genre}\n"
            f"Fans: {player.fans:,}\n"
            f"Fame Score: {player.fame}\n"
            f"Songs Released: {song_count}\n"
            f"Awards: {award_count}\n"
            "Make it sound like a prestigious Hall of Fame induction. Max 25 words."
        )


def build_narrator(settings: Optional[OracleSettings] = None) -> Narrator:
    """The Narrator the app runs with, per ORACLE_* settings."""
    settings = settings or get_settings().oracle
    client = create_llm_client(settings)
    if client is None:
        logger.info("Narrative oracle offline; using built-in fallbacks")
        return Narrator(timeout=settings.timeout_seconds)
    logger.info("Narrative oracle: %s (%s)", settings.provider, settings.model_name)
    return Narrator(LLMOracle(client), timeout=settings.timeout_seconds)
