# stardom/webapp.py
from __future__ import annotations

import logging
import random
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from fastapi import BackgroundTasks, FastAPI, HTTPException
from pydantic import BaseModel, Field

from stardom.actions import (
    accept_offer,
    available_labels,
    career_recap,
    distribute_song,
    master_song,
    new_career,
    plan_session,
    plan_session_from_draft,
    produce_music_video,
    publish_post,
    resolve_event,
    resolve_fan_interaction,
    save_draft,
    sign_label,
    write_lyrics,
)
from stardom.events import get_event
from stardom.formulas import tap_score
from stardom.llm_oracle import build_narrator
from stardom.logging_setup import setup_logging, teardown_logging
from stardom.models import ActionResult, CareerState, StudioSession
from stardom.oracle import Narrator
from stardom.persistence import JsonSaveStore, career_to_dict, save_quietly
from stardom.recording import TapSession, advance_slider, tap, tap_feedback
from stardom.settings import get_settings
from stardom.simulation import advance_time

logger = logging.getLogger(__name__)


class NewCareerRequest(BaseModel):
    name: str = Field(min_length=1)
    stage_name: str = Field(min_length=1)
    genre: str = "Pop"
    seed: Optional[int] = None


class SessionRequest(BaseModel):
    title: str = ""
    genre: Optional[str] = None
    use_ghostwriter: bool = False
    featured_artist: Optional[str] = None
    draft_id: Optional[str] = None


class MasterRequest(BaseModel):
    # slider positions (0..100) at the moment of each tap; omitted means use the taps recorded here
    positions: Optional[List[float]] = None


class TapRequest(BaseModel):
    # animation frames the slider moved since the previous tap
    frames: int = Field(default=0, ge=0, le=10_000)


class DistributeRequest(BaseModel):
    platform: str


class PostRequest(BaseModel):
    platform: str
    content: str
    type: str = "Photo"


class ChoiceRequest(BaseModel):
    option: int


@dataclass
class GameSession:
    state: CareerState
    rng: random.Random
    studio: Optional[StudioSession] = None
    take: TapSession = field(default_factory=TapSession)


def _event_view(state: CareerState) -> Optional[dict]:
    event = get_event(state.pending_event)
    if event is None:
        return None
    return {
        "key": event.key,
        "title": event.title,
        "description": event.description,
        "options": [
            {"label": o.label, "description": o.description, "risk": o.risk} for o in event.options
        ],
    }


def _view(sid: str, session: GameSession, result: Optional[ActionResult] = None, **extra) -> dict:
    out = {
        "sid": sid,
        "state": career_to_dict(session.state),
        "pending_event_detail": _event_view(session.state),
        "studio": None,
    }
    if session.studio is not None:
        out["studio"] = {
            "title": session.studio.title,
            "genre": session.studio.genre,
            "lyrics": session.studio.lyrics,
            "total_cost": session.studio.total_cost,
        }
    if result is not None:
        out.update(accepted=result.accepted, message=result.message, narrative=result.narrative)
    out.update(extra)
    return out


def create_app(
    narrator: Optional[Narrator] = None,
    store: Optional[JsonSaveStore] = None,
    save_key: Optional[str] = None,
) -> FastAPI:
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.logging)
        yield
        teardown_logging()

    app = FastAPI(title="Stardom", lifespan=lifespan)
    app.state.narrator = narrator or build_narrator(settings.oracle)
    app.state.store = store or JsonSaveStore(settings.storage.directory)
    app.state.save_key = save_key or settings.storage.key

    # In-memory sessions; one authoritative CareerState per session.
    sessions: Dict[str, GameSession] = {}

    def get_session(sid: str) -> GameSession:
        session = sessions.get(sid)
        if session is None:
            raise HTTPException(status_code=404, detail="Unknown career")
        return session

    def commit(session: GameSession, before: CareerState, after: CareerState, background: BackgroundTasks):
        # Another request replaced the state while we were waiting on the oracle.
        if session.state is not before:
            logger.warning("Stale commit rejected for week %d", before.current_week)
            raise HTTPException(status_code=409, detail="Career changed underneath this action; retry")
        session.state = after
        background.add_task(save_quietly, app.state.store, after, app.state.save_key)

    async def run_action(sid: str, session: GameSession, before: CareerState, result: ActionResult, background: BackgroundTasks) -> dict:
        if result.accepted:
            commit(session, before, result.state, background)
        return _view(sid, session, result)

    @app.post("/careers")
    def create_career(req: NewCareerRequest, background: BackgroundTasks):
        sid = str(uuid.uuid4())
        state = new_career(req.name, req.stage_name, req.genre)
        sessions[sid] = GameSession(state=state, rng=random.Random(req.seed))
        logger.info("New career %s for %s", sid, state.player.stage_name)
        background.add_task(save_quietly, app.state.store, state, app.state.save_key)
        return _view(sid, sessions[sid])

    @app.post("/careers/continue")
    async def continue_career():
        state = app.state.store.load(app.state.save_key)
        if state is None:
            raise HTTPException(status_code=404, detail="No saved career")
        sid = str(uuid.uuid4())
        sessions[sid] = GameSession(state=state, rng=random.Random())
        recap = await career_recap(state, app.state.narrator)
        return _view(sid, sessions[sid], recap=recap)

    @app.get("/careers/{sid}")
    def get_career(sid: str):
        return _view(sid, get_session(sid))

    @app.post("/careers/{sid}/advance")
    async def advance(sid: str, background: BackgroundTasks):
        session = get_session(sid)
        before = session.state
        outcome = await advance_time(before, rng=session.rng, narrator=app.state.narrator)
        commit(session, before, outcome.state, background)
        return _view(
            sid,
            session,
            settled=outcome.settled,
            royalties=outcome.royalties,
            new_awards=[a.category for a in outcome.new_awards],
            new_offer=outcome.new_offer.brand if outcome.new_offer else None,
            event=outcome.event_key,
        )

    @app.post("/careers/{sid}/studio/plan")
    def plan(sid: str, req: SessionRequest):
        session = get_session(sid)
        if req.draft_id:
            result = plan_session_from_draft(session.state, session.rng, req.draft_id)
        else:
            result = plan_session(
                session.state,
                session.rng,
                title=req.title,
                genre=req.genre,
                use_ghostwriter=req.use_ghostwriter,
                featured_artist=req.featured_artist,
            )
        if result.accepted:
            session.studio = result.session
            session.take = TapSession()
        return _view(sid, session, result)

    @app.post("/careers/{sid}/studio/lyrics")
    async def lyrics(sid: str):
        session = get_session(sid)
        if session.studio is None:
            raise HTTPException(status_code=409, detail="Book a session first")
        session.studio = await write_lyrics(session.studio, app.state.narrator)
        return _view(sid, session)

    @app.post("/careers/{sid}/studio/draft")
    async def draft(sid: str, background: BackgroundTasks):
        session = get_session(sid)
        if session.studio is None:
            raise HTTPException(status_code=409, detail="Book a session first")
        before = session.state
        out = await run_action(sid, session, before, save_draft(before, session.studio), background)
        session.studio = None
        session.take = TapSession()
        out["studio"] = None
        return out

    @app.post("/careers/{sid}/studio/tap")
    def studio_tap(sid: str, req: TapRequest):
        session = get_session(sid)
        if session.studio is None:
            raise HTTPException(status_code=409, detail="Book a session first")
        take = session.take
        if take.complete:
            raise HTTPException(status_code=409, detail="The take is finished; master it")
        for _ in range(req.frames):
            take = advance_slider(take)
        take = tap(take)
        session.take = take
        return _view(
            sid,
            session,
            take={
                "position": take.position,
                "scores": list(take.scores),
                "feedback": tap_feedback(take.scores[-1]),
                "complete": take.complete,
            },
        )

    @app.post("/careers/{sid}/studio/master")
    async def master(sid: str, req: MasterRequest, background: BackgroundTasks):
        session = get_session(sid)
        if session.studio is None:
            raise HTTPException(status_code=409, detail="Book a session first")
        before = session.state
        if req.positions is None:
            scores = list(session.take.scores)
        else:
            scores = [tap_score(p) for p in req.positions]
        result = master_song(before, session.studio, scores, session.rng)
        if result.accepted:
            session.studio = None
            session.take = TapSession()
        out = await run_action(sid, session, before, result, background)
        out["feedback"] = [tap_feedback(s) for s in scores]
        return out

    @app.post("/careers/{sid}/songs/{song_id}/distribute")
    async def distribute(sid: str, song_id: str, req: DistributeRequest, background: BackgroundTasks):
        session = get_session(sid)
        before = session.state
        result = await distribute_song(
            before, song_id, req.platform, rng=session.rng, narrator=app.state.narrator
        )
        return await run_action(sid, session, before, result, background)

    @app.post("/careers/{sid}/songs/{song_id}/video")
    async def video(sid: str, song_id: str, background: BackgroundTasks):
        session = get_session(sid)
        before = session.state
        result = await produce_music_video(before, song_id, narrator=app.state.narrator)
        return await run_action(sid, session, before, result, background)

    @app.post("/careers/{sid}/posts")
    async def post(sid: str, req: PostRequest, background: BackgroundTasks):
        session = get_session(sid)
        before = session.state
        result = await publish_post(
            before, req.platform, req.content, narrator=app.state.narrator, post_type=req.type
        )
        return await run_action(sid, session, before, result, background)

    @app.post("/careers/{sid}/offers/{offer_id}/accept")
    async def accept(sid: str, offer_id: str, background: BackgroundTasks):
        session = get_session(sid)
        before = session.state
        result = await accept_offer(before, offer_id, narrator=app.state.narrator)
        return await run_action(sid, session, before, result, background)

    @app.get("/careers/{sid}/labels")
    def labels(sid: str):
        session = get_session(sid)
        return [
            {
                "id": label.id,
                "name": label.name,
                "prestige": label.prestige,
                "fame_requirement": label.fame_requirement,
                "signing_bonus": label.signing_bonus,
                "revenue_split": label.revenue_split,
                "description": label.description,
                "eligible": eligible,
            }
            for label, eligible in available_labels(session.state)
        ]

    @app.post("/careers/{sid}/labels/{label_id}/sign")
    async def sign(sid: str, label_id: str, background: BackgroundTasks):
        session = get_session(sid)
        before = session.state
        return await run_action(sid, session, before, sign_label(before, label_id), background)

    @app.post("/careers/{sid}/event")
    async def event_choice(sid: str, req: ChoiceRequest, background: BackgroundTasks):
        session = get_session(sid)
        before = session.state
        result = resolve_event(before, req.option, session.rng)
        return await run_action(sid, session, before, result, background)

    @app.post("/careers/{sid}/fan-interaction")
    async def fan_reply(sid: str, req: ChoiceRequest, background: BackgroundTasks):
        session = get_session(sid)
        before = session.state
        result = resolve_fan_interaction(before, req.option)
        return await run_action(sid, session, before, result, background)

    @app.post("/careers/{sid}/save")
    def save_and_quit(sid: str):
        session = sessions.pop(sid, None)
        if session is None:
            raise HTTPException(status_code=404, detail="Unknown career")
        save_quietly(app.state.store, session.state, app.state.save_key)
        return {"saved": True}

    return app


app = create_app()
