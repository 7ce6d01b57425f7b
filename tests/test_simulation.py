import random
from dataclasses import replace
from datetime import date

import pytest

from conftest import ScriptedRandom, make_song, run
from stardom.models import FanInteraction, FanReplyOption, SponsoredOffer
from stardom.oracle import FALLBACK_TRENDING
from stardom.formulas import stream_rate
from stardom import simulation
from stardom.simulation import add_month, advance_time, evaluate_awards


def _advance(state, narrator, rng):
    return run(advance_time(state, rng=rng, narrator=narrator))


def _offer(offer_id):
    return SponsoredOffer(id=offer_id, brand=offer_id, payout=100, requirement="post", charisma_penalty=1)


def test_first_advance_from_a_new_career(career, narrator):
    result = _advance(career, narrator, ScriptedRandom([0.99]))
    assert result.state.current_week == 1
    assert result.state.player.fans == 101
    assert result.state.player.money == career.player.money
    assert not result.settled
    # input is never touched
    assert career.current_week == 0


def test_four_advances_from_week_one_settle_once(career, narrator, stub_oracle):
    state = replace(career, current_week=1, player=replace(career.player, fans=1000))
    rng = ScriptedRandom([0.99])
    settled = []
    for _ in range(4):
        result = _advance(state, narrator, rng)
        settled.append(result.settled)
        state = result.state

    assert settled == [False, False, False, True]
    assert state.current_week == 1
    assert state.current_date == date(2025, 2, 1)
    # 1000 -> 1010 -> 1020 -> 1030, then 5% of 1030 at rollover
    assert state.player.fans == 1081
    assert state.trending_topics == ("#One", "#Two", "#Three", "#Four", "#Five")
    assert state.history[-1].fans == 1081
    assert len(state.history) == 2
    assert stub_oracle.calls.count("trending") == 1


def test_new_career_needs_five_advances_to_settle(career, narrator):
    state = career
    rng = ScriptedRandom([0.99])
    flags = []
    for _ in range(5):
        result = _advance(state, narrator, rng)
        flags.append(result.settled)
        state = result.state
    assert flags == [False, False, False, False, True]


def test_weeks_stay_in_range_over_a_long_run(career, narrator):
    state = career
    rng = random.Random(7)
    settlements = 0
    for _ in range(20):
        result = _advance(state, narrator, rng)
        state = result.state
        settlements += result.settled
        assert 1 <= state.current_week <= 4
        assert len(state.active_offers) <= 3
    assert settlements == 4


def test_settlement_pays_every_stream_since_the_last_one(career, narrator):
    songs = (make_song("A", 80, id="a"), make_song("B", 60, id="b"))
    state = replace(career, current_week=1, songs=songs, player=replace(career.player, fans=10_000))
    rng = ScriptedRandom([0.99])
    money_before = state.player.money

    total = 0
    results = []
    for _ in range(4):
        result = _advance(state, narrator, rng)
        results.append(result)
        total += sum(result.stream_gains.values())
        state = result.state

    assert results[2].state.unsettled_streams == total - sum(results[3].stream_gains.values())
    assert results[-1].royalties == pytest.approx(total * 0.5)
    assert state.player.money == pytest.approx(money_before + total * 0.5)
    assert state.unsettled_streams == 0
    assert sum(s.streams for s in state.songs) == total


def test_weekly_gain_for_a_big_artist(career, narrator):
    song = make_song("Anthem", 100, id="anthem")
    state = replace(career, current_week=1, songs=(song,), player=replace(career.player, fans=2_000_000))
    result = _advance(state, narrator, ScriptedRandom([0.5]))
    assert result.stream_gains == {"anthem": 100_000}


def test_revenue_is_revalued_at_the_current_rate(career, narrator):
    song = make_song("Old Hit", 70, id="old", streams=1000, revenue=1.0)
    state = replace(career, current_week=1, songs=(song,), player=replace(career.player, fans=2_000_000))
    result = _advance(state, narrator, ScriptedRandom([0.5]))
    updated = result.state.songs[0]
    assert updated.revenue == pytest.approx(updated.streams * stream_rate(2_000_000))


def test_royalties_respect_the_label_split(career, narrator):
    state = replace(
        career,
        current_week=4,
        unsettled_streams=1000,
        player=replace(career.player, label_id="neon_wave"),
    )
    result = _advance(state, narrator, ScriptedRandom([0.99]))
    assert result.royalties == pytest.approx(300.0)
    assert result.state.news[0].startswith("Royalties in: $300")


def test_no_royalty_headline_without_streams(career, narrator):
    state = replace(career, current_week=4)
    result = _advance(state, narrator, ScriptedRandom([0.99]))
    assert result.settled
    assert result.state.news == career.news


def test_followers_compound_at_rollover(career, narrator):
    followers = {p: 1000 for p in career.player.followers}
    state = replace(career, current_week=4, player=replace(career.player, fans=1000, followers=followers))
    result = _advance(state, narrator, ScriptedRandom([0.99]))
    assert result.state.player.followers == {
        "Instagram": 1040,
        "TikTok": 1060,
        "YouTube": 1030,
        "Spotify": 1050,
        "AppleMusic": 1020,
    }
    assert result.state.player.fans == 1050


def test_offer_window_keeps_the_newest_three(career, narrator):
    offers = (_offer("o1"), _offer("o2"), _offer("o3"))
    state = replace(career, current_week=4, active_offers=offers)
    result = _advance(state, narrator, ScriptedRandom([0.0]))
    assert [o.id for o in result.state.active_offers] == ["stub-offer-1", "o1", "o2"]
    assert result.new_offer.id == "stub-offer-1"


def test_rollover_can_trigger_an_event(career, narrator):
    state = replace(career, current_week=4)
    result = _advance(state, narrator, ScriptedRandom([0.0]))
    assert result.event_key == "twitter_feud"
    assert result.state.pending_event == "twitter_feud"


def test_pending_event_is_never_replaced(career, narrator):
    state = replace(career, current_week=4, pending_event="viral_sound")
    result = _advance(state, narrator, ScriptedRandom([0.0]))
    assert result.event_key is None
    assert result.state.pending_event == "viral_sound"


def test_pending_fan_message_blocks_events(career, narrator):
    interaction = FanInteraction(
        username="fan",
        message="hi",
        options=(FanReplyOption(label="Hi", result="ok", bonus_type="fans", bonus_value=1),),
    )
    state = replace(career, current_week=4, pending_fan_interaction=interaction)
    result = _advance(state, narrator, ScriptedRandom([0.0]))
    assert result.state.pending_event is None


def test_year_end_awards(career, narrator):
    songs = (make_song("Top", 90, id="t"), make_song("Mid", 70, id="m"), make_song("Low", 60, id="l"))
    state = replace(
        career,
        current_date=date(2025, 12, 1),
        current_week=4,
        songs=songs,
        player=replace(career.player, fans=1_500_000, fame=0),
    )
    result = _advance(state, narrator, ScriptedRandom([0.0]))
    nxt = result.state

    assert [a.category for a in result.new_awards] == ["Album of the Year"]
    assert nxt.awards[-1].year == 2025
    assert nxt.current_date == date(2026, 1, 1)
    assert nxt.player.fame == 500_000
    assert nxt.player.money == pytest.approx(state.player.money + 100_000 + result.royalties)
    assert "BREAKING: J-Rey won Album of the Year at the 2025 awards" in nxt.news
    # award night crowds out career events
    assert result.event_key is None
    assert nxt.pending_event is None


def test_artist_of_the_year_needs_fame(career):
    famous = replace(career, player=replace(career.player, fame=6_000_000))
    assert [a.category for a in evaluate_awards(famous, year=2030)] == ["Artist of the Year"]
    assert evaluate_awards(career, year=2030) == []


def test_album_award_needs_a_great_song(career):
    songs = tuple(make_song(f"S{i}", 85, id=f"s{i}") for i in range(3))
    state = replace(career, songs=songs, player=replace(career.player, fans=2_000_000))
    assert evaluate_awards(state, year=2025) == []


def test_no_awards_outside_january(career, narrator):
    state = replace(
        career,
        current_date=date(2025, 6, 1),
        current_week=4,
        player=replace(career.player, fame=6_000_000),
    )
    result = _advance(state, narrator, ScriptedRandom([0.99]))
    assert result.new_awards == []
    assert result.state.player.fame == 6_000_000


def test_oracle_outage_uses_fallbacks(career, failing_narrator):
    state = replace(career, current_week=4)
    result = _advance(state, failing_narrator, ScriptedRandom([0.0]))
    assert result.settled
    assert result.state.trending_topics == tuple(FALLBACK_TRENDING)
    assert result.new_offer.brand == "GlowWater"


@pytest.mark.parametrize(
    "start,expected",
    [
        (date(2025, 1, 31), date(2025, 2, 28)),
        (date(2025, 12, 15), date(2026, 1, 15)),
        (date(2024, 1, 1), date(2024, 2, 1)),
    ],
)
def test_add_month(start, expected):
    assert add_month(start) == expected


def _negative_charisma(career):
    skills = replace(career.player.skills, charisma=-5)
    return replace(career, current_week=1, player=replace(career.player, skills=skills))


def test_broken_state_fails_loudly_under_test(career, narrator):
    with pytest.raises(AssertionError):
        _advance(_negative_charisma(career), narrator, ScriptedRandom([0.99]))


def test_engine_clamps_when_asserts_are_off(career, narrator, monkeypatch):
    monkeypatch.setattr(simulation, "check_invariants", lambda state: None)
    result = _advance(_negative_charisma(career), narrator, ScriptedRandom([0.99]))
    assert result.state.player.skills.charisma == 0
    assert result.state.current_week == 2
