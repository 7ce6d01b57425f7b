import random

import pytest

from conftest import ScriptedRandom
from stardom.formulas import (
    distribution_impact,
    fallback_fan_gain,
    feature_bonus,
    social_post_impact,
    song_quality,
    stream_rate,
    tap_score,
    trending_boost,
    trending_matches,
    weekly_stream_gain,
)
from stardom.models import Skills


def test_stream_rate_is_flat_below_a_million_fans():
    assert stream_rate(0) == 0.5
    assert stream_rate(999_999) == 0.5


def test_stream_rate_never_decreases():
    fans = [0, 10, 500_000, 1_000_000, 1_000_001, 2_000_000, 50_000_000]
    rates = [stream_rate(f) for f in fans]
    assert rates == sorted(rates)
    assert stream_rate(2_000_000) == pytest.approx(0.6)


@pytest.mark.parametrize("fans,fame", [(0, 0), (100, 0), (5_000_000, 9_000_000)])
def test_zero_quality_song_still_gets_one_stream(fans, fame):
    assert weekly_stream_gain(random.Random(3), quality=0, fans=fans, fame=fame) == 1


def test_weekly_gain_midpoint_jitter():
    gain = weekly_stream_gain(ScriptedRandom([0.5]), quality=100, fans=2_000_000, fame=0)
    assert gain == 100_000


def test_weekly_gain_stays_inside_jitter_band():
    rng = random.Random(42)
    for _ in range(200):
        gain = weekly_stream_gain(rng, quality=100, fans=2_000_000, fame=0)
        assert 80_000 <= gain <= 120_000


def test_weekly_gain_draws_exactly_once():
    rng = ScriptedRandom([0.1])
    weekly_stream_gain(rng, quality=50, fans=1000, fame=10)
    assert rng.calls == 1


def test_song_quality_uses_skills_taps_and_noise():
    skills = Skills(songwriting=20, vocals=30, production=10, charisma=40)
    # base 20 * 0.7 + 100 * 0.3 + 2.5 noise
    q = song_quality(ScriptedRandom([0.5]), skills=skills, tap_scores=[100] * 5)
    assert q == 46


def test_song_quality_is_clamped():
    maxed = Skills(songwriting=1000, vocals=1000, production=1000, charisma=0)
    assert song_quality(
        random.Random(1),
        skills=maxed,
        tap_scores=[100] * 5,
        use_ghostwriter=True,
        featured_artist_fame=15_000_000,
    ) == 100
    broken = Skills(songwriting=-500, vocals=-500, production=-500, charisma=0)
    assert song_quality(random.Random(1), skills=broken, tap_scores=[0] * 5) == 0


def test_ghostwriter_and_feature_raise_quality():
    skills = Skills(songwriting=30, vocals=30, production=30, charisma=10)
    plain = song_quality(ScriptedRandom([0.0]), skills=skills, tap_scores=[50] * 5)
    ghost = song_quality(ScriptedRandom([0.0]), skills=skills, tap_scores=[50] * 5, use_ghostwriter=True)
    feat = song_quality(
        ScriptedRandom([0.0]), skills=skills, tap_scores=[50] * 5, featured_artist_fame=2_500_000
    )
    assert ghost > plain
    assert feat > plain


def test_feature_bonus_caps_out():
    assert feature_bonus(2_500_000) == 5
    assert feature_bonus(100_000_000) == 20


@pytest.mark.parametrize(
    "position,expected",
    [(50, 100), (0, 0), (100, 0), (25, 50), (60, 80), (-10, 0)],
)
def test_tap_score(position, expected):
    assert tap_score(position) == expected


def test_fallback_fan_gain():
    assert fallback_fan_gain(50, 1000) == 600


def test_distribution_impact_by_platform():
    assert distribution_impact(platform="YouTube", quality=50, base_fan_gain=1000) == (2000, 20_000)
    assert distribution_impact(platform="Spotify", quality=50, base_fan_gain=1000) == (1200, 6000)
    assert distribution_impact(platform="Instagram", quality=0, base_fan_gain=0) == (0, 0)


def test_trending_matches_ignore_case_and_hash():
    topics = ["#ViralBeat", "#StudioLife", "#Unrelated"]
    assert trending_matches("Loving #viralbeat and studiolife vibes", topics) == 2
    assert trending_matches("nothing to see", topics) == 0


def test_trending_boost_grows_with_matches():
    assert trending_boost(0) == 1.0
    assert trending_boost(1) == 1.5
    assert trending_boost(3) == pytest.approx(1.9)


def test_social_post_impact():
    assert social_post_impact(platform="Instagram", fans=100, matches=0) == (11, 22)
    # 11 * 1.5 boost, floored
    assert social_post_impact(platform="Instagram", fans=100, matches=1) == (16, 32)
    fans, fame = social_post_impact(platform="YouTube", fans=10_000, matches=0)
    assert (fans, fame) == (88, 264)
