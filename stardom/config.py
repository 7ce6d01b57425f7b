# stardom/config.py

# Time structure
WEEKS_PER_MONTH = 4
START_YEAR = 2025
AWARD_MONTH = 1  # awards are handed out when the calendar rolls into January

# Starting career
START_FANS = 100
START_FAME = 0
START_MONEY = 5000.0
START_FOLLOWERS = {
    "Instagram": 50,
    "TikTok": 75,
    "YouTube": 20,
    "Spotify": 10,
    "AppleMusic": 5,
}
START_SKILLS = {"songwriting": 20, "vocals": 30, "production": 10, "charisma": 40}
START_LABEL_ID = "indie_self"
START_TRENDING = ["#MusicVibes", "#Stardom", "#NewArtist"]
START_HEADLINE = "Fresh start. The path to Gold begins today."

# Streaming economy
BASE_STREAM_RATE = 750 / 1500
STREAM_BONUS_THRESHOLD = 1_000_000   # fans needed before the rate starts climbing
STREAM_BONUS_PER_FAN = 0.0000001
STREAM_FAN_WEIGHT = 0.05
STREAM_FAME_WEIGHT = 0.01
STREAM_JITTER_MIN = 0.8
STREAM_JITTER_SPAN = 0.4
MIN_WEEKLY_STREAMS = 1

# Audience growth
WEEKLY_FAN_GROWTH = 0.01
MONTHLY_FAN_GROWTH = 0.05
FOLLOWER_GROWTH = {
    "Instagram": 0.04,
    "TikTok": 0.06,
    "YouTube": 0.03,
    "Spotify": 0.05,
    "AppleMusic": 0.02,
}

# Month rollover chances
OFFER_CHANCE = 0.6
EVENT_CHANCE = 0.45
MAX_ACTIVE_OFFERS = 3

# Awards
ALBUM_AWARD_FANS = 1_000_000
ALBUM_AWARD_MIN_SONGS = 3
ALBUM_AWARD_MIN_QUALITY = 85
ARTIST_AWARD_FAME = 5_000_000
AWARD_FAME_BONUS = 500_000
AWARD_MONEY_BONUS = 100_000

# Logs
MAX_HEADLINES = 15

# Studio
SESSION_NOTES_REQUIRED = 5
BASE_STUDIO_RENT = 500
BASE_GHOSTWRITER_FEE = 2500
FEE_JITTER_MIN = 0.8
FEE_JITTER_SPAN = 0.4
GHOSTWRITER_BONUS = 15
FEATURE_BONUS_CAP = 20
FEATURE_FAME_PER_POINT = 500_000
SKILL_WEIGHT = 0.7
PERFORMANCE_WEIGHT = 0.3
QUALITY_NOISE = 5.0

# Mini-game slider
SLIDER_MIN = 0.0
SLIDER_MAX = 100.0
SLIDER_CENTER = 50.0
SLIDER_BASE_SPEED = 2.5
SLIDER_SPEED_PER_TAP = 0.5

# Distribution
AUDIO_DISTRIBUTION_FEE = 250
VIDEO_DISTRIBUTION_FEE = 2000
DISTRIBUTION_FAME_PER_QUALITY = 100
RELEASE_FAN_MULTIPLIER = {
    "Instagram": 1.0,
    "TikTok": 1.5,
    "YouTube": 2.0,
    "Spotify": 1.2,
    "AppleMusic": 1.1,
}
RELEASE_FAME_MULTIPLIER = {
    "Instagram": 1.0,
    "TikTok": 1.5,
    "YouTube": 4.0,
    "Spotify": 1.2,
    "AppleMusic": 1.1,
}
FAN_INTERACTION_THRESHOLD = 1000
FAN_INTERACTION_CHANCE = 0.5

# Music videos
MUSIC_VIDEO_COST = 10_000
MUSIC_VIDEO_FAN_MULTIPLIER = 3
MUSIC_VIDEO_FAME_PER_QUALITY = 600

# Social posts
POST_FAN_RATE = 0.01
POST_FAN_FLAT = 10
POST_FAN_MULTIPLIER = {
    "Instagram": 1.0,
    "TikTok": 1.4,
    "YouTube": 0.8,
    "Spotify": 0.5,
    "AppleMusic": 0.4,
}
POST_FAME_MULTIPLIER = {
    "Instagram": 1.0,
    "TikTok": 1.2,
    "YouTube": 1.5,
    "Spotify": 0.6,
    "AppleMusic": 0.5,
}
TRENDING_BOOST_BASE = 1.5
TRENDING_BOOST_PER_MATCH = 0.2

# Sponsorships
SPONSORED_PLATFORM = "Instagram"
SPONSORED_LIKE_RATE = 0.05
SPONSORED_FAME_IMPACT = 5000
