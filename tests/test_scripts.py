"""DJ scripts and prosody markup."""
import random
from datetime import datetime

import pytest

from conftest import FixedRandom, make_track
from dialfm.models import NewsArticle, WeatherSnapshot
from dialfm.prosody import STYLES, emphasize, humanize, pause, render
from dialfm.scheduler import SEGMENT_TYPES
from dialfm.scripts import (
    ScriptContext,
    generate_script,
    generate_segments,
    request_acknowledgement,
    translate_weather,
)
from dialfm.stations import STATIONS
from dialfm.synthesis import sanitize

ORDINARY_DAY = datetime(2024, 6, 3, 9, 30)


def _ctx(**kwargs):
    defaults = dict(
        previous_track=make_track("prev", artist_name="Anouk", name="Nobody's Wife"),
        next_track=make_track("next", artist_name="The Weeknd", name="Blinding Lights"),
    )
    defaults.update(kwargs)
    return ScriptContext(**defaults)


class TestProsody:
    def test_longest_name_wins(self):
        out = emphasize("Nu The Weeknd, niet Weeknd", ["Weeknd", "The Weeknd"], "strong")
        assert out.count("<emphasis") == 2
        assert '<emphasis level="strong">The Weeknd</emphasis>' in out

    def test_names_match_whole_words_only(self):
        assert emphasize("Fair play", ["Air"], "strong") == "Fair play"

    def test_no_emphasis_level(self):
        assert emphasize("Anouk", ["Anouk"], "none") == "Anouk"

    def test_calm_tones_are_not_humanized(self):
        text = "Eerste zin. Tweede zin. Derde zin."
        assert humanize(text, "chill", random.Random(0)) == text
        assert humanize(text, "smooth", random.Random(0)) == text

    def test_render_joins_parts_with_tone_pause(self):
        out = render(["Hallo daar.", "Tot zo."], "chill", rng=random.Random(0))
        assert out == f"Hallo daar.{pause(STYLES['chill'].sentence_pause_ms)}Tot zo."

    def test_render_adds_comma_pauses(self):
        out = render(["Ja, echt waar."], "edgy", rng=FixedRandom(0))
        assert out == f"Ja, {pause(STYLES['edgy'].comma_pause_ms)}echt waar."

    def test_unknown_tone_uses_warm_style(self):
        out = render(["A.", "B."], "grumpy", rng=FixedRandom(0))
        assert pause(STYLES["warm"].sentence_pause_ms) in out


class TestSegments:
    @pytest.mark.parametrize("station_id", [s.id for s in STATIONS])
    def test_every_segment_renders_for_every_station(self, station_id):
        ctx = _ctx(
            weather=WeatherSnapshot(temperature=3.4, description="light rain", city="Utrecht", wind_speed=14),
            news=[NewsArticle("Kabinet valt", "NOS", "Het kabinet is gevallen. Meer volgt.")],
        )
        for segment in SEGMENT_TYPES:
            script = generate_script(station_id, segment, ctx, random.Random(5), ORDINARY_DAY)
            spoken = sanitize(script)
            assert spoken, f"{segment} on {station_id} produced nothing"
            assert "<" not in spoken and "{" not in spoken

    def test_unknown_segment(self):
        with pytest.raises(ValueError):
            generate_script("pop", "karaoke", _ctx())

    def test_song_intro_needs_a_next_track(self):
        assert generate_script("pop", "song_intro", ScriptContext(), random.Random(0), ORDINARY_DAY) == ""

    def test_intro_greets_listener_and_names_the_track(self):
        script = sanitize(generate_script("jazz", "intro", _ctx(user_name="Sam"), FixedRandom(0), ORDINARY_DAY))
        assert script.startswith("Goedemorgen Sam!")
        assert "Blinding Lights" in script and "09:30" in script

    def test_intro_mentions_holiday(self):
        kingsday = datetime(2024, 4, 27, 10, 0)
        script = sanitize(generate_script("pop", "intro", _ctx(), FixedRandom(0), kingsday))
        assert "koningsdag" in script.lower()
        ordinary = sanitize(generate_script("pop", "intro", _ctx(), FixedRandom(0), ORDINARY_DAY))
        assert "koningsdag" not in ordinary.lower()

    def test_full_weather_report(self):
        ctx = _ctx(weather=WeatherSnapshot(temperature=2, description="snow", city="Groningen", feels_like=-3, humidity=90))
        script = sanitize(generate_script("dutch", "weather_full", ctx, FixedRandom(0), ORDINARY_DAY))
        assert "Groningen" in script
        assert "Sneeuw" in script
        assert "warme jas" in script

    def test_full_news_without_articles(self):
        script = sanitize(generate_script("pop", "news_full", _ctx(), FixedRandom(0), ORDINARY_DAY))
        assert "geen nieuws" in script

    def test_weather_translation(self):
        assert translate_weather("Light Rain") == "Lichte regen"
        assert translate_weather("volcanic ash") == "volcanic ash"


class TestBreaks:
    def test_jingle_prepended(self):
        segments = generate_segments("pop", "between", _ctx(), True, random.Random(0), ORDINARY_DAY)
        assert [s for s, _ in segments] == ["jingle", "between"]

    def test_no_jingle_before_station_id(self):
        segments = generate_segments("pop", "station_id", _ctx(), True, random.Random(0), ORDINARY_DAY)
        assert [s for s, _ in segments] == ["station_id"]

    def test_empty_segment_dropped(self):
        segments = generate_segments("pop", "song_intro", ScriptContext(), False, random.Random(0), ORDINARY_DAY)
        assert segments == []

    def test_request_acknowledgement(self):
        ack = sanitize(request_acknowledgement("rock", "Jaren 80", random.Random(0)))
        assert "Jaren 80" in ack
