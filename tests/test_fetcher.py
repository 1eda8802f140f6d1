"""Candidate fetching: query building, cold/warm modes, filters."""
import asyncio
import random
from datetime import datetime

import pytest

from conftest import FakeCatalog, make_track
from dialfm.errors import AuthExpired, CatalogError
from dialfm.fetcher import (
    CandidateFetcher,
    build_search_queries,
    looks_like_artist,
    mood_target,
    slot_year_window,
)
from dialfm.request_parser import DJRequest
from dialfm.rotation import SelectionState
from dialfm.stations import get_station

NOW = datetime(2024, 6, 1, 14, 0)


def _fetch(catalog, station_id="pop", state=None, request=None):
    fetcher = CandidateFetcher(catalog, random.Random(7))
    return asyncio.run(fetcher.fetch(get_station(station_id), state or SelectionState(), request, NOW))


class TestQueryBuilding:
    @pytest.mark.parametrize("term,expected", [
        ("Anouk", True),
        ("Foo Fighters", True),
        ("pop", False),
        ("top hits", False),
        ("Nederlandse muziek", False),
    ])
    def test_looks_like_artist(self, term, expected):
        assert looks_like_artist(term) is expected

    def test_slot_windows(self):
        pop = get_station("pop")
        assert slot_year_window(pop, "C", 2024) == (2022, 2024)
        assert slot_year_window(pop, "R", 2024) == (2018, 2022)

    def test_window_clamped_to_station_range(self):
        classics = get_station("classics")
        assert slot_year_window(classics, "G", 2024) == (1970, 2005)
        # A current slot falls entirely outside 1970–2005
        assert slot_year_window(classics, "C", 2024) == (1970, 2005)

    def test_artist_request_queries(self):
        request = DJRequest(type="artist", label="Anouk", artist_search="Anouk")
        assert build_search_queries(get_station("pop"), "C", request) == ["artist:Anouk", "Anouk"]

    def test_genre_request_replaces_station_terms(self):
        request = DJRequest(type="genre", label="Jazz", genre_boost=["jazz", "smooth jazz", "jazz fusion"])
        queries = build_search_queries(get_station("rock"), "C", request, random.Random(1), 2024)
        assert len(queries) == 3
        assert all(q.startswith("genre:") and "jazz" in q for q in queries)
        assert all(q.endswith("year:2022-2024") for q in queries)

    def test_decade_request_sets_year_on_every_query(self):
        request = DJRequest(type="decade", label="Jaren 80", year_range=(1980, 1989))
        queries = build_search_queries(get_station("dutch"), "C", request, random.Random(3), 2024)
        assert queries and all("year:1980-1989" in q for q in queries)

    def test_station_queries_use_slot_window(self):
        queries = build_search_queries(get_station("pop"), "R", None, random.Random(5), 2024)
        for q in queries:
            if q.startswith("genre:"):
                assert q.endswith("year:2018-2022")
            else:
                assert q.startswith("artist:") and "year:" not in q


class TestMoodCurve:
    def test_night_is_low_energy(self):
        assert mood_target(datetime(2024, 1, 1, 2, 0)) == {"energy": 0.35, "valence": 0.40}

    def test_afternoon_peaks_mid_afternoon(self):
        peak = mood_target(datetime(2024, 1, 1, 15, 0))["energy"]
        assert peak == pytest.approx(0.75)
        assert mood_target(datetime(2024, 1, 1, 12, 0))["energy"] < peak


class TestColdStart:
    def test_search_without_history(self):
        catalog = FakeCatalog(tracks=[make_track("a")])
        assert [t.id for t in _fetch(catalog)] == ["a"]
        assert catalog.searches and not catalog.recommend_calls

    def test_popularity_floor(self):
        tracks = [make_track("low", popularity=30), make_track("ok", popularity=40), make_track("unknown", popularity=None)]
        assert [t.id for t in _fetch(FakeCatalog(tracks=tracks))] == ["ok", "unknown"]

    def test_discovery_skips_floor(self):
        tracks = [make_track("low", popularity=5)]
        request = DJRequest(type="mood", label="Nieuw", discovery=True, energy_range=(0.0, 1.0))
        assert [t.id for t in _fetch(FakeCatalog(tracks=tracks), request=request)] == ["low"]

    def test_search_failure_yields_empty(self, isolated_error_log):
        catalog = FakeCatalog(search_error=CatalogError("HTTP 500"))
        assert _fetch(catalog) == []
        assert "catalog_fetch" in isolated_error_log.read_text()

    def test_auth_expired_propagates(self):
        with pytest.raises(AuthExpired):
            _fetch(FakeCatalog(search_error=AuthExpired("expired")))


class TestWarm:
    def _state(self):
        state = SelectionState()
        state.play_history = ["p1", "p2", "p3"]
        state.recent_artist_ids = ["a3"]
        return state

    def test_recommendations_with_history(self):
        catalog = FakeCatalog(tracks=[make_track("s")], recommended=[make_track("r")])
        assert [t.id for t in _fetch(catalog, state=self._state())] == ["r"]
        call = catalog.recommend_calls[0]
        assert call["seed_tracks"] == ["p3", "p2"]
        assert call["seed_artists"] == []
        assert len(call["seed_tracks"]) + len(call["seed_genres"]) <= 5
        assert call["min_popularity"] == 40
        assert not catalog.searches

    def test_falls_back_to_search_on_error(self):
        catalog = FakeCatalog(tracks=[make_track("s")], recommend_error=CatalogError("HTTP 404", 404))
        assert [t.id for t in _fetch(catalog, state=self._state())] == ["s"]

    def test_falls_back_to_search_when_empty(self):
        catalog = FakeCatalog(tracks=[make_track("s")], recommended=[])
        assert [t.id for t in _fetch(catalog, state=self._state())] == ["s"]

    def test_auth_expired_not_absorbed(self):
        catalog = FakeCatalog(tracks=[make_track("s")], recommend_error=AuthExpired("expired"))
        with pytest.raises(AuthExpired):
            _fetch(catalog, state=self._state())

    def test_search_only_request_skips_recommendations(self):
        catalog = FakeCatalog(tracks=[make_track("s", year=1985)])
        request = DJRequest(type="decade", label="Jaren 80", year_range=(1980, 1989))
        _fetch(catalog, state=self._state(), request=request)
        assert catalog.searches and not catalog.recommend_calls

    def test_energy_request_targets_midpoint(self):
        catalog = FakeCatalog(recommended=[make_track("r")])
        request = DJRequest(type="mood", label="Rustig", energy_range=(0.0, 0.4))
        _fetch(catalog, state=self._state(), request=request)
        assert catalog.recommend_calls[0]["target_energy"] == pytest.approx(0.2)


class TestEnergyFilter:
    REQUEST = DJRequest(type="mood", label="Rustig", energy_range=(0.0, 0.4))

    def test_keeps_in_range_and_unknown(self):
        tracks = [make_track("calm"), make_track("loud"), make_track("unknown")]
        catalog = FakeCatalog(tracks=tracks, features={"calm": 0.2, "loud": 0.9})
        result = _fetch(catalog, request=self.REQUEST)
        assert [t.id for t in result] == ["calm", "unknown"]
        assert result[0].energy == 0.2

    def test_unfiltered_when_everything_would_be_removed(self):
        tracks = [make_track("loud1"), make_track("loud2")]
        catalog = FakeCatalog(tracks=tracks, features={"loud1": 0.9, "loud2": 0.8})
        assert [t.id for t in _fetch(catalog, request=self.REQUEST)] == ["loud1", "loud2"]

    def test_unfiltered_when_features_fail(self):
        catalog = FakeCatalog(tracks=[make_track("x")], features_error=CatalogError("HTTP 403", 403))
        assert [t.id for t in _fetch(catalog, request=self.REQUEST)] == ["x"]
