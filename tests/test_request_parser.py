"""Listener request parsing."""
import pytest

from dialfm.request_parser import DJRequest, parse_request


class TestSingleDimension:
    @pytest.mark.parametrize("text,years,label", [
        ("jaren 80", (1980, 1989), "Jaren 80"),
        ("Jaren 80 graag!", (1980, 1989), "Jaren 80"),
        ("iets uit de nineties", (1990, 1999), "Jaren 90"),
        ("zestiger jaren", (1960, 1969), "Jaren 60"),
    ])
    def test_decades(self, text, years, label):
        req = parse_request(text)
        assert req.type == "decade"
        assert req.year_range == years
        assert req.label == label

    def test_genre(self):
        req = parse_request("doe maar wat jazz")
        assert req.type == "genre"
        assert req.genre_boost == ["jazz", "smooth jazz", "jazz fusion"]

    @pytest.mark.parametrize("text,energy", [
        ("iets rustigs", (0.0, 0.4)),
        ("rustige muziek", (0.0, 0.4)),
        ("feestmuziek!", (0.7, 1.0)),
        ("muziek om te sporten in de gym", (0.8, 1.0)),
    ])
    def test_moods(self, text, energy):
        req = parse_request(text)
        assert req.type == "mood"
        assert req.energy_range == energy

    def test_artist(self):
        req = parse_request("meer van Anouk")
        assert req.type == "artist"
        assert req.artist_search == "anouk"

    def test_discovery_opens_full_energy_range(self):
        req = parse_request("verras me eens")
        assert req.discovery is True
        assert req.energy_range == (0.0, 1.0)


class TestCombined:
    def test_decade_and_genre(self):
        req = parse_request("rock uit de jaren 90")
        assert req.type == "mixed"
        assert req.year_range == (1990, 1999)
        assert "rock" in req.genre_boost
        assert req.label == "Jaren 90 + Rock"

    def test_artist_only_when_nothing_else_matched(self):
        req = parse_request("draai eens jaren 80")
        assert req.type == "decade"
        assert req.artist_search is None

    def test_discovery_keeps_mood_energy(self):
        req = parse_request("iets nieuws en rustigs")
        assert req.discovery is True
        assert req.energy_range == (0.0, 0.4)


class TestRejection:
    @pytest.mark.parametrize("text", ["", " ", "x", "blablabla", "hallo daar"])
    def test_unrecognised(self, text):
        assert parse_request(text) is None


class TestExpiry:
    def test_expires_after_five_tracks(self):
        req = parse_request("jaren 80")
        assert req.remaining_tracks == 5
        expired = [req.consume() for _ in range(5)]
        assert expired == [False, False, False, False, True]

    def test_to_dict(self):
        req = DJRequest(type="decade", label="Jaren 70", year_range=(1970, 1979))
        d = req.to_dict()
        assert d["year_range"] == [1970, 1979]
        assert d["remaining_tracks"] == 5
