"""Module 5 — Listener request parser (keyword matching, no LLM)

Free text like "jaren 80", "iets rustigs" or "meer van Anouk" becomes a
DJRequest that steers track selection for the next few tracks.
"""
import re
from dataclasses import dataclass, field
from typing import Optional

from .config import REQUEST_EXPIRY_TRACKS


@dataclass
class DJRequest:
    type: str                                   # decade | genre | mood | artist | mixed
    label: str
    year_range: Optional[tuple[int, int]] = None
    genre_boost: Optional[list[str]] = None
    energy_range: Optional[tuple[float, float]] = None
    artist_search: Optional[str] = None
    discovery: bool = False
    expires_after_tracks: int = REQUEST_EXPIRY_TRACKS
    remaining_tracks: int = field(default=-1)

    def __post_init__(self):
        if self.remaining_tracks < 0:
            self.remaining_tracks = self.expires_after_tracks

    def consume(self) -> bool:
        """Count one selected track. Returns True once the request has expired."""
        self.remaining_tracks -= 1
        return self.remaining_tracks <= 0

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "label": self.label,
            "year_range": list(self.year_range) if self.year_range else None,
            "genre_boost": self.genre_boost,
            "energy_range": list(self.energy_range) if self.energy_range else None,
            "artist_search": self.artist_search,
            "discovery": self.discovery,
            "remaining_tracks": self.remaining_tracks,
        }


# ── Matchers ──────────────────────────────────────────────────────────────────
# Each matcher returns a dict of request fields (plus "label") or None.
# Within a matcher the first pattern that hits wins.


class DecadeMatcher:
    dimension = "year_range"
    patterns = [
        (r"jaren\s*60|60s|sixties|zestig", (1960, 1969), "Jaren 60"),
        (r"jaren\s*70|70s|seventies|zeventig", (1970, 1979), "Jaren 70"),
        (r"jaren\s*80|80s|eighties|tachtig", (1980, 1989), "Jaren 80"),
        (r"jaren\s*90|90s|nineties|negentig", (1990, 1999), "Jaren 90"),
        (r"jaren\s*00|00s|\bnul\b|2000", (2000, 2009), "Jaren 00"),
        (r"jaren\s*10|10s|\btien\b|2010", (2010, 2019), "Jaren 10"),
        (r"jaren\s*20|20s|twintig|2020", (2020, 2029), "Jaren 20"),
    ]

    def match(self, text: str) -> Optional[dict]:
        for pattern, years, label in self.patterns:
            if re.search(pattern, text):
                return {"year_range": years, "label": label}
        return None


class GenreMatcher:
    dimension = "genre_boost"
    patterns = [
        (r"\brock\b", ["rock", "alternative rock", "classic rock"], "Rock"),
        (r"\bjazz\b", ["jazz", "smooth jazz", "jazz fusion"], "Jazz"),
        (r"\bpop\b", ["pop", "synth-pop", "indie pop"], "Pop"),
        (r"\bhip\s*hop\b|\brap\b", ["hip hop", "rap", "trap"], "Hip-Hop"),
        (r"\bdance\b|\bedm\b|\belectro", ["dance", "edm", "electronic", "house"], "Dance"),
        (r"\bhouse\b", ["house", "deep house", "tech house"], "House"),
        (r"\bklassiek\b|\bclassic", ["classical", "orchestral"], "Klassiek"),
        (r"\bsoul\b|\br&b\b|\brnb\b", ["soul", "r&b", "neo soul"], "Soul/R&B"),
        (r"\breggae\b", ["reggae", "dancehall"], "Reggae"),
        (r"\bcountry\b", ["country", "americana"], "Country"),
        (r"\bmetal\b|\bheavy\b", ["metal", "heavy metal", "metalcore"], "Metal"),
        (r"\bpunk\b", ["punk", "punk rock", "pop punk"], "Punk"),
        (r"\bindie\b", ["indie", "indie rock", "indie pop"], "Indie"),
        (r"\bfunk\b", ["funk", "disco funk"], "Funk"),
        (r"\bblues\b", ["blues", "electric blues"], "Blues"),
        (r"\blatin\b|\bsalsa\b|\breggaeton", ["latin", "reggaeton", "salsa"], "Latin"),
        (r"\bnederlands\b|\bhollands\b|\bnl\b", ["dutch pop", "nederlandstalig", "levenslied"], "Nederlands"),
    ]

    def match(self, text: str) -> Optional[dict]:
        for pattern, genres, label in self.patterns:
            if re.search(pattern, text):
                return {"genre_boost": list(genres), "label": label}
        return None


class MoodMatcher:
    dimension = "energy_range"
    # Dutch adjectives inflect ("rustige", "feestmuziek"), so stems match as prefixes
    patterns = [
        (r"\brustig|\bcalm\b|\brelax|\bchill\b|\bontspannen", (0.0, 0.4), "Rustige muziek"),
        (r"\bslapen\b|\bslaap|\bsleep", (0.0, 0.3), "Slaapliedjes"),
        (r"\bfeest|\bparty\b|\bknallen\b|\bharden", (0.7, 1.0), "Feestmuziek"),
        (r"\benergie|\benergiek|\bupbeat\b|\bvrolijk", (0.6, 1.0), "Energieke muziek"),
        (r"\bromantisch|\bliefde\b|\blove\b|\bromantic", (0.2, 0.6), "Romantische muziek"),
        (r"\bverdrietig|\bsad\b|\bmelancholisch", (0.1, 0.4), "Melancholische muziek"),
        (r"\bfocus\b|\bstuderen\b|\bwerk\b|\bconcentr", (0.2, 0.5), "Focus muziek"),
        (r"\bsport\b|\bworkout\b|\bgym\b|\bhardlopen", (0.8, 1.0), "Workout muziek"),
    ]

    def match(self, text: str) -> Optional[dict]:
        for pattern, energy, label in self.patterns:
            if re.search(pattern, text):
                return {"energy_range": energy, "label": label}
        return None


class DiscoveryMatcher:
    dimension = "discovery"

    def match(self, text: str) -> Optional[dict]:
        if re.search(r"\bnieuw|\bontdek|\bonbekend\b|\bverras", text):
            return {"discovery": True, "label": "Nieuwe ontdekkingen"}
        return None


class ArtistMatcher:
    dimension = "artist_search"
    exclusive = True    # only consulted when nothing else matched

    def match(self, text: str) -> Optional[dict]:
        m = re.search(r"(?:meer\s+(?:van\s+)?|draai\s+(?:eens\s+)?|speel\s+(?:eens\s+)?)(.+)", text)
        if not m:
            return None
        artist = m.group(1).strip()
        if len(artist) <= 1:
            return None
        return {"artist_search": artist, "label": artist}


MATCHERS = [DecadeMatcher(), GenreMatcher(), MoodMatcher(), DiscoveryMatcher(), ArtistMatcher()]


def parse_request(text: str, matchers: Optional[list] = None) -> Optional[DJRequest]:
    """Returns a DJRequest, or None when nothing recognisable was asked for."""
    t = (text or "").strip().lower()
    if len(t) < 2:
        return None

    fields: dict = {}
    labels: list[str] = []
    for matcher in matchers or MATCHERS:
        if getattr(matcher, "exclusive", False) and labels:
            continue
        hit = matcher.match(t)
        if hit:
            labels.append(hit.pop("label"))
            fields.update(hit)

    if not labels:
        return None

    # Discovery widens energy to the full range unless a mood already set it
    if fields.get("discovery") and "energy_range" not in fields:
        fields["energy_range"] = (0.0, 1.0)

    dims = [k for k in ("year_range", "genre_boost", "energy_range", "artist_search") if k in fields]
    kinds = {"year_range": "decade", "genre_boost": "genre", "energy_range": "mood", "artist_search": "artist"}
    req_type = kinds[dims[0]] if len(dims) == 1 else "mixed"

    return DJRequest(type=req_type, label=" + ".join(labels), **fields)
