"""Shared data types — catalog tracks and context snapshots."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Artist:
    id: str
    name: str


@dataclass
class Track:
    id: str
    name: str
    artists: list[Artist] = field(default_factory=list)
    album_name: str = ""
    release_date: str = ""
    duration_ms: int = 0
    uri: str = ""
    popularity: Optional[int] = None
    energy: Optional[float] = None

    @property
    def artist_names(self) -> str:
        return ", ".join(a.name for a in self.artists)

    @property
    def primary_artist(self) -> str:
        return self.artists[0].name if self.artists else ""

    @property
    def effective_popularity(self) -> int:
        return 50 if self.popularity is None else self.popularity

    def release_year(self, default: Optional[int] = None) -> int:
        """First four digits of release_date; current year when unparseable."""
        try:
            return int(self.release_date[:4])
        except (TypeError, ValueError):
            return default if default is not None else datetime.now().year

    @classmethod
    def from_api(cls, data: dict) -> "Track":
        album = data.get("album") or {}
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            artists=[Artist(a.get("id", ""), a.get("name", "")) for a in data.get("artists", [])],
            album_name=album.get("name", ""),
            release_date=album.get("release_date", "") or "",
            duration_ms=int(data.get("duration_ms") or 0),
            uri=data.get("uri", ""),
            popularity=data.get("popularity"),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "artists": [{"id": a.id, "name": a.name} for a in self.artists],
            "album": self.album_name,
            "release_date": self.release_date,
            "duration_ms": self.duration_ms,
            "uri": self.uri,
            "popularity": self.popularity,
        }


@dataclass
class WeatherSnapshot:
    temperature: float
    description: str       # provider's English description, e.g. "light rain"
    city: str = ""
    feels_like: Optional[float] = None
    wind_speed: Optional[float] = None
    humidity: Optional[int] = None

    @classmethod
    def from_dict(cls, data: dict) -> "WeatherSnapshot":
        return cls(
            temperature=float(data.get("temperature", data.get("temp", 0))),
            description=str(data.get("description", "")),
            city=str(data.get("city", "")),
            feels_like=data.get("feels_like"),
            wind_speed=data.get("wind_speed"),
            humidity=data.get("humidity"),
        )


@dataclass
class NewsArticle:
    title: str
    source: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "NewsArticle":
        return cls(
            title=str(data.get("title", "")),
            source=str(data.get("source", "")),
            description=str(data.get("description", "")),
        )
