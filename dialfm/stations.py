"""Module 2 — Station catalog (immutable profiles, shows, time of day)"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

CURRENT_YEAR = datetime.now().year

TIMES_OF_DAY = ("morning", "afternoon", "evening", "night")
TONES = ("energetic", "chill", "warm", "smooth", "edgy")


@dataclass(frozen=True)
class DJProfile:
    name: str
    voice: str
    tone: str               # one of TONES
    talkativeness: float    # 0.3–1.0, higher = more frequent breaks
    interjections: tuple[str, ...]
    rate: str = "default"   # e.g. "+5%"
    pitch: str = "default"  # e.g. "-2Hz"


@dataclass(frozen=True)
class Show:
    name: str
    tagline: str


@dataclass(frozen=True)
class RotationWeights:
    current: float
    recurrent: float
    gold: float


@dataclass(frozen=True)
class SegmentWeights:
    weather: float
    news: float
    fun_fact: float
    station_id: float
    song_intro: float
    jingle: float
    time: float


@dataclass(frozen=True)
class StationProfile:
    id: str
    label: str
    frequency: str
    tagline: str
    search_terms: tuple[str, ...]
    seed_genres: tuple[str, ...]
    year_range: tuple[int, int]
    popularity_range: tuple[int, int]
    rotation_weights: RotationWeights
    dj: DJProfile
    shows: tuple[tuple[str, Show], ...]
    segment_weights: SegmentWeights

    def show(self, time_of_day: str) -> Show:
        return dict(self.shows)[time_of_day]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "frequency": self.frequency,
            "tagline": self.tagline,
            "year_range": list(self.year_range),
            "popularity_range": list(self.popularity_range),
            "dj": {"name": self.dj.name, "voice": self.dj.voice, "tone": self.dj.tone},
            "shows": {tod: {"name": s.name, "tagline": s.tagline} for tod, s in self.shows},
        }


def _shows(morning, afternoon, evening, night) -> tuple:
    return tuple(
        (tod, Show(*pair))
        for tod, pair in zip(TIMES_OF_DAY, (morning, afternoon, evening, night))
    )


STATIONS: tuple[StationProfile, ...] = (
    StationProfile(
        id="pop",
        label="Pop FM",
        frequency="89.5",
        tagline="De beste hits van nu!",
        search_terms=(
            "pop", "top hits", "chart hits", "dance pop", "synth pop", "electro pop",
            "Dua Lipa", "The Weeknd", "Billie Eilish", "Harry Styles",
            "Taylor Swift", "Olivia Rodrigo", "Sabrina Carpenter", "Ariana Grande",
            "Ed Sheeran", "Bruno Mars", "Rihanna", "Justin Bieber",
            "Doja Cat", "SZA", "Tate McRae", "Chappell Roan",
        ),
        seed_genres=("pop", "dance pop", "electropop"),
        year_range=(2018, CURRENT_YEAR),
        popularity_range=(55, 100),
        rotation_weights=RotationWeights(0.5, 0.3, 0.2),
        dj=DJProfile(
            name="DJ Fenna", voice="nl-NL-FennaNeural", tone="energetic", talkativeness=0.7,
            interjections=("Wow!", "Jaaa!", "Lekker hoor!", "Bam!", "Wat een hit!", "Top!"),
            rate="+5%",
        ),
        shows=_shows(
            ("De Ochtend Show", "Wakker worden met de beste hits!"),
            ("Middag Mix", "Non-stop hits voor je middag"),
            ("Drive Time", "De lekkerste hits op weg naar huis"),
            ("Night Vibes", "Chill hits voor de avond"),
        ),
        segment_weights=SegmentWeights(0.2, 0.2, 0.15, 0.15, 0.15, 0.1, 0.05),
    ),
    StationProfile(
        id="rock",
        label="Rock FM",
        frequency="92.3",
        tagline="Louder than life!",
        search_terms=(
            "rock", "alternative rock", "indie rock", "classic rock", "hard rock",
            "grunge", "post punk", "garage rock",
            "Foo Fighters", "Arctic Monkeys", "Red Hot Chili Peppers", "Nirvana",
            "Queens of the Stone Age", "The Black Keys", "Muse", "Green Day",
            "Pearl Jam", "Radiohead", "The Killers", "Imagine Dragons",
            "Royal Blood", "Nothing But Thieves", "Greta Van Fleet",
        ),
        seed_genres=("rock", "alternative rock", "hard rock"),
        year_range=(1990, CURRENT_YEAR),
        popularity_range=(40, 100),
        rotation_weights=RotationWeights(0.3, 0.3, 0.4),
        dj=DJProfile(
            name="DJ Maarten", voice="nl-NL-MaartenNeural", tone="edgy", talkativeness=0.5,
            interjections=("Vet!", "Lekker rauw!", "Daar gaat ie!", "Rock on!", "Beuken!"),
            pitch="-2Hz",
        ),
        shows=_shows(
            ("Morning Rock", "Begin je dag met power"),
            ("Rock Classics", "De beste rock aller tijden"),
            ("Rock Drive", "Vol gas naar huis"),
            ("Late Night Rock", "Rauwe rock voor de nacht"),
        ),
        segment_weights=SegmentWeights(0.1, 0.1, 0.2, 0.2, 0.2, 0.15, 0.05),
    ),
    StationProfile(
        id="rnb",
        label="R&B FM",
        frequency="95.1",
        tagline="Smooth vibes, real soul",
        search_terms=(
            "r&b", "soul", "rnb", "neo soul", "contemporary r&b", "urban",
            "Beyoncé", "Frank Ocean", "The Weeknd", "Usher", "Alicia Keys",
            "H.E.R.", "Daniel Caesar", "Summer Walker", "Jhené Aiko",
            "Chris Brown", "Khalid", "Jorja Smith", "Brent Faiyaz",
            "SZA", "Tyla", "Victoria Monét",
        ),
        seed_genres=("r-n-b", "soul", "neo soul"),
        year_range=(2000, CURRENT_YEAR),
        popularity_range=(45, 100),
        rotation_weights=RotationWeights(0.4, 0.35, 0.25),
        dj=DJProfile(
            name="DJ Colette", voice="nl-NL-ColetteNeural", tone="smooth", talkativeness=0.6,
            interjections=("Heerlijk...", "Wat smooth...", "Geniet ervan...", "Prachtig..."),
            rate="-5%",
        ),
        shows=_shows(
            ("Morning Soul", "Zacht wakker worden met soul"),
            ("Afternoon Vibes", "Smooth door de middag"),
            ("Evening R&B", "De beste R&B voor de avond"),
            ("Midnight Soul", "Late night soul sessie"),
        ),
        segment_weights=SegmentWeights(0.15, 0.15, 0.15, 0.15, 0.2, 0.1, 0.1),
    ),
    StationProfile(
        id="jazz",
        label="Jazz FM",
        frequency="97.8",
        tagline="Timeless jazz, endless soul",
        search_terms=(
            "jazz", "smooth jazz", "jazz piano", "jazz vocal", "bossa nova",
            "cool jazz", "bebop", "jazz fusion", "latin jazz",
            "Miles Davis", "John Coltrane", "Bill Evans", "Chet Baker",
            "Nina Simone", "Norah Jones", "Gregory Porter", "Kamasi Washington",
            "Robert Glasper", "Herbie Hancock", "Thelonious Monk",
            "Diana Krall", "Jamie Cullum", "Esperanza Spalding",
        ),
        seed_genres=("jazz", "smooth jazz", "vocal jazz"),
        year_range=(1955, CURRENT_YEAR),
        popularity_range=(25, 100),
        rotation_weights=RotationWeights(0.2, 0.3, 0.5),
        dj=DJProfile(
            name="DJ Maarten", voice="nl-NL-MaartenNeural", tone="smooth", talkativeness=0.4,
            interjections=("Prachtig...", "Wat een klasse...", "Tijdloos...", "Heerlijk..."),
            rate="-10%", pitch="-3Hz",
        ),
        shows=_shows(
            ("Morning Jazz", "Jazz bij je koffie"),
            ("Afternoon Jazz", "Ontspannen jazz voor de middag"),
            ("Jazz Lounge", "Sophisticated sounds"),
            ("Late Night Jazz", "Jazz in het donker"),
        ),
        segment_weights=SegmentWeights(0.1, 0.05, 0.25, 0.1, 0.3, 0.1, 0.1),
    ),
    StationProfile(
        id="hiphop",
        label="Hip-Hop FM",
        frequency="101.3",
        tagline="De hardste beats!",
        search_terms=(
            "hip hop", "rap", "trap", "drill", "boom bap", "conscious hip hop",
            "Kendrick Lamar", "Drake", "Travis Scott", "J. Cole", "Tyler the Creator",
            "Kanye West", "Jay-Z", "Eminem", "A$AP Rocky",
            "21 Savage", "Metro Boomin", "Future", "Lil Baby",
            "JID", "Denzel Curry", "Baby Keem",
        ),
        seed_genres=("hip-hop", "rap", "trap"),
        year_range=(2010, CURRENT_YEAR),
        popularity_range=(50, 100),
        rotation_weights=RotationWeights(0.5, 0.3, 0.2),
        dj=DJProfile(
            name="DJ Maarten", voice="nl-NL-MaartenNeural", tone="edgy", talkativeness=0.6,
            interjections=("Fire!", "Dikke beat!", "Hard!", "Banger!", "Vet nummer!"),
            rate="+3%",
        ),
        shows=_shows(
            ("Wake Up Call", "Bars in de ochtend"),
            ("The Block", "Non-stop hip-hop"),
            ("Rush Hour", "De hardste beats van de dag"),
            ("After Hours", "Late night bars"),
        ),
        segment_weights=SegmentWeights(0.1, 0.15, 0.15, 0.2, 0.15, 0.2, 0.05),
    ),
    StationProfile(
        id="dutch",
        label="NL Hits",
        frequency="104.7",
        tagline="Het beste van Nederland!",
        search_terms=(
            "Nederlandse muziek", "Dutch pop", "Nederlandstalig",
            "Marco Borsato", "Andre Hazes", "Guus Meeuwis", "BLØF",
            "Nielson", "Suzan & Freek", "Davina Michelle", "Snelle",
            "Flemming", "Maan", "Tino Martin", "Nick & Simon",
            "Anouk", "Ilse DeLange", "Acda en de Munnik", "Het Goede Doel",
            "Doe Maar", "Golden Earring", "Volumia", "De Dijk",
        ),
        seed_genres=("dutch pop", "dutch rock", "nederpop"),
        year_range=(1985, CURRENT_YEAR),
        popularity_range=(20, 100),
        rotation_weights=RotationWeights(0.35, 0.3, 0.35),
        dj=DJProfile(
            name="DJ Fenna", voice="nl-NL-FennaNeural", tone="warm", talkativeness=0.7,
            interjections=("Prachtig!", "Genieten!", "Mooi nummer!", "Hollands glorie!", "Fantastisch!"),
        ),
        shows=_shows(
            ("Goedemorgen Nederland", "Wakker worden met Hollandse hits"),
            ("Hollandse Middag", "De gezelligste hits van NL"),
            ("Hollandse Avond", "Nederlandse toppers"),
            ("Stille Nacht", "Rustige Nederlandse muziek"),
        ),
        segment_weights=SegmentWeights(0.2, 0.2, 0.2, 0.1, 0.15, 0.1, 0.05),
    ),
    StationProfile(
        id="classics",
        label="NL Klassiekers",
        frequency="87.2",
        tagline="Tijdloze Nederlandse klassiekers",
        search_terms=(
            "Nederlandse klassiekers", "Dutch classics", "Nederlandstalige hits",
            "Andre Hazes", "Marco Borsato", "Rob de Nijs", "Boudewijn de Groot",
            "Herman Brood", "Golden Earring", "Doe Maar", "Het Goede Doel",
            "Toontje Lansen", "Ramses Shaffy", "Liesbeth List", "Frans Bauer",
            "De Dijk", "Frank Boeijen", "Acda en de Munnik", "Normaal",
            "Klein Orkest", "Volumia", "Jan Smit", "Lee Towers",
        ),
        seed_genres=("dutch pop", "dutch rock", "levenslied"),
        year_range=(1970, 2005),
        popularity_range=(10, 100),
        rotation_weights=RotationWeights(0.0, 0.2, 0.8),
        dj=DJProfile(
            name="DJ Colette", voice="nl-NL-ColetteNeural", tone="warm", talkativeness=0.6,
            interjections=("Tijdloos!", "Wat een klassieker!", "Genieten!", "Herinner je dit nog?", "Prachtig!"),
            rate="-5%",
        ),
        shows=_shows(
            ("Ochtend Klassiekers", "Goedemorgen met goud"),
            ("Gouden Middagen", "De mooiste klassiekers"),
            ("Evergreen Express", "Herinneringen aan vroeger"),
            ("Nacht van de Klassieker", "Stille nacht, gouden platen"),
        ),
        segment_weights=SegmentWeights(0.15, 0.1, 0.25, 0.1, 0.25, 0.1, 0.05),
    ),
    StationProfile(
        id="indie",
        label="Indie FM",
        frequency="99.0",
        tagline="Discover the underground",
        search_terms=(
            "indie", "indie pop", "indie rock", "indie folk", "dream pop",
            "shoegaze", "bedroom pop", "art pop", "lo-fi indie",
            "Tame Impala", "Mac DeMarco", "Phoebe Bridgers", "Bon Iver",
            "Clairo", "beabadoobee", "Alvvays", "Mitski",
            "Men I Trust", "Wallows", "The 1975", "Hozier",
            "Cage the Elephant", "Vampire Weekend", "Glass Animals",
        ),
        seed_genres=("indie pop", "indie rock", "dream pop"),
        year_range=(2010, CURRENT_YEAR),
        popularity_range=(30, 90),
        rotation_weights=RotationWeights(0.45, 0.35, 0.2),
        dj=DJProfile(
            name="DJ Fenna", voice="nl-NL-FennaNeural", tone="chill", talkativeness=0.5,
            interjections=("Mooi...", "Ontdekking!", "Luister...", "Bijzonder...", "Fijn nummer..."),
            rate="-3%",
        ),
        shows=_shows(
            ("Morning Discovery", "Nieuwe sounds voor je ochtend"),
            ("Indie Mix", "Het beste van indie"),
            ("Sunset Sessions", "Indie voor de schemering"),
            ("Midnight Indie", "Stille ontdekkingen"),
        ),
        segment_weights=SegmentWeights(0.1, 0.1, 0.2, 0.15, 0.25, 0.1, 0.1),
    ),
    StationProfile(
        id="dance",
        label="Dance FM",
        frequency="106.5",
        tagline="Non-stop dance energy!",
        search_terms=(
            "dance", "electronic", "EDM", "house", "deep house", "tech house",
            "tropical house", "progressive house", "trance", "drum and bass",
            "Martin Garrix", "Tiësto", "Armin van Buuren", "Afrojack",
            "David Guetta", "Calvin Harris", "Kygo", "Marshmello",
            "Hardwell", "Oliver Heldens", "Sam Feldt", "Lost Frequencies",
            "Nicky Romero", "Don Diablo", "Fedde Le Grand",
        ),
        seed_genres=("edm", "house", "progressive house"),
        year_range=(2015, CURRENT_YEAR),
        popularity_range=(45, 100),
        rotation_weights=RotationWeights(0.55, 0.3, 0.15),
        dj=DJProfile(
            name="DJ Maarten", voice="nl-NL-MaartenNeural", tone="energetic", talkativeness=0.5,
            interjections=("Let's go!", "Banger!", "Drop!", "Hands up!", "Gaan!", "Party!"),
            rate="+8%", pitch="+2Hz",
        ),
        shows=_shows(
            ("Morning Energy", "Wakker worden met beats"),
            ("Afternoon Club", "Non-stop dance hits"),
            ("Pre-Party", "Warm-up voor de avond"),
            ("Nachtclub", "De nacht is van ons"),
        ),
        segment_weights=SegmentWeights(0.05, 0.05, 0.1, 0.25, 0.1, 0.35, 0.1),
    ),
    StationProfile(
        id="chill",
        label="Chill Lounge",
        frequency="108.0",
        tagline="Relax, unwind, enjoy",
        search_terms=(
            "chill", "lounge", "ambient pop", "chillout", "downtempo",
            "trip hop", "lo-fi", "soft pop", "acoustic chill",
            "Khruangbin", "FKJ", "Tom Misch", "Jordan Rakei",
            "Bonobo", "Tycho", "Norah Jones", "Jack Johnson",
            "Ben Howard", "José González", "Mazzy Star",
            "Zero 7", "Air", "Massive Attack", "Nightmares on Wax",
        ),
        seed_genres=("chill", "ambient", "trip-hop"),
        year_range=(2000, CURRENT_YEAR),
        popularity_range=(20, 85),
        rotation_weights=RotationWeights(0.3, 0.35, 0.35),
        dj=DJProfile(
            name="DJ Colette", voice="nl-NL-ColetteNeural", tone="chill", talkativeness=0.35,
            interjections=("Heerlijk relaxt...", "Rustig aan...", "Geniet...", "Mm...", "Zen..."),
            rate="-10%", pitch="-2Hz",
        ),
        shows=_shows(
            ("Slow Morning", "Rustig de dag beginnen"),
            ("Afternoon Zen", "Ontspanning midden op de dag"),
            ("Sunset Chill", "Zonsondergang sessie"),
            ("Deep Night", "Stille uren, zachte klanken"),
        ),
        segment_weights=SegmentWeights(0.2, 0.05, 0.15, 0.1, 0.25, 0.05, 0.2),
    ),
)

_BY_ID = {s.id: s for s in STATIONS}


def get_station(station_id: Optional[str]) -> StationProfile:
    """Look up a station by id. Unknown ids fall back to the first station."""
    return _BY_ID.get((station_id or "").lower(), STATIONS[0])


def time_of_day(now: Optional[datetime] = None) -> str:
    h = (now or datetime.now()).hour
    if 6 <= h < 12:
        return "morning"
    if 12 <= h < 18:
        return "afternoon"
    if 18 <= h < 23:
        return "evening"
    return "night"


def current_show(station: StationProfile, now: Optional[datetime] = None) -> Show:
    return station.show(time_of_day(now))
