"""Module 9 — DJ script generator (tone-aware Dutch phrase banks)"""
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .holidays import holiday_line
from .models import NewsArticle, Track, WeatherSnapshot
from .prosody import render
from .stations import StationProfile, get_station, time_of_day

logger = logging.getLogger(__name__)

# ── Tone-specific phrase banks ────────────────────────────────────────────────

TONE_PHRASES: dict[str, dict[str, tuple[str, ...]]] = {
    "energetic": {
        "filler": (
            "Wow, wat een nummer!", "Bam! Daar ging ie!", "Jaaa, lekker hoor!",
            "Wauw!", "Top nummer dit!", "Vol gas!", "Daar word je blij van!",
            "We gaan lekker door!", "Banger!", "Dit is waar het om draait!",
        ),
        "transition": (
            "En we gaan volle kracht verder met", "Het volgende nummer, gaan!",
            "Hier komt ie!", "Nog een dikke plaat, van",
            "Non-stop hits, hier is", "Party time met",
            "We draaien door met", "Speciaal voor jullie,",
        ),
        "station_id": (
            "Je luistert naar {station}, non-stop de beste hits!",
            "{station}! De muziek die je energie geeft!",
            "Dit is {station}, wij stoppen nooit!",
            "{station}, nummer 1 voor de beste beats!",
        ),
        "fun_fact": (
            "Even een leuk feitje tussendoor!", "Check dit even!",
            "Weetje van de dag!", "Interessant feitje!",
        ),
    },
    "chill": {
        "filler": (
            "Mooi... echt mooi.", "Heerlijk om naar te luisteren.",
            "Geniet ervan...", "Rustig aan, genieten...",
            "Wat een fijn nummer...", "Mm, dit is goed...",
            "Ontspannen...", "Lekker rustig...",
        ),
        "transition": (
            "En we gaan rustig verder met", "Het volgende nummer is van",
            "Luister nu naar", "Even lekker doorluisteren met",
            "Nog meer moois, van", "Rustig aan, hier is",
        ),
        "station_id": (
            "Je luistert naar {station}... ontspannen en genieten.",
            "{station}. Muziek voor de ziel.",
            "Dit is {station}, rustig aan en genieten.",
            "{station}... relax en luister.",
        ),
        "fun_fact": (
            "Even een rustig momentje voor een leuk feitje.", "Wist je dit al?",
            "Zomaar een feitje...", "Interessant...",
        ),
    },
    "warm": {
        "filler": (
            "Prachtig toch?", "Genieten!", "Fantastisch nummer!",
            "Altijd mooi om te horen!", "Geweldig!", "Ik krijg er kippenvel van!",
            "Daar word je toch blij van?", "Wat een mooi nummer was dat!",
        ),
        "transition": (
            "En we gaan verder met", "Het volgende nummer is van",
            "Nu voor jullie", "En dan nu",
            "Speciaal voor jullie luisteraars", "We draaien nu",
            "Dit wordt ook weer een topper, hier is",
        ),
        "station_id": (
            "Je luistert naar {station}, de muziek die bij jou past!",
            "{station}, jouw favoriete radiozender!",
            "Welkom bij {station}, wij draaien door!",
            "{station}, altijd de lekkerste muziek!",
        ),
        "fun_fact": (
            "Wist je dit al? Even een leuk feitje!", "Even een weetje tussendoor!",
            "Hier heb je een leuk feitje!", "Aandacht, een leuk weetje!",
        ),
    },
    "smooth": {
        "filler": (
            "Heerlijk...", "Wat smooth...", "Geniet ervan...",
            "Prachtig nummer...", "Klasse...", "Dat was schitterend...",
            "Wat een kwaliteit...", "Tijdloos mooi...",
        ),
        "transition": (
            "En nu, voor jullie", "Het volgende nummer,",
            "Luister naar dit prachtige nummer van", "Nog meer moois,",
            "We gaan door met", "Hier is", "Even genieten van",
        ),
        "station_id": (
            "Je luistert naar {station}. Kwaliteit in muziek.",
            "{station}... voor de fijnproevers.",
            "Dit is {station}, muziek met klasse.",
            "{station}. Alleen het beste.",
        ),
        "fun_fact": (
            "Even een mooi feitje.", "Wist je dit?",
            "Een stukje kennis tussendoor.", "Bijzonder feitje...",
        ),
    },
    "edgy": {
        "filler": (
            "Vet!", "Hard!", "Dikke plaat!", "Fire!",
            "Beuken!", "Lekker rauw!", "Daar gaat ie!",
            "Rock on!", "Banger alert!",
        ),
        "transition": (
            "En we pakken door met", "Nog eentje, van",
            "Check dit, van", "Hard gaan met",
            "Next up,", "Hier komt ie, van", "Volume omhoog voor",
        ),
        "station_id": (
            "{station}! De hardste beats!",
            "Je luistert naar {station}, recht uit de underground!",
            "Dit is {station}, harder dan hard!",
            "{station}! Wij gaan door tot het einde!",
        ),
        "fun_fact": (
            "Even een vet feitje!", "Check dit!",
            "Random fact!", "Wist je dit?",
        ),
    },
}

GENRE_FUN_FACTS: dict[str, tuple[str, ...]] = {
    "default": (
        "Wist je dat Nederland meer fietsen heeft dan inwoners? Zo'n 23 miljoen fietsen!",
        "Wist je dat de eerste radio-uitzending in Nederland plaatsvond in 1919?",
        "Wist je dat muziek luisteren stress tot 65 procent kan verminderen?",
        "Wist je dat het luisteren naar muziek dezelfde stofjes aanmaakt als chocolade eten?",
        "Wist je dat Amsterdam meer bruggen heeft dan Venetie?",
        "Wist je dat stroopwafels oorspronkelijk uit Gouda komen?",
        "Wist je dat Nederland de grootste bloemexporteur ter wereld is?",
        "Wist je dat het woord gezellig niet te vertalen is naar het Engels?",
    ),
    "jazz": (
        "Wist je dat Miles Davis het album Kind of Blue in slechts twee sessies opnam?",
        "Wist je dat het woord jazz waarschijnlijk uit New Orleans komt?",
        "Wist je dat John Coltrane soms 12 uur per dag oefende op zijn saxofoon?",
        "Wist je dat jazz de enige muziekvorm is die echt in Amerika is ontstaan?",
        "Wist je dat de eerste jazzopname werd gemaakt in 1917?",
    ),
    "rock": (
        "Wist je dat de eerste elektrische gitaar werd uitgevonden in 1931?",
        "Wist je dat Golden Earring met Radar Love een van de langste hits ooit had?",
        "Wist je dat Led Zeppelin nooit singles uitbracht in het Verenigd Koninkrijk?",
        "Wist je dat de langste rockconcert ooit 437 uur duurde?",
        "Wist je dat Jimi Hendrix zichzelf gitaar leerde spelen?",
    ),
    "hiphop": (
        "Wist je dat hip-hop in 1973 begon op een feestje in de Bronx?",
        "Wist je dat Rapper's Delight van The Sugarhill Gang de eerste grote hip-hop hit was?",
        "Wist je dat DJ Kool Herc wordt beschouwd als de vader van hip-hop?",
        "Wist je dat beatboxing al sinds de jaren 80 bestaat?",
        "Wist je dat het woord rap eigenlijk staat voor Rhythm And Poetry?",
    ),
    "dutch": (
        "Wist je dat Andre Hazes de bestverkochte Nederlandse artiest aller tijden is?",
        "Wist je dat het Eurovisie Songfestival voor het eerst in Nederland werd gehouden in 1958?",
        "Wist je dat Marco Borsato meer dan 5 miljoen albums heeft verkocht?",
        "Wist je dat BLØF het langst actieve popgroep van Nederland is?",
        "Wist je dat het Concertgebouw in Amsterdam een van de beste akoestieken ter wereld heeft?",
    ),
    "dance": (
        "Wist je dat Nederland het land is van de grootste DJ's ter wereld?",
        "Wist je dat Tiesto de eerste DJ was die op de Olympische Spelen draaide?",
        "Wist je dat Amsterdam Dance Event het grootste dancefeest ter wereld is?",
        "Wist je dat Martin Garrix slechts 17 was toen Animals een wereldhit werd?",
        "Wist je dat de TR-808 drumcomputer het geluid van dance muziek definieerde?",
    ),
}

TIME_ADVICE = {
    "morning": ("Een mooie start van de dag!", "Geniet van je ochtend!", "Nog even doorzetten naar de lunch!"),
    "afternoon": ("De middag is al weer begonnen!", "Lekker doorwerken met goede muziek!", "De middag vliegt voorbij!"),
    "evening": ("Geniet van je avond!", "Lekker relaxen met muziek!", "De avond is van jou!"),
    "night": ("Nog even wakker? Geniet van de muziek!", "Nachtbrakers, deze is voor jullie!", "De nacht is nog jong!"),
}

GREETINGS = {
    "morning": "Goedemorgen",
    "afternoon": "Goedemiddag",
    "evening": "Goedenavond",
    "night": "Goedenacht",
}

_WEATHER_NL = {
    "clear sky": "Heldere lucht", "few clouds": "Licht bewolkt",
    "scattered clouds": "Gedeeltelijk bewolkt", "broken clouds": "Zwaar bewolkt",
    "shower rain": "Buien", "rain": "Regen", "thunderstorm": "Onweer",
    "snow": "Sneeuw", "mist": "Mist", "overcast clouds": "Geheel bewolkt",
    "light rain": "Lichte regen", "moderate rain": "Matige regen",
    "heavy intensity rain": "Hevige regen", "light snow": "Lichte sneeuw",
    "drizzle": "Motregen", "haze": "Nevel", "fog": "Dichte mist",
}

_REQUEST_ACKS = (
    "Komt voor elkaar! {label}, speciaal voor jou.",
    "Goed verzoek! We gaan voor {label}.",
    "Daar hou ik van! {label} komt eraan.",
    "Je vraagt, wij draaien. {label}!",
)


def translate_weather(description: str) -> str:
    return _WEATHER_NL.get(description.lower(), description)


@dataclass
class ScriptContext:
    previous_track: Optional[Track] = None
    next_track: Optional[Track] = None
    weather: Optional[WeatherSnapshot] = None
    news: list[NewsArticle] = field(default_factory=list)
    user_name: Optional[str] = None


class ScriptBuilder:
    """Builds the plain-text parts for one segment; render() adds prosody."""

    def __init__(self, station: StationProfile, rng: Optional[random.Random] = None, now: Optional[datetime] = None):
        self.station = station
        self.rng = rng or random.Random()
        self.now = now or datetime.now()
        self.tod = time_of_day(self.now)
        self.phrases = TONE_PHRASES[station.dj.tone]
        self.show = station.show(self.tod)

    def pick(self, options):
        return self.rng.choice(options)

    def phrase(self, bank: str) -> str:
        return self.pick(self.phrases[bank])

    @property
    def clock(self) -> str:
        return self.now.strftime("%H:%M")

    def fun_fact(self) -> str:
        return self.pick(GENRE_FUN_FACTS.get(self.station.id, GENRE_FUN_FACTS["default"]))

    def interjection(self) -> str:
        return self.pick(self.station.dj.interjections)

    def names(self, ctx: ScriptContext) -> list[str]:
        out = [self.station.label, self.station.dj.name, self.show.name]
        for track in (ctx.previous_track, ctx.next_track):
            if track:
                out.append(track.name)
                out.extend(a.name for a in track.artists)
        return out

    def parts(self, segment: str, ctx: ScriptContext) -> list[str]:
        build = getattr(self, f"_{segment}", None)
        if build is None:
            raise ValueError(f"Unknown segment type: {segment}")
        return build(ctx)

    # ── Segments ──────────────────────────────────────────────────────────────

    def _intro(self, ctx: ScriptContext) -> list[str]:
        s = self.station
        greeting = GREETINGS[self.tod]
        if ctx.user_name:
            greeting = f"{greeting} {ctx.user_name}"
        parts = [
            f"{greeting}! Je luistert naar {self.show.name} op {s.label} met {s.dj.name}.",
            f"Het is {self.clock} en we hebben weer geweldige muziek voor je klaarstaan.",
            self.pick(TIME_ADVICE[self.tod]),
        ]
        line = holiday_line(self.now.date(), self.rng)
        if line:
            parts.append(line)
        if self.rng.random() < 0.2:
            parts.append(f"Even een leuk weetje tussendoor: {self.fun_fact()}")
        nxt = ctx.next_track
        if nxt:
            parts.append(f"We beginnen met {nxt.name} van {nxt.primary_artist}. {self.interjection()}")
        return parts

    def _between(self, ctx: ScriptContext) -> list[str]:
        parts = []
        prev, nxt = ctx.previous_track, ctx.next_track
        if prev:
            parts.append(f"{self.phrase('filler')} Dat was {prev.name} van {prev.primary_artist}.")
        if self.rng.random() < 0.2:
            line = holiday_line(self.now.date(), self.rng)
            if line:
                parts.append(line)
        if self.rng.random() < 0.3:
            parts.append(f"Het is inmiddels {self.clock} op {self.station.label}.")
        if self.rng.random() < 0.15:
            parts.append(f"Wist je dat trouwens? {self.fun_fact()}")
        if nxt:
            parts.append(f"{self.phrase('transition')} {nxt.name}, van {nxt.primary_artist}.")
        return parts

    def _weather(self, ctx: ScriptContext) -> list[str]:
        parts = []
        prev, nxt, w = ctx.previous_track, ctx.next_track, ctx.weather
        if prev:
            parts.append(f"Dat was {prev.name} van {prev.primary_artist}.")
        parts.append("Even het weer.")
        if w:
            parts.append(f"Het is momenteel {round(w.temperature)} graden in {w.city}. {translate_weather(w.description)}.")
            if w.wind_speed and w.wind_speed > 10:
                parts.append(
                    f"Het waait behoorlijk met windsnelheden rond de {round(w.wind_speed)} kilometer per uur."
                )
        else:
            parts.append("Helaas geen weersinformatie beschikbaar op dit moment.")
        if nxt:
            parts.append(f"Maar eerst, {self.phrase('transition').lower()} {nxt.name} van {nxt.primary_artist}.")
        return parts

    def _weather_full(self, ctx: ScriptContext) -> list[str]:
        w = ctx.weather
        parts = ["Tijd voor het weerbericht."]
        if not w:
            parts.append("Helaas is het weerbericht even niet beschikbaar.")
            return parts
        temp = round(w.temperature)
        parts.append(f"Het weerbericht voor {w.city} en omgeving.")
        if w.feels_like is not None:
            parts.append(f"Het is momenteel {temp} graden, en het voelt als {round(w.feels_like)} graden.")
        else:
            parts.append(f"Het is momenteel {temp} graden.")
        parts.append(f"{translate_weather(w.description)}.")
        if w.humidity is not None:
            parts.append(f"De luchtvochtigheid is {w.humidity} procent.")
        if w.wind_speed:
            parts.append(f"De wind waait met {round(w.wind_speed)} kilometer per uur.")
        if temp < 5:
            parts.append("Trek je warme jas aan vandaag!")
        elif temp > 25:
            parts.append("Vergeet je zonnebrand niet!")
        elif "rain" in w.description.lower():
            parts.append("Neem een paraplu mee voor de zekerheid!")
        parts.append("Dat was het weerbericht.")
        return parts

    def _news(self, ctx: ScriptContext) -> list[str]:
        parts = []
        prev, nxt = ctx.previous_track, ctx.next_track
        if prev:
            parts.append(f"{self.phrase('filler')} Dat was {prev.name}.")
        parts.append("Even het laatste nieuws.")
        if ctx.news:
            article = self.pick(ctx.news)
            parts.append(f"{article.title}.")
            if article.description:
                parts.append(f"{article.description.split('.')[0]}.")
        if nxt:
            parts.append(
                f"En we gaan verder met muziek. {self.phrase('transition')} {nxt.name} van {nxt.primary_artist}."
            )
        return parts

    def _news_full(self, ctx: ScriptContext) -> list[str]:
        label = self.station.label
        parts = ["Het is tijd voor het nieuws.", f"Het nieuws van {self.clock} op {label}."]
        if not ctx.news:
            parts.append("Er is op dit moment geen nieuws beschikbaar.")
            return parts
        ordinals = ("Eerste bericht", "Verder in het nieuws", "En tot slot")
        for ordinal, article in zip(ordinals, ctx.news[:3]):
            parts.append(f"{ordinal}: {article.title}.")
            if article.description:
                short = ".".join(article.description.split(".")[:2]).strip()
                if short:
                    parts.append(f"{short}.")
        parts.append(f"Dat was het nieuws op {label}.")
        return parts

    def _time(self, ctx: ScriptContext) -> list[str]:
        parts = [
            f"Het is {self.clock} op {self.station.label}. {self.phrase('filler')}",
            self.pick(TIME_ADVICE[self.tod]),
        ]
        nxt = ctx.next_track
        if nxt:
            parts.append(f"{self.phrase('transition')} {nxt.name} van {nxt.primary_artist}.")
        return parts

    def _station_id(self, ctx: ScriptContext) -> list[str]:
        return [self.phrase("station_id").replace("{station}", self.station.label)]

    def _fun_fact(self, ctx: ScriptContext) -> list[str]:
        parts = [self.phrase("fun_fact"), self.fun_fact()]
        nxt = ctx.next_track
        if nxt:
            parts.append(
                f"Maar we gaan weer verder met muziek! {self.phrase('transition')} {nxt.name} van {nxt.primary_artist}."
            )
        return parts

    def _song_intro(self, ctx: ScriptContext) -> list[str]:
        nxt = ctx.next_track
        if not nxt:
            return []
        artist = nxt.primary_artist
        intros = (
            f"En nu, speciaal voor jullie, {nxt.name} van {artist}. Van het album {nxt.album_name}. {self.interjection()}",
            f"Hier is ie dan, {artist} met {nxt.name}!",
            f"{self.phrase('filler')} {artist}, {nxt.name}!",
            f"Dit nummer doet het geweldig, hier is {artist} met {nxt.name}!",
        )
        return [self.pick(intros)]

    def _jingle(self, ctx: ScriptContext) -> list[str]:
        s = self.station
        return [self.pick((
            f"{s.label}!",
            f"{s.label}, {s.tagline.lower()}",
            f"Non-stop muziek op {s.label}!",
            f"{s.label}, altijd aan!",
        ))]

    def _outro(self, ctx: ScriptContext) -> list[str]:
        part_of_day = {"morning": "dag", "night": "nacht"}.get(self.tod, "avond")
        return [
            f"Dat was het weer voor nu op {self.station.label}. Bedankt voor het luisteren en tot de volgende keer! "
            f"{self.station.dj.name} wenst je een fijne {part_of_day}!"
        ]


def generate_script(
    station_id: str,
    segment: str,
    ctx: Optional[ScriptContext] = None,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> str:
    """Marked-up speech for one segment. Empty string when there's nothing to say."""
    station = get_station(station_id)
    ctx = ctx or ScriptContext()
    builder = ScriptBuilder(station, rng, now)
    parts = builder.parts(segment, ctx)
    return render(parts, station.dj.tone, builder.names(ctx), builder.rng)


def generate_segments(
    station_id: str,
    segment: str,
    ctx: Optional[ScriptContext] = None,
    prepend_jingle: bool = False,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> list[tuple[str, str]]:
    """[(segment_type, script), ...] for one DJ break, jingle first when asked."""
    rng = rng or random.Random()
    out = []
    if prepend_jingle and segment not in ("jingle", "station_id"):
        out.append(("jingle", generate_script(station_id, "jingle", ctx, rng, now)))
    script = generate_script(station_id, segment, ctx, rng, now)
    if script:
        out.append((segment, script))
    return out


def request_acknowledgement(station_id: str, label: str, rng: Optional[random.Random] = None) -> str:
    station = get_station(station_id)
    rng = rng or random.Random()
    text = rng.choice(_REQUEST_ACKS).format(label=label)
    return render([text], station.dj.tone, [label], rng)
