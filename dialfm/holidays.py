"""Dutch holidays — fixed dates + Easter, each with a few DJ lines."""
import random
from datetime import date
from typing import NamedTuple, Optional


class Holiday(NamedTuple):
    name: str
    dj_lines: tuple[str, ...]


def easter(year: int) -> date:
    """Gregorian Easter Sunday (Meeus/Jones/Butcher)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


_FIXED: dict[tuple[int, int], Holiday] = {
    (1, 1): Holiday("Nieuwjaarsdag", (
        "Gelukkig Nieuwjaar! Wat een geweldig begin van het jaar!",
        "Nieuwjaarsdag! Tijd voor goede voornemens en goede muziek!",
        "Het nieuwe jaar is begonnen, en wij beginnen met een knaller!",
    )),
    (2, 14): Holiday("Valentijnsdag", (
        "Happy Valentijnsdag! Speciaal voor jou en je lief!",
        "Valentijn! Een dag vol liefde en romantische muziek!",
    )),
    (4, 26): Holiday("Koningsnacht", (
        "Koningsnacht! De nacht voor het grote feest!",
        "Vanavond gaat het los! Koningsnacht, baby!",
    )),
    (4, 27): Holiday("Koningsdag", (
        "Lang leve de Koning! Gelukkige Koningsdag!",
        "Koningsdag! Alles oranje, alles feest!",
        "Het is Koningsdag! Tijd voor oranje, bier en de beste muziek!",
        "Oranje boven, oranje boven! Gelukkige Koningsdag!",
    )),
    (5, 4): Holiday("Dodenherdenking", (
        "Vandaag herdenken we de gevallenen. Even stil en dankbaar.",
        "4 mei, een moment van bezinning.",
    )),
    (5, 5): Holiday("Bevrijdingsdag", (
        "Gelukkige Bevrijdingsdag! Vrijheid is niet vanzelfsprekend.",
        "5 mei, een dag van vrijheid en feest!",
        "Bevrijdingsdag! We vieren onze vrijheid met de beste muziek!",
    )),
    (12, 5): Holiday("Sinterklaas", (
        "Sint is in het land! Heb je je schoen al gezet?",
        "Pakjesavond! Wie heeft er een liedje?",
        "Sinterklaasavond! De spanning is te snijden!",
    )),
    (12, 31): Holiday("Oudejaarsavond", (
        "Oudejaarsavond! Nog even en dan is het nieuw jaar!",
        "Het laatste nummer van het jaar, of toch niet?",
        "We sluiten het jaar af met de allerbeste muziek!",
    )),
}

_CHRISTMAS = Holiday("Kerst", (
    "Vrolijk Kerstfeest! Geniet van de feestdagen!",
    "Kerst! De mooiste tijd van het jaar, met de mooiste muziek!",
    "Eerste Kerstdag, gezelligheid troef. Fijne feestdagen!",
))
_FIXED[(12, 25)] = _CHRISTMAS
_FIXED[(12, 26)] = _CHRISTMAS

_EASTER = Holiday("Pasen", (
    "Vrolijk Pasen! Geniet van het paasontbijt!",
    "Eerste Paasdag! De lentekriebels zijn begonnen!",
))


def holiday_for(day: Optional[date] = None) -> Optional[Holiday]:
    day = day or date.today()
    fixed = _FIXED.get((day.month, day.day))
    if fixed:
        return fixed
    if day == easter(day.year):
        return _EASTER
    return None


def holiday_line(day: Optional[date] = None, rng: Optional[random.Random] = None) -> Optional[str]:
    holiday = holiday_for(day)
    if not holiday:
        return None
    return (rng or random).choice(holiday.dj_lines)
