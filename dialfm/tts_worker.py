"""Standalone TTS worker — run as a subprocess by the synthesis service.

    python -m dialfm.tts_worker [args.json]

Reads {text, voice, outputPath, rate, pitch} from the args file (deleted
right after reading) or from stdin, renders MP3 with edge-tts, prints "OK".
Exits non-zero on any failure.
"""
import asyncio
import json
import re
import sys
from pathlib import Path

import edge_tts

_CONTROL = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def read_args(argv: list[str]) -> dict:
    if len(argv) > 1:
        path = Path(argv[1])
        raw = path.read_text(encoding="utf-8")
        path.unlink(missing_ok=True)
    else:
        raw = sys.stdin.read()
    return json.loads(raw)


def edge_rate(rate: str) -> str:
    return "+0%" if not rate or rate == "default" else rate


def edge_pitch(pitch: str) -> str:
    return "+0Hz" if not pitch or pitch == "default" else pitch


async def render(args: dict):
    text = _CONTROL.sub("", args.get("text", "")).replace("\\", "").strip()
    if not text:
        raise ValueError("Empty text after sanitization")
    output = args.get("outputPath")
    if not output:
        raise ValueError("No outputPath given")

    communicate = edge_tts.Communicate(
        text,
        args.get("voice") or "nl-NL-FennaNeural",
        rate=edge_rate(args.get("rate", "")),
        pitch=edge_pitch(args.get("pitch", "")),
    )
    await communicate.save(output)


def main(argv: list[str] | None = None) -> int:
    try:
        args = read_args(argv if argv is not None else sys.argv)
        asyncio.run(render(args))
    except Exception as e:
        print(str(e) or e.__class__.__name__, file=sys.stderr)
        return 1
    print("OK")
    return 0


if __name__ == "__main__":
    sys.exit(main())
