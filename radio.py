"""dialfm — entry point.

    python radio.py serve [--host H] [--port P]
    python radio.py stations
    python radio.py voices
    python radio.py parse "jaren 80"
    python radio.py script pop intro
    python radio.py say "Goedemorgen!" --out hello.mp3
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from rich.logging import RichHandler

from dialfm.config import WEB_HOST, WEB_PORT, DEV_MODE
from dialfm.errors import RadioError, format_error
from dialfm.request_parser import parse_request
from dialfm.scheduler import SEGMENT_TYPES
from dialfm.scripts import generate_script
from dialfm.stations import STATIONS
from dialfm.synthesis import VOICES, SpeechSynthesizer, sanitize
from dialfm.ui import (
    console,
    print_header,
    print_request,
    print_script,
    print_serving,
    print_stations,
    print_voices,
)

logger = logging.getLogger("dialfm")


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=DEV_MODE, show_path=False)],
    )


def cmd_serve(args) -> int:
    import uvicorn
    from dialfm.web.server import create_app

    print_serving(args.host, args.port)
    uvicorn.run(create_app(), host=args.host, port=args.port, log_config=None)
    return 0


def cmd_stations(args) -> int:
    print_stations()
    return 0


def cmd_voices(args) -> int:
    print_voices(VOICES)
    return 0


def cmd_parse(args) -> int:
    text = " ".join(args.text)
    print_request(text, parse_request(text))
    return 0


def cmd_script(args) -> int:
    markup = generate_script(args.station, args.segment)
    print_script(args.segment, markup, sanitize(markup))
    return 0


async def _say(args) -> int:
    synth = SpeechSynthesizer()
    with console.status("  [yellow]✦  Synthesizing...[/yellow]", spinner="dots"):
        result = await synth.synthesize(args.text, voice=args.voice, rate=args.rate, pitch=args.pitch)
    out = Path(args.out)
    out.write_bytes(result.audio)
    console.print(f"  [green]✓[/green] {len(result.audio) // 1024} KB → [bold]{out}[/bold]")
    return 0


def cmd_say(args) -> int:
    try:
        return asyncio.run(_say(args))
    except RadioError as e:
        console.print(f"  [red]✗[/red] {format_error('speech', args.text, {'voice': args.voice}, str(e))}")
        return 1


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="dialfm", description="Personal radio engine with a synthesized DJ")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("serve", help="run the HTTP/WebSocket server")
    s.add_argument("--host", default=WEB_HOST)
    s.add_argument("--port", type=int, default=WEB_PORT)
    s.set_defaults(func=cmd_serve)

    s = sub.add_parser("stations", help="list stations")
    s.set_defaults(func=cmd_stations)

    s = sub.add_parser("voices", help="list DJ voices")
    s.set_defaults(func=cmd_voices)

    s = sub.add_parser("parse", help="show how a listener request is understood")
    s.add_argument("text", nargs="+")
    s.set_defaults(func=cmd_parse)

    s = sub.add_parser("script", help="print a DJ script for a station segment")
    s.add_argument("station", choices=[st.id for st in STATIONS])
    s.add_argument("segment", choices=SEGMENT_TYPES)
    s.set_defaults(func=cmd_script)

    s = sub.add_parser("say", help="synthesize text to an MP3 file")
    s.add_argument("text")
    s.add_argument("--voice", default=None)
    s.add_argument("--rate", default=None)
    s.add_argument("--pitch", default=None)
    s.add_argument("--out", default="dj.mp3")
    s.set_defaults(func=cmd_say)
    return p


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)
    print_header()
    return args.func(args)


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        console.print("\n  [dim]Signing off.[/dim]\n")
