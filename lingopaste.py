"""LingoPaste console client.

Create a paste from a text file, or open a paste and print it in a chosen language:

    python lingopaste.py create notes.txt --tone friendly
    python lingopaste.py view aB3dE6gH --lang fr --mode side-by-side

Settings are read from lingopaste.ini when present; built-in defaults are used otherwise.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Final, NoReturn

from config.loader import ConfigLoader, ConfigLoaderError
from core.clients.interface import PasteClientError
from core.shared_data import SharedData
from core.view.controller import UnsupportedLanguageError
from models.paste_models import LANGUAGE_NAMES, Tone
from models.view_models import ViewMode, ViewStatus
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    from core.view.controller import ViewController
    from models.config_models import Config
    from models.paste_models import CreatePasteResponse
    from models.view_models import ViewSnapshot

CFG_FILE: Final[str] = "lingopaste.ini"
VERSION: Final[str] = "1.0.0"
EXIT_FAILURE: Final[int] = 1


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv (list[str] | None): Arguments to parse. None uses ``sys.argv``.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    parser = _ArgumentParser(
        description="Share text and read it in any language",
        epilog="Example: python lingopaste.py view aB3dE6gH --lang fr",
    )
    parser.add_argument("--config", dest="config", default=CFG_FILE, metavar="FILE", help="INI file to read")
    parser.add_argument("--api-url", dest="api_url", metavar="URL", help="Override the paste service URL")
    parser.add_argument("--debug", dest="debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    commands = parser.add_subparsers(dest="command", required=True)

    create = commands.add_parser("create", help="Create a paste from a text file ('-' reads stdin)")
    create.add_argument("file", metavar="FILE")
    create.add_argument("--tone", choices=[tone.value for tone in Tone], default=None)

    view = commands.add_parser("view", help="Print a paste")
    view.add_argument("paste_id", metavar="PASTE_ID")
    view.add_argument("--lang", dest="lang", metavar="LANG", help="Language to display")
    view.add_argument("--mode", choices=[mode.value for mode in ViewMode], default=ViewMode.TRANSLATION.value)
    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> Config:
    """Load the configuration file and apply CLI overrides.

    Raises:
        ConfigLoaderError: If the configuration file is invalid.
    """
    script_name: str = Path(sys.argv[0]).stem
    overrides: dict[str, object] = {
        "api_url": args.api_url,
        "lang": getattr(args, "lang", None),
        "debug": args.debug,
    }
    return ConfigLoader(
        config_filename=args.config, script_name=script_name, allow_missing=args.config == CFG_FILE, **overrides
    ).config


def read_content(file: str) -> str:
    if file == "-":
        return sys.stdin.read()
    return Path(file).read_text(encoding="utf-8")


def render(snapshot: ViewSnapshot) -> str:
    """Format a ready view as plain text."""
    lines: list[str] = []
    if snapshot.is_machine_translated:
        lines.append("! This is a machine-generated translation that may be inaccurate")
    for pane in snapshot.panes:
        name: str = LANGUAGE_NAMES.get(pane.language, pane.language)
        lines.extend((f"== {pane.title} [{name}] ==", pane.text, ""))
    languages: str = ", ".join(snapshot.available_languages)
    lines.append(f"Available: {languages}")
    return "\n".join(lines)


async def run_create(shared: SharedData, args: argparse.Namespace) -> int:
    content: str = read_content(args.file)
    response: CreatePasteResponse = await shared.paste_store.create(content, args.tone)
    print(f"Paste created: {response.paste_id} (language: {response.original_language})")
    return 0


async def run_view(shared: SharedData, args: argparse.Namespace) -> int:
    view: ViewController = shared.create_view(args.paste_id)
    try:
        snapshot: ViewSnapshot = await view.enter()
        if snapshot.status is ViewStatus.FAILED:
            print(f"Error: {snapshot.error}", file=sys.stderr)
            return EXIT_FAILURE

        if args.lang:
            await view.select_language(args.lang)
        view.set_mode(args.mode)

        snapshot = view.snapshot()
        print(render(snapshot))
        if snapshot.transient_error is not None:
            error = snapshot.transient_error
            print(f"\nTranslation into '{error.language}' failed: {error.message}", file=sys.stderr)
            return EXIT_FAILURE
        return 0
    finally:
        await view.close()


async def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        int: Process exit status.
    """
    args: argparse.Namespace = parse_arguments(argv)
    try:
        config: Config = load_config(args)
    except ConfigLoaderError as err:
        print("\nError: Failed to load configuration file.", file=sys.stderr)
        print(f"Details: {err}", file=sys.stderr)
        return EXIT_FAILURE

    log_file: str = config.GENERAL.LOG_FILE.strip()
    logger_utils = LoggerUtils(Path(log_file).resolve() if log_file else "")
    if config.GENERAL.DEBUG:
        logger_utils.set_level("DEBUG")

    shared = SharedData(config)
    await shared.async_init()
    try:
        if args.command == "create":
            return await run_create(shared, args)
        return await run_view(shared, args)
    except (PasteClientError, UnsupportedLanguageError, OSError) as err:
        print(f"Error: {err}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        await shared.close()


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nCancelled by user.", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    run()
