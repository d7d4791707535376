"""
Tabula CLI - Command-line interface for the engine.

Usage:
    tabula validate <config_file>          Validate a config document
    tabula export-memory [-o FILE]         Write the memory game document as JSON
    tabula play-memory [--seed N]          Play the memory game with two bots
"""

import argparse
import json
import logging
import os
import sys

TABULA_LOG_LEVEL = os.getenv("TABULA_LOG_LEVEL", "WARNING")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Tabula - Declarative Card Game Rule Engine",
        prog="tabula",
    )
    parser.add_argument("--log-level", default=TABULA_LOG_LEVEL, help="Logging level")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a config document")
    validate_parser.add_argument("config_file", help="Path to JSON config file")

    # Export command
    export_parser = subparsers.add_parser("export-memory", help="Write the memory game document")
    export_parser.add_argument("--output", "-o", help="Output file (default: stdout)")

    # Memory quick start
    memory_parser = subparsers.add_parser("play-memory", help="Play the memory game with bots")
    memory_parser.add_argument("--seed", type=int, default=None, help="Shuffle seed")
    memory_parser.add_argument("--max-actions", type=int, default=200, help="Safety limit")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "validate":
        return cmd_validate(args)
    elif args.command == "export-memory":
        return cmd_export_memory(args)
    elif args.command == "play-memory":
        return cmd_play_memory(args)
    else:
        parser.print_help()
        return 1


def cmd_validate(args):
    """Validate a config document."""
    from .config_schema import load_config_file, validate_config
    from .errors import ConfigValidationError

    print(f"Validating: {args.config_file}")
    try:
        config = load_config_file(args.config_file, validate=False)
    except FileNotFoundError:
        print(f"Error: File not found: {args.config_file}")
        return 1
    except ConfigValidationError as e:
        print("\nErrors:")
        for error in e.errors:
            print(f"  - {error}")
        return 1

    result = validate_config(config)

    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        return 1

    print(f"\nConfig '{config.game_id}' is valid")
    return 0


def cmd_export_memory(args):
    """Write the bundled memory game document."""
    from .games.memory import memory_document

    text = json.dumps(memory_document(), indent=2)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        print(f"Wrote {args.output}")
    else:
        print(text)
    return 0


def cmd_play_memory(args):
    """Play the memory game to the end with remembering bots."""
    from .games.memory import build_memory_game
    from .games.memory.bot import MemoryBot

    game = build_memory_game(seed=args.seed)
    state = game.start()
    bot = MemoryBot()

    print(f"Starting memory game (seed={args.seed})")
    actions = 0
    while not game.is_finished:
        if actions >= args.max_actions:
            print(f"Stopped after {actions} actions without finishing")
            return 1
        request = bot.choose(state)
        result = game.submit(request)
        actions += 1

        card = state.find_card(request.card_id)
        bot.observe(card.card_id, card.card_type_id)
        print(
            f"{actions:3d}. {request.player_id} flips {request.card_id} "
            f"in {request.container_id}: {result.outcome.value}"
        )

    print("\nRanking:")
    for entry in game.ranking:
        print(f"  {entry.rank}. {entry.player_id} ({entry.value} cards)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
