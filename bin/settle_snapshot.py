"""Print live status and settlements for a saved game snapshot.

Load a GameSnapshot JSON document, run it through the wagering engine,
and print the format-specific live status followed by the money transfers.

Usage:
    uv run python bin/settle_snapshot.py path/to/snapshot.json
    uv run python bin/settle_snapshot.py path/to/snapshot.json --status-only
    uv run python bin/settle_snapshot.py path/to/snapshot.json --log-dir logs
    uv run python bin/settle_snapshot.py path/to/snapshot.json --json-logs
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from shared.logging import setup_logging
from shared.settings import EngineSettings
from wager.logic.exceptions import WagerRuleError
from wager.logic.service import GameStatusFacade
from wager.logic.settlement import net_owed
from wager.logic.state import GameSnapshot


def _load_snapshot(path: Path) -> GameSnapshot:
    try:
        return GameSnapshot.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        print(f"Invalid snapshot {path}:\n{e}", file=sys.stderr)
        sys.exit(1)


def _print_settlements(facade: GameStatusFacade, snapshot: GameSnapshot) -> None:
    """Print each transfer with its breakdown, then the net per player."""
    if snapshot.ledger().is_empty:
        print("No scores entered yet.")
        return

    settlements = facade.compute_settlements(snapshot)
    if not settlements:
        print("No money changes hands.")
        return

    names = {p.id: p.name for p in snapshot.players}
    print("Settlements:")
    for s in settlements:
        print(f"  {names.get(s.from_player, s.from_player)} -> {names.get(s.to_player, s.to_player)}: ${s.amount}")
        for item in s.breakdown:
            print(f"      {item.label}: ${item.amount}")
    print()

    print("Net:")
    for player_id, owed in sorted(net_owed(settlements).items(), key=lambda kv: kv[1]):
        label = "collects" if owed < 0 else "pays"
        print(f"  {names.get(player_id, player_id):<12} {label} ${abs(owed)}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Compute live status and settlements for a snapshot")
    parser.add_argument("snapshot", type=Path, help="path to a GameSnapshot JSON file")
    parser.add_argument(
        "--status-only",
        action="store_true",
        help="print the live status and skip settlements",
    )
    parser.add_argument(
        "--log-dir",
        default=None,
        help="directory for a timestamped log file (default: WAGER_LOG_DIR)",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        default=None,
        help="write log events as JSON lines (default: LOG_FORMAT)",
    )
    args = parser.parse_args()

    if not args.snapshot.exists():
        print(f"Snapshot file not found: {args.snapshot}", file=sys.stderr)
        sys.exit(1)

    settings = EngineSettings()
    setup_logging(log_dir=args.log_dir or settings.log_dir, json_output=args.json_logs)
    facade = GameStatusFacade(settings)
    snapshot = _load_snapshot(args.snapshot)

    try:
        status = facade.compute_status(snapshot)
        print(status.model_dump_json(indent=2))
        print()
        if not args.status_only:
            _print_settlements(facade, snapshot)
    except WagerRuleError as e:
        print(f"Snapshot rejected ({e.code.value}): {e.reason}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
