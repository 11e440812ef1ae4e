"""CLI entrypoint: print the projection of a stored game as JSON."""

from __future__ import annotations

import argparse
import json
import logging

from gamecast.db import Base, SessionLocal, engine
from gamecast.events.store import EventStoreError, SqlEventStore, load_game_events
from gamecast.projection.assembler import ProjectionNotReady, build_projection


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Build the recap projection for one game from the event store.",
    )
    parser.add_argument(
        "--game-id",
        type=str,
        required=True,
        help="Game identifier whose event log should be projected.",
    )
    parser.add_argument(
        "--indent",
        type=int,
        default=2,
        help="JSON indentation (default: 2).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    args = _parse_args(argv)
    game_id = args.game_id.strip()
    if not game_id:
        raise SystemExit("--game-id must not be blank")

    Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        try:
            events = load_game_events(SqlEventStore(db), game_id)
            projection = build_projection(game_id, events)
        except ProjectionNotReady as exc:
            logging.error("Projection unavailable status=%s: %s", exc.status.value, exc)
            raise SystemExit(1)
        except EventStoreError as exc:
            logging.error("Event store error code=%s details=%s", exc.code, exc.details)
            raise SystemExit(2)

    print(json.dumps(projection.to_payload(), indent=args.indent, ensure_ascii=False))


if __name__ == "__main__":
    main()
