from __future__ import annotations

import json
import unittest

from gamecast.projection.assembler import (
    STATUS_MESSAGES,
    ProjectionNotReady,
    ProjectionStatus,
    build_projection,
)


def _game_start(home="Titans", away="Wraiths", timestamp="2025-09-14T17:00:00Z") -> dict:
    return {
        "eventId": "g1-start",
        "gameId": "g1",
        "type": "game_start",
        "timestamp": timestamp,
        "payload": {"homeTeam": home, "awayTeam": away},
    }


class BuildProjectionTests(unittest.TestCase):
    def _sample_log(self) -> list[dict]:
        return [
            _game_start(),
            {"type": "score", "payload": {"team": "Titans", "quarter": 1, "points": 7}},
            {"type": "score", "payload": {"team": "Wraiths", "quarter": 2, "points": 3}},
            {"type": "game_end", "payload": {}},
        ]

    def test_projects_a_short_game(self) -> None:
        payload = build_projection("g1", self._sample_log()).to_payload()

        self.assertEqual("g1", payload["gameId"])
        self.assertEqual("Titans", payload["homeTeam"])
        self.assertEqual("Wraiths", payload["awayTeam"])
        self.assertEqual({"home": 7, "away": 3}, payload["finalScore"])
        self.assertEqual(
            [
                {"quarter": 1, "homePoints": 7, "awayPoints": 0},
                {"quarter": 2, "homePoints": 7, "awayPoints": 3},
                {"quarter": 3, "homePoints": 7, "awayPoints": 3},
                {"quarter": 4, "homePoints": 7, "awayPoints": 3},
            ],
            payload["quarters"],
        )
        self.assertEqual(2, len(payload["scoringPlays"]))
        self.assertEqual([], payload["turnovers"])
        self.assertEqual([], payload["drives"])
        self.assertEqual(4, payload["eventsCount"])

    def test_payload_has_exact_field_set(self) -> None:
        payload = build_projection("g1", self._sample_log()).to_payload()

        self.assertEqual(
            [
                "gameId",
                "homeTeam",
                "awayTeam",
                "finalScore",
                "quarters",
                "scoringPlays",
                "turnovers",
                "drives",
                "eventsCount",
            ],
            list(payload),
        )
        self.assertEqual(
            {"quarter", "clock", "team", "type", "description", "points"},
            set(payload["scoringPlays"][0]),
        )

    def test_rebuilding_is_byte_identical(self) -> None:
        events = self._sample_log()

        first = json.dumps(build_projection("g1", events).to_payload())
        second = json.dumps(build_projection("g1", events).to_payload())

        self.assertEqual(first, second)

    def test_final_score_from_game_end_map(self) -> None:
        events = self._sample_log()
        events[-1] = {"type": "game_end", "payload": {"finalScore": {"Titans": 24, "Wraiths": 20}}}

        projection = build_projection("g1", events)

        self.assertEqual((24, 20), (projection.final_score.home, projection.final_score.away))
        self.assertEqual((7, 3), (projection.quarters[-1].home_points, projection.quarters[-1].away_points))

    def test_events_are_ordered_by_time_before_projection(self) -> None:
        events = [
            {
                "eventId": "late",
                "type": "score",
                "timestamp": "2025-09-14T19:00:00Z",
                "payload": {"team": "Titans", "quarter": 4, "points": 3},
            },
            _game_start(),
            {
                "eventId": "early",
                "type": "score",
                "timestamp": "2025-09-14T17:10:00Z",
                "payload": {"team": "Wraiths", "quarter": 1, "points": 7},
            },
        ]

        payload = build_projection("g1", events).to_payload()

        self.assertEqual(["early", "late"], [play["eventId"] for play in payload["scoringPlays"]])

    def test_first_game_start_defines_the_teams(self) -> None:
        events = [
            _game_start("Ravens", "Hawks", timestamp="2025-09-14T18:00:00Z"),
            _game_start("Titans", "Wraiths", timestamp="2025-09-14T17:00:00Z"),
            {"type": "game_end", "payload": {}},
        ]

        projection = build_projection("g1", events)

        self.assertEqual(("Titans", "Wraiths"), (projection.home_team, projection.away_team))

    def test_game_end_alone_is_enough(self) -> None:
        projection = build_projection("g1", [_game_start(), {"type": "game_end", "payload": {}}])

        self.assertEqual((0, 0), (projection.final_score.home, projection.final_score.away))
        self.assertEqual(4, len(projection.quarters))

    def test_turnover_alone_is_enough(self) -> None:
        events = [
            _game_start(),
            {"type": "turnover", "payload": {"team": "Titans", "quarter": 2, "type": "fumble"}},
        ]

        projection = build_projection("g1", events)

        self.assertEqual(["fumble"], [turnover.type for turnover in projection.turnovers])

    def test_malformed_records_are_skipped(self) -> None:
        events = self._sample_log() + [
            {"type": "score", "payload": "broken"},
            {"type": "score", "payload": {"team": "Titans", "points": 6}},
            "not-an-event",
        ]

        payload = build_projection("g1", events).to_payload()

        self.assertEqual(2, len(payload["scoringPlays"]))
        self.assertEqual(7, payload["eventsCount"])

    def test_drives_are_included(self) -> None:
        events = self._sample_log() + [
            {"type": "drive_start", "timestamp": 10, "payload": {"team": "Titans", "quarter": 1}},
            {"type": "play", "timestamp": 11, "payload": {"yards": 25}},
            {"type": "drive_end", "timestamp": 12, "payload": {"result": "touchdown"}},
        ]

        payload = build_projection("g1", events).to_payload()

        self.assertEqual(
            [
                {
                    "quarter": 1,
                    "team": "Titans",
                    "driveNumber": 1,
                    "plays": 1,
                    "yards": 25,
                    "result": "touchdown",
                }
            ],
            payload["drives"],
        )

    def test_drive_without_a_quarter_omits_the_key(self) -> None:
        events = self._sample_log() + [
            {"type": "drive_start", "timestamp": 10, "payload": {"team": "Wraiths"}},
            {"type": "play", "timestamp": 11, "payload": {"yards": 6}},
            {"type": "drive_end", "timestamp": 12, "payload": {"result": "punt"}},
        ]

        payload = build_projection("g1", events).to_payload()

        self.assertEqual(
            [{"team": "Wraiths", "driveNumber": 1, "plays": 1, "yards": 6, "result": "punt"}],
            payload["drives"],
        )
        self.assertNotIn("null", json.dumps(payload["drives"]))


class ProjectionNotReadyTests(unittest.TestCase):
    def _status_for(self, events: list) -> ProjectionStatus:
        with self.assertRaises(ProjectionNotReady) as ctx:
            build_projection("g1", events)
        self.assertEqual("g1", ctx.exception.game_id)
        self.assertEqual(STATUS_MESSAGES[ctx.exception.status], str(ctx.exception))
        return ctx.exception.status

    def test_empty_log_is_not_found(self) -> None:
        self.assertEqual(ProjectionStatus.NOT_FOUND, self._status_for([]))

    def test_missing_game_start(self) -> None:
        events = [{"type": "score", "payload": {"team": "Titans", "quarter": 1, "points": 7}}]

        self.assertEqual(ProjectionStatus.FAILED_NO_START, self._status_for(events))

    def test_game_start_without_both_teams(self) -> None:
        self.assertEqual(ProjectionStatus.FAILED_NO_TEAMS, self._status_for([_game_start(away="  ")]))
        self.assertEqual(ProjectionStatus.FAILED_NO_TEAMS, self._status_for([_game_start(home=None)]))

    def test_game_without_scoring_turnover_or_end(self) -> None:
        events = [
            _game_start(),
            {"type": "play", "payload": {"team": "Titans", "quarter": 1, "yards": 4}},
            {"type": "score", "payload": {"team": "Titans", "points": 7}},
        ]

        self.assertEqual(ProjectionStatus.INSUFFICIENT, self._status_for(events))


if __name__ == "__main__":
    unittest.main()
