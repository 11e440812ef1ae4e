"""Group a game log into drives delimited by drive_start/drive_end markers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from gamecast.projection.events import DriveMarkerEvent, GameEvent
from gamecast.projection.schema import Drive


@dataclass
class _OpenDrive:
    start: DriveMarkerEvent
    end: DriveMarkerEvent | None = None
    events: list[GameEvent] = field(default_factory=list)


def _collect_drives(events: Iterable[GameEvent]) -> list[_OpenDrive]:
    drives: list[_OpenDrive] = []
    current: _OpenDrive | None = None

    for event in events:
        is_marker = isinstance(event, DriveMarkerEvent)
        if is_marker and event.is_start:
            # A new start while a drive is open closes the old one without an end marker.
            if current is not None and current.events:
                drives.append(current)
            current = _OpenDrive(start=event)
            continue
        if current is None:
            continue
        if is_marker:
            current.end = event
            if current.events:
                drives.append(current)
            current = None
            continue
        current.events.append(event)

    if current is not None and current.events:
        drives.append(current)
    return drives


def _summarize(drive: _OpenDrive, position: int) -> Drive:
    first = drive.events[0]
    end = drive.end

    team = drive.start.team or first.team or "Unknown"
    quarter = drive.start.quarter if drive.start.quarter is not None else first.quarter

    drive_number = drive.start.drive_number
    if drive_number is None and end is not None:
        drive_number = end.drive_number
    if drive_number is None:
        drive_number = position + 1

    if end is not None and end.plays is not None:
        plays = end.plays
    else:
        plays = sum(1 for event in drive.events if event.type == "play")

    if end is not None and end.yards is not None:
        yards = end.yards
    else:
        yards = sum(event.yards for event in drive.events if event.yards is not None)

    return Drive(
        quarter=quarter,
        team=team,
        drive_number=drive_number,
        plays=plays,
        yards=yards,
        result=end.result if end is not None else "",
    )


def summarize_drives(events: Iterable[GameEvent]) -> list[Drive]:
    """Drive summaries for events already ordered by time.

    Drives that captured no events are skipped; a drive still open when the
    log ends is reported without a result.
    """
    return [_summarize(drive, index) for index, drive in enumerate(_collect_drives(events))]
