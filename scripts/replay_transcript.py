"""Replay a transcript file against a simulated playback clock.

Loads the transcript (and its audio, when given) through the player
controller, then advances time in fixed ticks and prints each active
entry change. Useful for checking a transcript's offsets by eye.

Usage:
    python scripts/replay_transcript.py va_transcript_1.txt --audio call.mp3 --tick 0.25
"""

import argparse
import asyncio
from pathlib import Path

from cs_common.config import Settings
from cs_common.logging import configure_logging
from cs_common.models import ActiveEntryChange, DocumentInfo
from player.player import CallTranscriptPlayer
from player.sources import ContentSource, FileContentSource, InMemoryContentSource

REPLAY_AUDIO_NAME = "replay.mp3"


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments for the replay."""
    parser = argparse.ArgumentParser(description="Replay a CallSync transcript")
    parser.add_argument("transcript", type=Path, help="Transcript text file")
    parser.add_argument("--audio", type=Path, default=None, help="Audio file paired with the transcript (same directory)")
    parser.add_argument("--tick", type=float, default=0.5, help="Simulated clock step in seconds")
    parser.add_argument("--duration", type=float, default=None, help="Stop after this many seconds")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Log level")
    return parser.parse_args()


def build_replay_source(
    transcript: Path, audio: Path | None = None,
) -> tuple[ContentSource, list[DocumentInfo]]:
    """Content source and document list for one replay.

    With *audio*, both files are read from the transcript's directory.
    Without it the transcript is served from memory next to an empty
    audio payload, so the player still gets a recording to select.
    """
    transcript = transcript.resolve()
    root = transcript.parent
    source: ContentSource
    if audio is not None:
        audio_name = audio.resolve().relative_to(root).as_posix()
        source = FileContentSource(root)
    else:
        audio_name = REPLAY_AUDIO_NAME
        source = InMemoryContentSource(
            transcripts={transcript.name: transcript.read_text(encoding="utf-8")},
            audio={audio_name: b""},
        )
    documents = [
        DocumentInfo(document_id=audio_name, title=audio_name, file_type="MP3"),
        DocumentInfo(document_id=transcript.name, title=f"va_{transcript.name}", file_type="TXT"),
    ]
    return source, documents


async def main() -> None:
    """Run the replay."""
    args = parse_args()
    configure_logging(args.log_level, json_logs=False)

    source, documents = build_replay_source(args.transcript, args.audio)
    player = CallTranscriptPlayer(source, Settings(), session_id="replay")

    def on_change(change: ActiveEntryChange) -> None:
        if change.current_index < 0:
            return
        entry = player.entries[change.current_index]
        print(f"{entry.display_time:>6}  [{entry.speaker}]  {entry.text}", flush=True)

    player.synchronizer.add_listener(on_change)
    player.load_documents(documents)
    await player.wait_for_pending()

    if not player.entries:
        print(f"No transcript entries found ({player.transcript_status.value}).", flush=True)
        await player.close()
        return

    end = args.duration if args.duration is not None else player.entries[-1].seconds + args.tick
    player.handle_loaded_metadata(end)
    player.handle_play_pause()
    t = 0.0
    while t <= end:
        player.handle_time_update(t)
        t += args.tick

    print(f"Replayed {len(player.entries)} entries starting at {player.recording_start_time}.", flush=True)
    await player.close()


if __name__ == "__main__":
    asyncio.run(main())
