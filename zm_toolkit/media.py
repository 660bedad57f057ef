"""
Event media staging and concatenation.

Downloads go into a local directory in event order. A failed download skips
that event and the loop continues; one missing clip should not sink a batch.
Joining the staged files is left to ffmpeg's concat demuxer.
"""
import logging
import re
import shutil
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from .errors import MediaError, TransportError
from .models import Event

logger = logging.getLogger(__name__)

IMAGE = "image"
VIDEO = "video"
EXTENSIONS = {IMAGE: "jpg", VIDEO: "mp4"}
DEFAULT_FRAME = "snapshot"
DEFAULT_FPS = 2.0


def _safe_id(s: Optional[str]) -> str:
    """Make a filesystem-safe identifier from arbitrary text."""
    return re.sub(r"[^A-Za-z0-9._-]+", "-", (s or "")).strip("-")


def media_url(session, event: Event, kind: str = IMAGE, frame=DEFAULT_FRAME) -> str:
    if kind == VIDEO:
        return session.portal_view(view="view_video", eid=event.id)
    return session.portal_view(view="image", eid=event.id, fid=frame)


def staged_name(event: Event, kind: str, monitor_names: Optional[Mapping[int, str]] = None) -> str:
    monitor = (monitor_names or {}).get(event.monitor_id, str(event.monitor_id))
    return f"{event.id}-{_safe_id(monitor)}.{EXTENSIONS[kind]}"


def stage_event_media(session, events: Sequence[Event], dest_dir, kind: str = IMAGE, frame=DEFAULT_FRAME,
                      monitor_names: Optional[Mapping[int, str]] = None) -> list[Path]:
    """
    Download one image or video per event into ``dest_dir``.

    Returns:
        Paths of the files that were staged, in event order.
    """
    if kind not in EXTENSIONS:
        raise ValueError(f"Unknown media kind '{kind}'")
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)

    staged = []
    total = len(events)
    for index, event in enumerate(events, 1):
        dest = dest_dir / staged_name(event, kind, monitor_names)
        try:
            staged.append(session.download(media_url(session, event, kind, frame), dest))
            logger.debug(f"Staged {kind} for event {event.id} ({index}/{total}) at {dest}")
        except TransportError as e:
            logger.warning(f"Skipping event {event.id} ({index}/{total}): {e}")
    logger.info(f"Staged {len(staged)} of {total} event {kind}s in {dest_dir}.")
    return staged


def _concat_list_entry(path: Path) -> str:
    escaped = str(path.resolve()).replace("'", "'\\''")
    return f"file '{escaped}'"


def write_concat_list(paths: Sequence[Path], list_path: Path, frame_duration: Optional[float] = None) -> Path:
    lines = []
    for path in paths:
        lines.append(_concat_list_entry(Path(path)))
        if frame_duration:
            lines.append(f"duration {frame_duration:g}")
    if frame_duration and paths:
        # The concat demuxer ignores the last duration unless the file repeats.
        lines.append(_concat_list_entry(Path(paths[-1])))
    list_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return list_path


def build_ffmpeg_command(ffmpeg: str, list_path: Path, output: Path, kind: str, fps: float) -> list[str]:
    cmd = [ffmpeg, "-y", "-loglevel", "error", "-f", "concat", "-safe", "0", "-i", str(list_path)]
    if kind == IMAGE:
        cmd += ["-vf", f"fps={fps:g},format=yuv420p"]
    else:
        cmd += ["-c", "copy"]
    cmd.append(str(output))
    return cmd


def concat_media(paths: Sequence[Path], output, kind: str = IMAGE, fps: float = DEFAULT_FPS,
                 ffmpeg: str = "ffmpeg") -> Path:
    """
    Join staged files into one video with ffmpeg.

    Raises:
        MediaError: nothing to join, ffmpeg not installed, or ffmpeg failed.
    """
    if not paths:
        raise MediaError("No staged files to join")
    binary = shutil.which(ffmpeg)
    if binary is None:
        raise MediaError(f"'{ffmpeg}' not found on PATH")

    output = Path(output)
    list_path = output.with_name(f".{output.stem}-concat.txt")
    write_concat_list(paths, list_path, frame_duration=1 / fps if kind == IMAGE else None)
    cmd = build_ffmpeg_command(binary, list_path, output, kind, fps)
    logger.info(f"Joining {len(paths)} files into {output}...")
    logger.debug("FFMPEG " + " ".join(cmd))
    try:
        res = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True)
    finally:
        list_path.unlink(missing_ok=True)
    if res.returncode != 0:
        raise MediaError(f"ffmpeg exited with status {res.returncode}: {(res.stderr or '').strip()[-500:]}")
    logger.info(f"Wrote {output}.")
    return output
