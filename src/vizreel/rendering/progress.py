"""FFmpeg progress monitoring."""

import re
from collections.abc import Callable


class FFmpegProgressMonitor:
    """Monitor FFmpeg encoding progress from the frame counter on stderr."""

    def __init__(self, total_frames: int, callback: Callable[[float], None] | None = None):
        self.total_frames = total_frames
        self.callback = callback
        self.current_frame = 0

    def parse_line(self, line: str) -> float | None:
        """Parse an FFmpeg stderr line for frame= progress."""
        match = re.search(r"frame=\s*(\d+)", line)
        if match:
            self.current_frame = int(match.group(1))
            progress = self.progress
            if self.callback:
                self.callback(progress)
            return progress
        return None

    @property
    def progress(self) -> float:
        """Current progress as fraction [0, 1]."""
        if self.total_frames <= 0:
            return 0.0
        return min(1.0, self.current_frame / self.total_frames)
