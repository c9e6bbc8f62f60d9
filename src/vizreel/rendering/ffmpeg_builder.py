"""FFmpeg command construction for frame-sequence encoding."""

from pathlib import Path

# libx264 with yuv420p needs even dimensions; pads by at most one pixel
EVEN_DIMENSIONS_FILTER = "pad=ceil(iw/2)*2:ceil(ih/2)*2"


class FFmpegCommandBuilder:
    """Builds FFmpeg commands that turn numbered PNG frames into a video."""

    def __init__(
        self,
        ffmpeg_binary: str = "ffmpeg",
        video_codec: str = "libx264",
        pixel_format: str = "yuv420p",
        crf: int = 23,
        preset: str = "medium",
    ):
        self.ffmpeg_binary = ffmpeg_binary
        self.video_codec = video_codec
        self.pixel_format = pixel_format
        self.crf = crf
        self.preset = preset

    def build_encode_command(
        self,
        input_pattern: str,
        frame_count: int,
        fps: int,
        output_path: Path,
    ) -> list[str]:
        """Build the encode command.

        Input and output rates are both ``fps`` and the output is cut to
        exactly ``frame_count`` frames, so its length is ``frame_count / fps``.
        """
        return [
            self.ffmpeg_binary,
            "-y",
            "-hide_banner",
            "-framerate",
            str(fps),
            "-start_number",
            "0",
            "-i",
            input_pattern,
            "-vf",
            EVEN_DIMENSIONS_FILTER,
            "-c:v",
            self.video_codec,
            "-pix_fmt",
            self.pixel_format,
            "-crf",
            str(self.crf),
            "-preset",
            self.preset,
            "-r",
            str(fps),
            "-frames:v",
            str(frame_count),
            "-t",
            format_duration(frame_count / fps),
            "-movflags",
            "+faststart",
            "-f",
            "mp4",
            str(output_path),
        ]

    @staticmethod
    def build_probe_command(ffprobe_binary: str, path: Path) -> list[str]:
        return [
            ffprobe_binary,
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            str(path),
        ]


def format_duration(seconds: float) -> str:
    """Seconds as an ffmpeg duration string without float noise."""
    text = f"{seconds:.6f}".rstrip("0")
    return text + "0" if text.endswith(".") else text
