"""
DogVision command-line host.

Usage:
    python main.py image INPUT OUTPUT [--model canine|dichromatic] [--show]
    python main.py live [--device N | --video-file PATH] [--model ...]
                        [--headless --max-frames N]

Live Controls:
    Q / ESC  - Quit
    N        - Switch to the next camera index
"""

from __future__ import annotations

import argparse
import signal
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from dogvision.capture import make_source_provider
from dogvision.config import Config, load_config
from dogvision.core.contracts import ColorModel, SessionState
from dogvision.core.errors import DogVisionError, EncodeError, SourceSwitchFailed, SourceUnavailable
from dogvision.display import LatestFrameSink, OpenCVWindowSink, get_sink
from dogvision.display.opencv_window import QUIT_KEYS
from dogvision.pipeline import FrameSession, PacedTickScheduler
from dogvision.processing import StaticImageProcessor, format_for_path


# ============================================================
# LOGGING CONFIGURATION
# ============================================================

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """Configure logging."""
    logger.remove()  # Remove default handler

    # Console output with colors
    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>",
        colorize=True,
    )

    # File output
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {module}:{line} | {message}",
            rotation="10 MB",
            retention="7 days",
        )


# ============================================================
# COMMANDS
# ============================================================

def run_image(config: Config, input_path: str, output_path: str, show: bool = False) -> int:
    """Transform one image file and write the result."""
    processor = StaticImageProcessor(
        model=config.color_model,
        image_format=config.display.image_format,
    )
    try:
        image_format = format_for_path(output_path) if Path(output_path).suffix else None
    except EncodeError as e:
        logger.error(f"Cannot write {output_path}: {e}")
        return 1

    result = processor.process_file(input_path)
    if not result.success:
        logger.error(f"Could not process {input_path}: {result.error_message}")
        return 1

    data = processor.encode(result.transformed, image_format)
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    Path(output_path).write_bytes(data)

    width, height = result.dimensions
    logger.info(f"Wrote {output_path} ({width}x{height}, {result.model.value} model)")

    if show:
        sink = OpenCVWindowSink(config.display, window_name="DogVision - before | after")
        try:
            sink.show_side_by_side(result.original, result.transformed)
            sink.poll_input(0)
        finally:
            sink.close()
    return 0


class LiveApp:
    """Hosts a FrameSession on a paced tick loop with keyboard control."""

    def __init__(self, config: Config, headless: bool = False, max_frames: Optional[int] = None):
        self.config = config
        self.max_frames = max_frames
        self.sink = LatestFrameSink() if headless else get_sink(config.display.sink, config.display)
        self.scheduler = PacedTickScheduler(fps=config.video.fps)
        self.session = FrameSession(
            source_provider=make_source_provider(config.video),
            sink=self.sink,
            scheduler=self.scheduler,
            model=config.color_model,
            on_state_change=self._on_state_change,
        )
        self._camera_index = config.video.device_index

    def _on_state_change(self, old: SessionState, new: SessionState):
        logger.info(f"Live session: {old.value} -> {new.value}")

    def _idle(self) -> bool:
        """Runs between ticks. Returns True to quit."""
        if self.max_frames is not None and self.session.stats.frames_rendered >= self.max_frames:
            return True

        if not isinstance(self.sink, OpenCVWindowSink):
            return False

        key = self.sink.poll_input()
        if key in QUIT_KEYS:
            return True
        if key == ord('n') and self.config.video.video_file is None:
            self._camera_index += 1
            logger.info(f"Switching to camera {self._camera_index}")
            try:
                self.session.switch_source(self._camera_index)
            except SourceSwitchFailed as e:
                logger.error(str(e))
                return True
        return False

    def run(self, device: object = None) -> int:
        logger.info(f"Starting live view ({self.session.model.value} model). Press Q to quit")
        try:
            with self.session:
                self.session.start(device)
                self.scheduler.run(idle_hook=self._idle)
        except SourceUnavailable as e:
            logger.error(str(e))
            return 1
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
        finally:
            self.sink.close()

        stats = self.session.stats
        logger.info(
            f"Live view ended: {stats.frames_rendered} frames, "
            f"{stats.ticks_not_ready} idle ticks, {stats.frames_dropped} dropped"
        )
        return 0


# ============================================================
# ENTRY POINT
# ============================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="DogVision - see images and live video the way a dog does",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--model", "-m",
        choices=[m.value for m in ColorModel],
        default=None,
        help="Simulation model (default: from config, canine)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config, INFO)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Log file path (default: from config)",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    image = commands.add_parser("image", help="Transform a still image")
    image.add_argument("input", help="Input image file")
    image.add_argument("output", help="Output image file (format from extension)")
    image.add_argument("--show", action="store_true", help="Show before/after window")

    live = commands.add_parser("live", help="Transform a live camera or video file")
    live.add_argument("--device", "-d", type=int, default=None, help="Camera index")
    live.add_argument("--video-file", "-f", type=str, default=None, help="Play a video file")
    live.add_argument("--loop", action="store_true", help="Loop video file playback")
    live.add_argument("--fps", type=int, default=None, help="Tick rate")
    live.add_argument("--headless", action="store_true", help="Run without a window")
    live.add_argument("--max-frames", type=int, default=None, help="Stop after N frames")

    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Apply command-line flags on top of the loaded config."""
    if args.model:
        config.model = args.model
    if args.log_level:
        config.logging.level = args.log_level
    if args.log_file:
        config.logging.file = args.log_file

    if args.command == "live":
        if args.device is not None:
            config.video.device_index = args.device
            config.video.video_file = None
        if args.video_file:
            config.video.video_file = args.video_file
        if args.loop:
            config.video.loop = True
        if args.fps:
            config.video.fps = args.fps
    return config


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = apply_overrides(load_config(args.config), args)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    setup_logging(config.logging.level, config.logging.file)

    if args.command == "image":
        try:
            return run_image(config, args.input, args.output, show=args.show)
        except DogVisionError as e:
            logger.error(str(e))
            return 1

    app = LiveApp(config, headless=args.headless, max_frames=args.max_frames)

    # Release the camera on SIGTERM as well as Ctrl+C
    signal.signal(signal.SIGTERM, lambda *_: app.session.stop())

    device = config.video.video_file or config.video.device_index
    return app.run(device)
