"""Main application entry point for micscope."""

import sys
import time
import argparse
import logging
from pathlib import Path
from typing import Optional

from pubsub import pub

from micscope import __version__
from micscope.audio.capture import list_input_devices
from micscope.config import MicscopeConfig
from micscope.exceptions import ConfigurationError
from micscope.models.spectrum import SpectrumSnapshot
from micscope.services.spectrum_service import SpectrumService
from micscope.ui.display import peak_frequency
from micscope.ui.spectrum_screen import SpectrumScreen

logger = logging.getLogger(__name__)


class Server:

    def __init__(self, config: MicscopeConfig, log_level: Optional[str] = None):
        self.config = config
        # Set up logging (override config with command line if specified)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.should_exit = False
        self.service: Optional[SpectrumService] = None
        self.screen = None

    def init(self, use_ui: bool = True):
        logger.info("Initializing services...")
        self.service = SpectrumService(self.config)

        if use_ui:
            self.screen = SpectrumScreen(self.service)
        else:
            pub.subscribe(self._log_snapshot, self.service.publisher.topic)

    def _log_snapshot(self, snapshot: SpectrumSnapshot) -> None:
        peak = peak_frequency(snapshot)
        if peak and snapshot.sequence_number % 20 == 0:
            logger.info(f"Spectrum #{snapshot.sequence_number}: peak {peak[0]:.1f}Hz at {peak[1]:.1f}dB")

    def run(self, duration: Optional[float]):
        try:
            details = self.service.start()
            logger.info(f"Capturing: {details}")
            if self.screen:
                self.screen.run(duration)
            elif duration:
                time.sleep(duration)
            else:
                while not self.should_exit:
                    time.sleep(1)
        finally:
            self.cleanup()

    def cleanup(self):
        if self.service:
            self.service.cleanup()
        if self.screen:
            self.screen.close()
            self.screen = None
        else:
            if self.service:
                pub.unsubscribe(self._log_snapshot, self.service.publisher.topic)


def setup_logging(config, level: str = "INFO") -> None:
    """Set up logging configuration from YAML config."""
    log_file_path = config.get_log_file_path()
    console_output = config.get('logging.console_output', True)

    # Create logs directory if it doesn't exist
    log_dir = Path(log_file_path).parent
    log_dir.mkdir(parents=True, exist_ok=True)

    handlers = []

    # File handler - always write to file
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG)
    file_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
    )
    file_handler.setFormatter(file_formatter)
    handlers.append(file_handler)

    # Console handler - only if enabled in config
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)  # Only show warnings and above on console
        console_formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger = logging.getLogger(__name__)
    logger.info("="*50)
    logger.info("micscope starting up")
    logger.info(f"Log file: {log_file_path}")
    logger.info(f"Log level set to: {level}")
    logger.info("="*50)


def print_input_devices() -> None:
    devices = list_input_devices()
    if not devices:
        print("No audio input devices found")
        return
    for device in devices:
        print(f"[{device['index']}] {device['name']} - "
              f"{device['channels']} ch, {device['default_sample_rate']:.0f}Hz")


def build_config(args: argparse.Namespace) -> MicscopeConfig:
    """Load configuration and apply command line overrides."""
    config = MicscopeConfig(args.config)
    if args.profile:
        config.set('analyzer.profile', args.profile)
    if args.frame_size:
        config.set('analyzer.frame_size', args.frame_size)
    if args.device is not None:
        config.set('audio.device_index', args.device)
    return config


def main() -> None:
    """Main entry point for micscope."""
    parser = argparse.ArgumentParser(
        description="micscope - Real-time microphone spectrum analyzer",
        epilog="Press Ctrl+C to stop"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: built-in settings)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, else INFO)"
    )

    parser.add_argument(
        "--profile",
        type=str,
        choices=["detailed", "bars"],
        help="Analyzer preset: 'detailed' line spectrum or 'bars' display"
    )

    parser.add_argument(
        "--frame-size",
        type=int,
        help="FFT frame size, a power of two (overrides config and profile)"
    )

    parser.add_argument(
        "--device",
        type=int,
        help="Input device index (see --list-devices)"
    )

    parser.add_argument(
        "--duration",
        type=float,
        help="Stop after this many seconds (default: run until Ctrl+C)"
    )

    parser.add_argument(
        "--no-ui",
        action="store_true",
        help="Log the peak frequency instead of drawing the spectrum"
    )

    parser.add_argument(
        "--list-devices",
        action="store_true",
        help="List audio input devices and exit"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"micscope v{__version__}"
    )

    args = parser.parse_args()

    if args.list_devices:
        print_input_devices()
        return

    try:
        server = Server(build_config(args), args.log_level)
        server.init(use_ui=not args.no_ui)
        server.run(args.duration)
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except ConfigurationError as e:
        print(f"Configuration error: {e}")
        logging.error(f"Configuration error: {e}")
        sys.exit(2)
    except Exception as e:
        print(f"Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
