"""Terminal spectrum screen with real-time bar display."""

import time
import threading
import logging
from typing import Optional, List

import numpy as np
from pubsub import pub
from rich.console import Console
from rich.panel import Panel
from rich.layout import Layout
from rich.live import Live
from rich.text import Text
from rich.table import Table
from rich.align import Align

from ..models.events import SessionEvent
from ..models.spectrum import SpectrumSnapshot
from ..services.spectrum_service import SpectrumService
from .display import (
    db_ticks,
    frequency_ticks,
    frequency_position,
    normalized_bands,
    peak_frequency,
)

logger = logging.getLogger(__name__)

BAR_LEVELS = " ▁▂▃▄▅▆▇█"


def render_bars(heights: np.ndarray, rows: int = 12) -> List[str]:
    """Draw bar heights in ``[0, 1]`` as ``rows`` lines of block characters, top line first."""
    steps = len(BAR_LEVELS) - 1
    cells = np.clip(np.asarray(heights, dtype=np.float32), 0.0, 1.0) * rows * steps
    lines = []
    for row in range(rows - 1, -1, -1):
        fill = np.clip(cells - row * steps, 0, steps).astype(int)
        lines.append("".join(BAR_LEVELS[level] for level in fill))
    return lines


def render_frequency_axis(width: int, max_freq: float, min_freq: float = 20.0) -> str:
    """Place frequency tick labels along a ``width`` wide log axis."""
    line = [" "] * width
    for freq, label in frequency_ticks(max_freq):
        start = int(frequency_position(freq, max_freq, min_freq) * (width - 1))
        start = min(start, width - len(label))
        if start < 0 or any(c != " " for c in line[max(0, start - 1):start + len(label)]):
            continue
        line[start:start + len(label)] = label
    return "".join(line)


class SpectrumScreen:
    """Terminal spectrum view fed by the publisher's pub/sub topic."""

    def __init__(self, service: SpectrumService, console: Optional[Console] = None):
        """Initialize spectrum screen.

        Args:
            service: Spectrum service whose snapshots are drawn
            console: Rich console to draw on
        """
        self.service = service
        self.console = console or Console()
        config = service.config
        self.band_count = config.get('display.bands', 64)
        self.refresh_per_second = config.get('display.refresh_per_second', 20)
        self.min_frequency = config.get('display.min_frequency_hz', 20.0)
        self.db_min = service.session_config.db_min
        self.db_max = service.session_config.db_max

        # Latest snapshot only; every delivery replaces the previous one
        self.lock = threading.Lock()
        self.snapshot: Optional[SpectrumSnapshot] = None
        self.snapshots_received = 0
        self.running = False

        pub.subscribe(self._on_snapshot, service.publisher.topic)
        pub.subscribe(self._on_session_event, service.publisher.session_topic)
        logger.info(f"SpectrumScreen subscribed to {service.publisher.topic}")

    def _on_snapshot(self, snapshot: SpectrumSnapshot) -> None:
        with self.lock:
            self.snapshot = snapshot
            self.snapshots_received += 1

    def _on_session_event(self, event: SessionEvent) -> None:
        if event.event_type == "stopped":
            # Flatten the display once capture ends
            with self.lock:
                self.snapshot = None

    def current_bands(self) -> np.ndarray:
        with self.lock:
            snapshot = self.snapshot
        if snapshot is None:
            return np.zeros(self.band_count, dtype=np.float32)
        return normalized_bands(snapshot, self.db_min, self.db_max, self.band_count)

    def create_layout(self) -> Layout:
        """Create the main UI layout."""
        layout = Layout()
        layout.split_column(
            Layout(name="header", size=3),
            Layout(name="main", ratio=1),
            Layout(name="footer", size=3)
        )
        layout["main"].split_row(
            Layout(name="spectrum_panel", ratio=3),
            Layout(name="stats_panel", ratio=1)
        )
        return layout

    def update_header(self, layout: Layout) -> None:
        status_text = "● CAPTURING" if self.service.is_running else "■ STOPPED"
        status_style = "bold red" if self.service.is_running else "bold yellow"
        header_text = Text.assemble(
            ("micscope - Real-time Spectrum", "bold blue"),
            "  |  ",
            (status_text, status_style),
        )
        layout["header"].update(Panel(Align.center(header_text), style="bright_blue"))

    def update_spectrum_panel(self, layout: Layout) -> None:
        bands = self.current_bands()
        with self.lock:
            snapshot = self.snapshot

        lines = render_bars(bands)
        if snapshot is not None:
            max_freq = float(snapshot.frequencies[-1])
            lines.append(render_frequency_axis(len(bands), max_freq, self.min_frequency))

        ticks = ", ".join(f"{int(t)}" for t in db_ticks(self.db_min, self.db_max))
        layout["spectrum_panel"].update(Panel(
            Text("\n".join(lines), style="green"),
            title=f"Spectrum ({self.db_min:.0f}..{self.db_max:.0f} dB)",
            subtitle=f"dB ticks: {ticks}",
            border_style="green"
        ))

    def update_stats_panel(self, layout: Layout) -> None:
        table = Table(title="Capture", show_header=True, header_style="bold magenta")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="white")

        capture_stats = self.service.audio_capture.get_recording_stats()
        analyzer_stats = self.service.analyzer.get_stats()
        with self.lock:
            snapshot = self.snapshot

        table.add_row("Duration", f"{capture_stats.duration_seconds:.1f}s")
        table.add_row("Sample rate", f"{analyzer_stats.sample_rate:.0f}Hz")
        table.add_row("Frame size", str(analyzer_stats.frame_size))
        table.add_row("Callbacks", str(capture_stats.total_callbacks))
        table.add_row("Overflows", str(capture_stats.input_overflows))
        table.add_row("Published", str(analyzer_stats.spectra_published))
        table.add_row("Dropped", str(analyzer_stats.spectra_dropped))

        peak = peak_frequency(snapshot)
        if peak:
            table.add_row("Peak", f"{peak[0]:.1f}Hz @ {peak[1]:.1f}dB")

        layout["stats_panel"].update(Panel(table, border_style="magenta"))

    def update_footer(self, layout: Layout) -> None:
        controls = Text.assemble(("Ctrl+C", "bold red"), " Quit")
        layout["footer"].update(Panel(Align.center(controls), style="bright_black"))

    def update_display(self, layout: Layout) -> None:
        """Update all display components."""
        self.update_header(layout)
        self.update_spectrum_panel(layout)
        self.update_stats_panel(layout)
        self.update_footer(layout)

    def run(self, duration: Optional[float] = None) -> None:
        """Draw until ``duration`` seconds pass or the user interrupts."""
        self.running = True
        layout = self.create_layout()
        started = time.monotonic()
        interval = 1.0 / self.refresh_per_second

        try:
            with Live(layout, refresh_per_second=self.refresh_per_second, screen=True,
                      console=self.console):
                while self.running:
                    self.update_display(layout)
                    if duration and time.monotonic() - started >= duration:
                        break
                    time.sleep(interval)
        except KeyboardInterrupt:
            logger.info("Keyboard interrupt received")
        finally:
            self.running = False

    def close(self) -> None:
        pub.unsubscribe(self._on_snapshot, self.service.publisher.topic)
        pub.unsubscribe(self._on_session_event, self.service.publisher.session_topic)
        logger.info(f"SpectrumScreen received {self.snapshots_received} snapshots")
