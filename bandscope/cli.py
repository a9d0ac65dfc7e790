"""Command-line interface for bandscope.

Provides commands for:
- analyze: File-level band energies and instrument detection
- stream: Real-time detection simulated over a file's spectral frames
- bands: Show the configured band profiles and ambiguous pairs
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from .config import DetectorConfig, default_batch_config, default_realtime_config, load_config
from .core import AnalysisTimeout

app = typer.Typer(
    name="bandscope",
    help="Multi-band instrument activity detection",
    rich_markup_mode="markdown",
)
console = Console()


@dataclass
class BandStats:
    """Running per-band statistics over a stream."""

    ticks: int = 0
    active_ticks: int = 0
    energy_sum: float = 0.0
    confidence_sum: float = 0.0

    def add(self, energy: float, active: bool, confidence: float) -> None:
        self.ticks += 1
        self.active_ticks += int(active)
        self.energy_sum += energy
        self.confidence_sum += confidence

    def to_dict(self) -> Dict[str, Any]:
        n = max(self.ticks, 1)
        return {
            "ticks": self.ticks,
            "mean_energy": self.energy_sum / n,
            "active_ratio": self.active_ticks / n,
            "mean_confidence": self.confidence_sum / n,
        }


@dataclass
class StreamSummary:
    """Aggregate of a simulated real-time run."""

    bands: Dict[str, BandStats] = field(default_factory=dict)
    ticks: int = 0
    skipped_ticks: int = 0
    duration: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticks": self.ticks,
            "skipped_ticks": self.skipped_ticks,
            "duration": self.duration,
            "bands": {name: stats.to_dict() for name, stats in self.bands.items()},
        }


def _load_config(config_path: Optional[Path], batch: bool) -> DetectorConfig:
    if config_path is None:
        return default_batch_config() if batch else default_realtime_config()
    try:
        return load_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _write_json(path: Path, data: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(data, f, indent=2)
    console.print(f"[green]Saved: {path}[/green]")


@app.command()
def analyze(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML band configuration (default: six batch bands)"
    ),
    json_output: Optional[Path] = typer.Option(
        None, "--json", "-j", help="Write the analysis document to this JSON file"
    ),
    stems: bool = typer.Option(
        False, "--stems", "-s", help="Also attempt stem separation (Demucs or fallback)"
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", "-t", help="Seconds allowed for band analysis"
    ),
    separation_timeout: Optional[float] = typer.Option(
        None, "--separation-timeout", help="Seconds to wait for stem separation"
    ),
):
    """Analyze a whole file: band energies and detected instruments.

    Examples:
        bandscope analyze song.wav
        bandscope analyze song.wav --json analysis.json
        bandscope analyze song.wav --stems --timeout 60
    """
    from .detection import BatchAnalyzer
    from .separation import StemSeparator

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    config = _load_config(config_path, batch=True)
    separator = StemSeparator() if stems else None
    analyzer = BatchAnalyzer(
        config=config,
        timeout=timeout,
        separator=separator,
        separation_timeout=separation_timeout,
    )

    console.print(f"\n[bold blue]Band Analysis: {input_file.name}[/bold blue]\n")
    if separator is not None and not separator.is_available:
        console.print("[yellow]Demucs not available, stems use band-filter fallback[/yellow]")

    try:
        with console.status("[cyan]Analyzing bands...[/cyan]"):
            report = analyzer.analyze_file(input_file)
    except AnalysisTimeout as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if report.metadata:
        console.print(f"   Duration: {report.metadata.duration:.2f}s")
        console.print(f"   Sample rate: {report.metadata.sample_rate} Hz")
        console.print(f"   Channels: {report.metadata.channels}\n")

    _show_band_table(report)
    _show_instrument_table(report)

    if report.separation is not None:
        if report.separation.succeeded:
            console.print(f"[cyan]Stems ({report.separation.method}):[/cyan]")
            for name, energy in report.separation.stem_energies().items():
                console.print(f"   {name}: rms {energy:.3f}")
        else:
            console.print(f"[yellow]Stem separation failed: {report.separation.error}[/yellow]")

    for message in report.diagnostics:
        console.print(f"[yellow]Warning: {message}[/yellow]")

    console.print(f"\n[green][OK] Analysis complete in {report.analysis_time:.2f}s[/green]")

    if json_output:
        _write_json(json_output, report.to_dict())


@app.command()
def stream(
    input_file: Path = typer.Argument(..., help="Input audio file"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML band configuration (default: real-time bands)"
    ),
    n_fft: int = typer.Option(2048, "--n-fft", help="FFT size; frames carry n_fft/2 bins"),
    smoothing: float = typer.Option(0.8, "--smoothing", help="Frame smoothing in [0, 1)"),
    json_output: Optional[Path] = typer.Option(
        None, "--json", "-j", help="Write the run summary to this JSON file"
    ),
):
    """Simulate real-time detection over a file, one tick per spectral frame.

    Examples:
        bandscope stream song.wav
        bandscope stream song.wav --n-fft 4096 --json stream.json
    """
    from .analysis import SpectralFrameSource
    from .detection import DetectionOrchestrator
    from .input import AudioLoader

    if not input_file.exists():
        console.print(f"[red]Error: File not found: {input_file}[/red]")
        raise typer.Exit(1)

    config = _load_config(config_path, batch=False)

    try:
        source = SpectralFrameSource(n_fft=n_fft, smoothing=smoothing)
        audio, sr = AudioLoader(target_sr=None, mono=True).load(input_file)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"\n[bold blue]Stream Detection: {input_file.name}[/bold blue]\n")

    detector = DetectionOrchestrator(config)
    summary = StreamSummary(duration=len(audio) / sr)
    start_time = time.time()

    frames = list(source.frames(audio, sr))
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Ticking...", total=len(frames))
        for frame in frames:
            report = detector.tick(frame)
            summary.ticks += 1
            if not report.ok:
                summary.skipped_ticks += 1
            for name, result in report.items():
                summary.bands.setdefault(name, BandStats()).add(
                    result.energy, result.active, result.confidence
                )
            progress.advance(task)

    _show_stream_table(summary)
    elapsed = time.time() - start_time
    console.print(
        f"\n[green][OK] {summary.ticks} ticks "
        f"({source.frame_rate(sr):.1f}/s of audio) in {elapsed:.2f}s[/green]"
    )
    if summary.skipped_ticks:
        console.print(f"[yellow]Skipped ticks: {summary.skipped_ticks}[/yellow]")

    if json_output:
        _write_json(json_output, summary.to_dict())


@app.command()
def bands(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML band configuration"
    ),
    batch: bool = typer.Option(
        False, "--batch", "-b", help="Show the batch defaults instead of real-time"
    ),
):
    """Show configured band profiles and ambiguous pairs."""
    config = _load_config(config_path, batch=batch)

    table = Table(title="Band Profiles")
    table.add_column("Band", style="cyan")
    table.add_column("Range (Hz)", style="green")
    table.add_column("Threshold", style="yellow")
    table.add_column("Kind", style="blue")
    table.add_column("Group", style="magenta")

    for profile in config.profiles:
        table.add_row(
            profile.name,
            f"{profile.low_hz:g}-{profile.high_hz:g}",
            f"{profile.threshold:.2f}",
            profile.kind.value,
            profile.parent_group or "-",
        )
    console.print(table)

    if config.pairs:
        console.print("\n[bold]Ambiguous pairs:[/bold]")
        for pair in config.pairs:
            console.print(
                f"  {pair.dominant} > {pair.suppressed} x{pair.ratio:g} "
                f"-> damp {pair.suppressed} by {pair.damping:g}"
            )


def _show_band_table(report):
    """Display per-band batch results in a table."""
    table = Table(title="Frequency Bands")
    table.add_column("Band", style="cyan")
    table.add_column("Range (Hz)", style="green")
    table.add_column("Energy", style="yellow")
    table.add_column("Active", style="blue")

    for profile in report.profiles:
        result = report.bands.get(profile.name)
        if result is None:
            continue
        table.add_row(
            profile.name,
            f"{profile.low_hz:g}-{profile.high_hz:g}",
            f"{result.energy:.3f}",
            "yes" if result.active else "no",
        )
    console.print(table)


def _show_instrument_table(report):
    """Display instrument detection results in a table."""
    table = Table(title="Instrument Detection")
    table.add_column("Instrument", style="cyan")
    table.add_column("Detected", style="green")
    table.add_column("Confidence", style="magenta")

    for name, detection in report.instruments.items():
        table.add_row(
            name.title(),
            "yes" if detection.detected else "no",
            f"{detection.confidence:.2f}",
        )
    console.print(table)


def _show_stream_table(summary: StreamSummary):
    """Display per-band stream statistics in a table."""
    table = Table(title="Stream Summary")
    table.add_column("Band", style="cyan")
    table.add_column("Mean Energy", style="yellow")
    table.add_column("Active %", style="green")
    table.add_column("Mean Confidence", style="magenta")

    for name, stats in summary.bands.items():
        data = stats.to_dict()
        table.add_row(
            name,
            f"{data['mean_energy']:.3f}",
            f"{data['active_ratio'] * 100:.1f}",
            f"{data['mean_confidence']:.2f}",
        )
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
