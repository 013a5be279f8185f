"""CLI entrypoint for mileage pricing."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.markup import escape

from mileage_pricing.args import OptionKind, OptionSpec, ParsedOptions, parse_options
from mileage_pricing.config import load_config
from mileage_pricing.dataset import load_dataset
from mileage_pricing.estimator import estimate_price
from mileage_pricing.exceptions import (
    DatasetLoadError,
    DegenerateDatasetError,
    InvalidConfigError,
    ThetaFileError,
)
from mileage_pricing.metrics import evaluate_fit
from mileage_pricing.models import AppConfig, Theta
from mileage_pricing.normalizer import denormalize_theta, normalize
from mileage_pricing.theta_store import DEFAULT_THETA_PATH, load_theta, save_theta
from mileage_pricing.tracing import RunTraceCollector, TraceEvent
from mileage_pricing.trainer import train

app = typer.Typer(help="Fit and query a linear price-by-distance model.")
console = Console()

_PASSTHROUGH = {"ignore_unknown_options": True}

_CONFIG_SPEC = OptionSpec("config", ("-c", "--config"), OptionKind.PATH, "Optional YAML config")
_QUIET_SPEC = OptionSpec(
    "quiet", ("-q", "--quiet"), OptionKind.FLAG, "Disable verbose progress", default=False
)
_THETA_SPEC = OptionSpec(
    "theta_path", ("-f", "--file"), OptionKind.PATH, "The theta coefficient file path"
)

TRAIN_SPECS: tuple[OptionSpec, ...] = (
    OptionSpec(
        "dataset_path",
        ("-d", "--dataset"),
        OptionKind.PATH,
        "The learning dataset, csv formatted with column headers",
    ),
    _THETA_SPEC,
    OptionSpec("learning_rate", ("-r", "--ratio"), OptionKind.FLOAT, "The learning ratio"),
    OptionSpec(
        "tolerance",
        ("--tolerance",),
        OptionKind.FLOAT,
        "Stop once no coefficient moves by more than this (0 means exact fixed point)",
    ),
    OptionSpec(
        "max_iterations", ("--max-iterations",), OptionKind.INT, "Iteration cap, unbounded if unset"
    ),
    OptionSpec(
        "progress_every",
        ("--progress-every",),
        OptionKind.INT,
        "Report progress every N iterations",
    ),
    OptionSpec("separator", ("-s", "--separator"), OptionKind.STRING, "Dataset column separator"),
    OptionSpec("trace_dir", ("--trace-dir",), OptionKind.PATH, "Write trace.json/trace.csv here"),
    _CONFIG_SPEC,
    _QUIET_SPEC,
)

ESTIMATE_SPECS: tuple[OptionSpec, ...] = (_THETA_SPEC, _CONFIG_SPEC, _QUIET_SPEC)

_NOT_CONFIG_KEYS = {"config", "quiet"}


def _vprint(enabled: bool, message: str) -> None:
    """Print verbose progress messages."""
    if enabled:
        console.print(f"[cyan]verbose:[/cyan] {escape(message)}")


def _warn(message: str) -> None:
    console.print(f"[yellow]{escape(message)}[/yellow]")


def _error(message: str) -> None:
    console.print(f"[red]{escape(message)}[/red]")


def _configure_trace_streaming(trace: RunTraceCollector, enabled: bool) -> None:
    """Enable live trace-event printing in verbose mode."""
    if not enabled:
        trace.set_live_sink(None)
        return

    def _sink(event: TraceEvent) -> None:
        parts = [
            f"trace[{event.seq}]",
            f"{event.component}.{event.action}",
            f"status={event.status}",
        ]
        if event.iteration is not None:
            parts.append(f"iteration={event.iteration}")
        if event.elapsed_ms is not None:
            parts.append(f"elapsed_ms={event.elapsed_ms}")
        parts.extend(f"{key}={value}" for key, value in event.details.items())
        _vprint(True, " ".join(parts))

    trace.set_live_sink(_sink)


def _usage(specs: tuple[OptionSpec, ...]) -> str:
    return "Options (name=value):\n" + "\n".join(f"  {spec.usage()}" for spec in specs)


def _load_runtime_config(parsed: ParsedOptions) -> AppConfig:
    overrides: dict[str, Any] = {
        key: value for key, value in parsed.values.items() if key not in _NOT_CONFIG_KEYS
    }
    if "quiet" in parsed.values:
        overrides["verbose"] = not parsed.values["quiet"]
    try:
        return load_config(config_path=parsed.get("config"), overrides=overrides)
    except InvalidConfigError as exc:
        _error(str(exc))
        raise typer.Exit(code=3) from exc


@app.command("train", context_settings=_PASSTHROUGH, epilog=_usage(TRAIN_SPECS))
def train_cmd(
    tokens: Annotated[
        list[str] | None,
        typer.Argument(help="Options written as name=value, e.g. -r=0.5 --dataset=data.csv."),
    ] = None,
) -> None:
    """Fit theta on a dataset by batch gradient descent and save it."""
    parsed = parse_options(tokens or [], TRAIN_SPECS)
    parsed.report_unrecognized()
    for message in parsed.errors:
        _warn(message)
    config = _load_runtime_config(parsed)
    verbose = config.verbose

    trace = RunTraceCollector()
    _configure_trace_streaming(trace, verbose)
    trace.log(
        "cli",
        "config_loaded",
        dataset_path=config.dataset_path,
        theta_path=config.theta_path,
        learning_rate=config.learning_rate,
        tolerance=config.tolerance,
        max_iterations=config.max_iterations,
    )

    try:
        raw = load_dataset(Path(config.dataset_path), separator=config.separator)
    except DatasetLoadError as exc:
        _error(str(exc))
        _finish_trace(trace, config, status="error")
        raise typer.Exit(code=2) from exc
    for message in raw.parser_errors:
        _warn(message)
    _vprint(verbose, f"Loaded {len(raw)} dataset entries from {config.dataset_path}.")
    trace.log("dataset", "loaded", entries=len(raw), diagnostics=len(raw.parser_errors))

    try:
        normalized = normalize(raw)
    except DegenerateDatasetError as exc:
        _error(str(exc))
        _finish_trace(trace, config, status="error")
        raise typer.Exit(code=2) from exc

    def _progress(iteration: int, elapsed_s: float, theta: Theta) -> None:
        console.print(f"{iteration} iterations in {elapsed_s:.3f}s")
        console.print(f"Theta is currently ({theta.intercept!r}, {theta.slope!r})")
        trace.log(
            "trainer",
            "progress",
            status="running",
            iteration=iteration,
            elapsed_ms=int(elapsed_s * 1000),
        )

    _vprint(verbose, f"Training with learning rate {config.learning_rate}.")
    result = train(
        normalized,
        config.learning_rate,
        tolerance=config.tolerance,
        max_iterations=config.max_iterations,
        progress_every=config.progress_every,
        progress_callback=_progress,
    )
    console.print(f"Done {result.iterations} iterations in {result.elapsed_s:.3f}s")
    if not result.converged:
        _warn(f"Stopped at the {result.iterations} iteration cap before converging.")
    theta = denormalize_theta(raw, result.theta)
    trace.log(
        "trainer",
        "finished",
        status="ok" if result.converged else "capped",
        iteration=result.iterations,
        elapsed_ms=int(result.elapsed_s * 1000),
        intercept=theta.intercept,
        slope=theta.slope,
    )

    try:
        saved_path = save_theta(theta, Path(config.theta_path))
    except ThetaFileError as exc:
        _error(str(exc))
        _finish_trace(trace, config, status="error")
        raise typer.Exit(code=4) from exc
    trace.log("theta_store", "saved", path=str(saved_path))
    console.print(
        f"[green]Theta saved.[/green] intercept={theta.intercept!r} "
        f"slope={theta.slope!r} -> {escape(str(saved_path))}"
    )

    if raw.entries:
        report = evaluate_fit(raw, theta)
        console.print(f"Fit: mae={report.mae} rmse={report.rmse} r2={report.r2}")
    _finish_trace(trace, config, status="ok")


@app.command("estimate", context_settings=_PASSTHROUGH, epilog=_usage(ESTIMATE_SPECS))
def estimate_cmd(
    tokens: Annotated[
        list[str] | None,
        typer.Argument(help="Kilometer values to price, plus options such as -f=theta."),
    ] = None,
) -> None:
    """Estimate prices with saved theta, interactively when no value is given."""
    parsed = parse_options(tokens or [], ESTIMATE_SPECS)
    for message in parsed.errors:
        _warn(message)
    parsed.errors.clear()
    config = _load_runtime_config(parsed)

    theta_path = Path(config.theta_path)
    theta = load_theta(
        theta_path if theta_path != DEFAULT_THETA_PATH else None,
        log=_warn,
    )
    _vprint(config.verbose, f"Using theta ({theta.intercept!r}, {theta.slope!r}).")

    distances: list[float] = []
    for idx, token in parsed.unused():
        try:
            distances.append(float(token))
        except ValueError:
            continue
        parsed.mark_used(idx)
    for message in parsed.report_unrecognized():
        _warn(message)

    if not distances:
        _interactive_loop(theta)
        return

    rows = [(f"{km:.3f} km", f"{estimate_price(km, theta):.2f} $") for km in distances]
    km_width = max(len(km_text) for km_text, _ in rows)
    price_width = max(len(price_text) for _, price_text in rows)
    for km_text, price_text in rows:
        console.print(f"{km_text:>{km_width}} is priced {price_text:>{price_width}}")


def _interactive_loop(theta: Theta) -> None:
    console.print("Please type in a float kilometer value, or exit to exit")
    console.print("> ", end="")
    for line in sys.stdin:
        value = line.strip()
        if value == "exit":
            break
        try:
            km = float(value)
        except ValueError:
            console.print("Value must be <float> or exit")
        else:
            console.print(f"{km:.3f} km is priced {estimate_price(km, theta):.2f} $")
        console.print("> ", end="")


def _finish_trace(trace: RunTraceCollector, config: AppConfig, status: str) -> None:
    trace.log("cli", "finished", status=status)
    if config.trace_dir is None:
        return
    trace_dir = Path(config.trace_dir)
    trace.write_json(trace_dir / "trace.json")
    trace.write_csv(trace_dir / "trace.csv")
    _vprint(config.verbose, f"Trace artifacts written to {trace_dir}")


def main() -> None:
    """Script entrypoint."""
    app()


if __name__ == "__main__":
    main()
