# tools/simulate_pool.py

import argparse
import multiprocessing
from functools import partial
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeElapsedColumn

from config.config_loader import DEFAULT_CONFIG, load_config, machine_options
from logger.logger import JSONLogger
from simulator.errors import MachineDefinitionError
from simulator.evaluator import run_machine
from tools.machine_loader import load_machine

console = Console()

# === Utility Loaders ===
def discover_machines(source):
    """A directory yields its *.json files (sorted); a file yields itself."""
    source = Path(source)
    if source.is_dir():
        return sorted(source.glob("*.json"))
    if source.exists():
        return [source]
    raise FileNotFoundError(f"No machine definitions at {source}")

# === Single Machine ===
def simulate_machine(path, options=None, max_steps=10000):
    """Load and run one definition. Broken definitions come back as an 'error' entry."""
    entry = {"machine_id": Path(path).stem, "path": str(path)}
    try:
        machine = load_machine(path, options)
    except (MachineDefinitionError, FileNotFoundError) as e:
        entry.update({"status": "error", "error": str(e)})
        return entry

    entry.update(run_machine(machine, max_steps=max_steps).to_dict())
    return entry

# === Result Logging ===
def flush_results(logger, entries):
    """Append a batch of entries to the summary log and the per-outcome logs."""
    if not entries:
        return
    logger.log_summary(entries)
    logger.log_halting([e for e in entries if e["status"] == "halted"])
    logger.log_stuck([e for e in entries if e["status"] == "stuck"])

# === Main Simulation Runner ===
def simulate_pool(sources=None, config=None, workers=1, max_steps=None):
    config = config or DEFAULT_CONFIG
    sources = sources or [config["machines_directory"]]
    max_steps = config["max_steps"] if max_steps is None else max_steps
    log_frequency = config["log_frequency"]
    logger = JSONLogger(config["output_directory"], config["log_file_prefix"])

    paths = []
    for source in sources:
        paths.extend(discover_machines(source))
    console.print(f"[cyan]Loaded {len(paths):,} machine definitions.[/cyan]")

    run_one = partial(simulate_machine, options=machine_options(config), max_steps=max_steps)
    results = []
    pending = []  # written out every log_frequency machines

    def record(entry):
        results.append(entry)
        pending.append(entry)
        if entry["status"] == "error":
            console.print(f"[yellow]WARNING: failed to load {escape(entry['path'])}: {escape(entry['error'])}[/yellow]")
        if len(pending) >= log_frequency:
            flush_results(logger, pending)
            pending.clear()

    with Progress(
            SpinnerColumn(),
            BarColumn(),
            "[progress.percentage]{task.percentage:>3.0f}%",
            TextColumn("{task.completed}/{task.total} Machines"),
            TimeElapsedColumn(),
            console=console
    ) as progress:
        task = progress.add_task("[cyan]Simulating...", total=len(paths))

        if workers > 1:
            with multiprocessing.Pool(processes=workers) as pool:
                for entry in pool.imap(run_one, paths):
                    record(entry)
                    progress.update(task, advance=1)
        else:
            for path in paths:
                record(run_one(path))
                progress.update(task, advance=1)

    flush_results(logger, pending)

    halted = sum(1 for e in results if e["status"] == "halted")
    stuck = sum(1 for e in results if e["status"] == "stuck")
    console.print(f"[green]Done: {halted} halted, {stuck} stuck, {len(results) - halted - stuck} other.[/green]")
    return results

def main(argv=None):
    parser = argparse.ArgumentParser(description="Run a pool of Turing machine definitions")
    parser.add_argument("sources", nargs="*", help="Definition files or directories of *.json files "
                                                   "(default: the configured machines_directory)")
    parser.add_argument("--config", default=None, help="Runtime config JSON")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes")
    parser.add_argument("--max-steps", type=int, default=None, help="Step limit per machine")
    args = parser.parse_args(argv)

    config = load_config(args.config) if args.config else DEFAULT_CONFIG
    simulate_pool(args.sources, config, workers=args.workers, max_steps=args.max_steps)
    return 0

if __name__ == "__main__":
    main()
