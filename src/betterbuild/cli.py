# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from betterbuild import process
from betterbuild.config import BuildConfig, DEFAULT_BUILDFILE
from betterbuild.errors import BuildError, ProcessNotFoundError
from betterbuild.executor import Executor
from betterbuild.loader import find_buildfiles, load_buildfile
from betterbuild.ui.console import Console, set_console, get_console
from betterbuild.watch import PollingTrigger, Watcher


def discover_buildfile(buildfile_arg: str | None) -> Path:
    """
    Discover buildfile from argument or default.

    Raises:
        SystemExit: If no buildfile or more than one candidate exists
    """
    console = get_console()

    if buildfile_arg:
        path = Path(buildfile_arg)
        if not path.exists() and path.suffix != ".py":
            path = Path(str(path) + ".py")
        if not path.exists():
            console.print_error(
                "Buildfile not found",
                f"Could not find buildfile: {buildfile_arg}",
                suggestion="Create a buildfile or specify a different path:\n  betterbuild run --buildfile my_buildfile.py <task>",
            )
            sys.exit(1)
        return path

    candidates = find_buildfiles()

    if len(candidates) == 0:
        console.print_error(
            "No buildfile found",
            "Could not find any buildfile.",
            details=["Looked for:", f"  {DEFAULT_BUILDFILE}", "  *_buildfile.py"],
            suggestion=f"Create {DEFAULT_BUILDFILE} or specify one explicitly:\n  betterbuild run --buildfile my_buildfile.py <task>",
        )
        sys.exit(1)

    if len(candidates) > 1:
        console.print_error(
            "Multiple buildfiles found",
            "Found multiple buildfiles. Please specify which one to use:",
            details=["\n".join(f"  {f}" for f in candidates)],
            suggestion=f"Specify a buildfile explicitly:\n  betterbuild run --buildfile {DEFAULT_BUILDFILE} <task>",
        )
        sys.exit(1)

    return candidates[0]


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """betterbuild: declarative task graph runner for builds."""
    set_console(Console(debug=debug))
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["config"] = BuildConfig.from_env()


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.option("--buildfile", default=None, help="Buildfile path (defaults to buildfile.py if present)")
@click.option("--workers", default=None, type=int, help="Number of parallel workers")
@click.option("--watch", is_flag=True, default=False, help="Re-run the task whenever watched files change")
@click.option("--print-plan/--no-print-plan", default=False, show_default=True, help="Print execution stages")
@click.pass_context
def run(ctx, names, buildfile, workers, watch, print_plan):
    """Run one task, or several strictly in the given order."""
    console = get_console()
    config: BuildConfig = ctx.obj["config"]

    path = discover_buildfile(buildfile or config.buildfile)

    try:
        bf = load_buildfile(path)
        console.print_run_started(
            buildfile=path.name,
            task=" -> ".join(names),
            task_count=len(bf.registry),
        )
        executor = Executor(
            bf.registry,
            max_workers=workers or config.workers,
            print_plan=print_plan,
        )

        if watch:
            if len(names) > 1:
                raise click.UsageError("--watch takes a single task name")
            name = names[0]
            # validate the graph up front; a broken graph would fail every re-run
            executor.plan(name)
            trigger = PollingTrigger(bf.watch, root=bf.path.parent, interval=config.poll_interval)
            watcher = Watcher(executor, name, trigger)
            console.print_watch_started(name, bf.watch)
            watcher.start()
            try:
                watcher.join()
            except KeyboardInterrupt:
                watcher.stop()
                console.print_info("\nStopped watching")
            return

        if len(names) == 1:
            result = executor.run(names[0])
        else:
            result = executor.run_sequence(*names)

        console.print_results(result.statuses)

        if not result.ok:
            console.print_error(
                "Build failed",
                f"Task '{result.failed_task}' failed",
                details=[str(result.error)],
            )
            sys.exit(1)

    except click.UsageError:
        raise
    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except BuildError as e:
        console.print_error(type(e).__name__, str(e))
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@cli.command(name="list")
@click.option("--buildfile", default=None, help="Buildfile path (defaults to buildfile.py if present)")
@click.pass_context
def list_tasks(ctx, buildfile):
    """List the tasks a buildfile declares."""
    console = get_console()
    config: BuildConfig = ctx.obj["config"]
    path = discover_buildfile(buildfile or config.buildfile)

    try:
        bf = load_buildfile(path)
    except BuildError as e:
        console.print_error("Failed to load buildfile", str(e))
        sys.exit(1)

    console.print_header(f"Tasks in {path.name}")
    for name, t in sorted(bf.registry.items()):
        line = f"  {name}"
        if t.needs:
            sep = " -> " if t.ordered else ", "
            line += f"  [{sep.join(t.needs)}]"
        if t.description:
            line += f"  {t.description}"
        console.print_info(line)

    for dependent, missing in sorted(bf.registry.unresolved().items()):
        console.print_info(f"  warning: '{dependent}' needs unknown {missing}")


@cli.command()
@click.option("--pid-file", default=None, help="Pid file of the background process (default .dev.pid)")
@click.pass_context
def stop(ctx, pid_file):
    """Stop a background process started by a serve task."""
    console = get_console()
    config: BuildConfig = ctx.obj["config"]

    try:
        pid = process.stop(pid_file or config.pid_file)
    except ProcessNotFoundError as e:
        console.print_error("Server process does not exist", str(e))
        sys.exit(1)
    console.print_info(f"Stopped process {pid}")


if __name__ == "__main__":
    cli()
