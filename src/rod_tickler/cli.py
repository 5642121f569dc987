import functools
import logging
import threading
from typing import Optional

import click
import requests
from rich.console import Console
from rich.table import Table
from rich.text import Text

from rod_tickler.errors import ProblemError
from rod_tickler.log import configure_logging
from rod_tickler.models.problem import MAX_ROD_LENGTH, MIN_ROD_LENGTH, Problem
from rod_tickler.models.step import Step
from rod_tickler.models.step_sequence import StepSequence
from rod_tickler.playback import DEFAULT_SPEED, SPEED_MAP_MS, AutoPlayer, PlaybackCursor, StepFeed
from rod_tickler.presets import DEFAULT_PRESET, PRESETS, get_preset
from rod_tickler.solver import solve
from rod_tickler.ui import dp_table, render, ui_loop
from rod_tickler.utils import PriceFormat, fit_prices, load_prices, parse_prices

DEFAULT_ENDPOINT = "http://127.0.0.1:8000"

console = Console()


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="warning",
    show_default=True,
)
@click.option("--json-logs", is_flag=True, help="Render log events as JSON")
def cli(log_level: str, json_logs: bool):
    configure_logging(getattr(logging, log_level.upper()), json_logs=json_logs)


def build_problem(
    preset: Optional[str],
    length: Optional[int],
    prices: Optional[str],
    prices_file: Optional[str],
    price_format: PriceFormat,
    fit: bool,
) -> Problem:
    """Turn command line input into a validated Problem."""
    if prices is not None and prices_file is not None:
        raise click.UsageError("Use either --prices or --prices-file, not both")

    try:
        if prices is not None:
            price_list = parse_prices(prices)
        elif prices_file is not None:
            price_list = load_prices(prices_file, price_format)
        else:
            selected = get_preset(preset or DEFAULT_PRESET)
            price_list = list(selected.prices)
            if length is None:
                length = selected.rod_length

        if length is None:
            length = len(price_list)
        if fit:
            price_list = fit_prices(price_list, length)
        return Problem(rod_length=length, prices=tuple(price_list))
    except KeyError as e:
        raise click.BadParameter(str(e.args[0]), param_hint="--preset")
    except ProblemError as e:
        raise click.ClickException(str(e))


def problem_options(fn):
    """Shared options that describe the problem to solve."""
    @click.option("--preset", "-P", type=click.Choice([p.id for p in PRESETS]), default=None)
    @click.option(
        "--length", "-n",
        type=click.IntRange(MIN_ROD_LENGTH, MAX_ROD_LENGTH),
        default=None,
        help="Rod length (defaults to the number of prices)",
    )
    @click.option("--prices", "-p", default=None, help='Prices for lengths 1..n, e.g. "1,5,8,9"')
    @click.option("--prices-file", "-f", type=click.Path(exists=True), default=None)
    @click.option(
        "--format",
        "price_format",
        type=click.Choice(["csv", "json", "lines"]),
        default="csv",
    )
    @click.option("--fit", is_flag=True, help="Pad with zero prices or truncate to the rod length")
    @functools.wraps(fn)
    def wrapper(preset, length, prices, prices_file, price_format, fit, **kwargs):
        problem = build_problem(preset, length, prices, prices_file, price_format, fit)
        return fn(problem=problem, **kwargs)
    return wrapper


KEYS = {
    " ": "toggle",
    "n": "next",
    "\x1b[C": "next",
    "p": "prev",
    "\x1b[D": "prev",
    "+": "faster",
    "=": "faster",
    "-": "slower",
    "0": "first",
    "$": "last",
    "r": "restart",
    "q": "quit",
}
KEY_HELP = "space play/pause  n/→ next  p/← prev  +/- speed  0 first  $ last  r restart  q quit"


def handle_key(auto: AutoPlayer, key: str) -> bool:
    """Apply one key press to the player. Returns False when the user quits."""
    action = KEYS.get(key)
    if action == "quit":
        auto.pause()
        return False
    elif action == "toggle":
        auto.toggle()
    elif action == "next":
        auto.step_forward()
    elif action == "prev":
        auto.step_backward()
    elif action == "faster":
        auto.set_speed(min(auto.speed + 1, len(SPEED_MAP_MS)))
    elif action == "slower":
        auto.set_speed(max(auto.speed - 1, 1))
    elif action == "first":
        auto.jump_to(0)
    elif action == "last":
        auto.jump_to(auto.cursor.sequence.last_index)
    elif action == "restart":
        sequence = auto.cursor.sequence
        auto.reset()
        auto.load(sequence)
        auto.play()
    return True


def read_keys(auto: AutoPlayer, feed: StepFeed[Step]) -> None:
    """Feed key presses to the player until quit, then close the feed."""
    try:
        while not feed.closed:
            if not handle_key(auto, click.getchar()):
                break
    except (KeyboardInterrupt, EOFError):
        auto.pause()
    finally:
        feed.close()


def player(sequence: StepSequence, speed: int, interactive: bool = False) -> Step:
    """Autoplay a sequence in a live view. Returns the last step shown.

    Interactive playback keeps the view open at the last step and reads
    key presses on a background thread until the user quits.
    """
    feed: StepFeed[Step] = StepFeed()
    cursor = PlaybackCursor()
    auto = AutoPlayer(cursor, feed.publish, None if interactive else feed.close, speed=speed)
    auto.load(sequence)
    auto.play()

    if interactive:
        console.print(Text(KEY_HELP, style="dim"))
        threading.Thread(target=read_keys, args=(auto, feed), daemon=True).start()

    try:
        ui_loop(feed, sequence)
    except KeyboardInterrupt:
        auto.pause()
        feed.close()

    return cursor.current


def print_summary(sequence: StepSequence):
    summary = sequence.summary()
    console.print(dp_table(sequence[sequence.last_index], sequence.problem.prices))
    console.print(f"Pieces: {' + '.join(str(p) for p in sequence.pieces)}")
    console.print(f"Max profit: ${summary.max_profit}")
    console.print(
        f"Steps: {summary.total_steps}  Comparisons: {summary.total_comparisons}  "
        f"Cuts: {summary.piece_count}"
    )


@cli.command("solve")
@problem_options
def solve_cmd(problem: Problem):
    """Solve a problem and print the final table and optimal cuts."""
    print_summary(solve(problem))


@cli.command()
@problem_options
def steps(problem: Problem):
    """List every step of the trace with its explanation."""
    sequence = solve(problem)
    table = Table(title=f"Rod length {problem.rod_length}: {len(sequence)} steps")
    table.add_column("#", justify="right")
    table.add_column("Phase", no_wrap=True)
    table.add_column("Row", justify="right")
    table.add_column("Cmp", justify="right")
    table.add_column("Explanation", overflow="fold")
    for step in sequence:
        row = "" if step.active_row is None else str(step.active_row)
        table.add_row(str(step.index), str(step.phase), row, str(step.comparisons), Text(step.rationale))
    console.print(table)


@cli.command()
@problem_options
@click.option("--step", "-s", "index", type=int, required=True, help="0-based step index")
def show(problem: Problem, index: int):
    """Render a single step of the trace."""
    sequence = solve(problem)
    try:
        step = sequence.step(index)
    except IndexError as e:
        raise click.BadParameter(str(e), param_hint="--step")
    console.print(render(step, sequence))


@cli.command()
@problem_options
@click.option(
    "--speed",
    type=click.IntRange(1, len(SPEED_MAP_MS)),
    default=DEFAULT_SPEED,
    show_default=True,
    help="1 (slowest) to 10 (fastest)",
)
@click.option("--interactive", "-i", is_flag=True, help="Step, pause and change speed from the keyboard")
def play(problem: Problem, speed: int, interactive: bool):
    """Play the trace step by step in a live view."""
    sequence = solve(problem)
    player(sequence, speed, interactive)
    print_summary(sequence)


@cli.command()
def presets():
    """List the built-in demo problems."""
    table = Table(title="Presets")
    table.add_column("Id")
    table.add_column("Label")
    table.add_column("n", justify="right")
    table.add_column("Prices")
    table.add_column("Description")
    for p in PRESETS:
        table.add_row(p.id, p.label, str(p.rod_length), ", ".join(str(x) for x in p.prices), p.description)
    console.print(table)


def fetch_preset(endpoint: str, preset_id: str) -> Problem:
    """Fetch a preset problem from a running demo API."""
    response = requests.get(f"{endpoint}/api/presets/{preset_id}", timeout=10)
    if response.status_code != 200:
        raise click.ClickException(
            f"Failed to get preset {preset_id!r} from {endpoint}: {response.status_code} {response.text}"
        )
    data = response.json()
    try:
        return Problem(rod_length=data["rod_length"], prices=tuple(data["prices"]))
    except ProblemError as e:
        raise click.ClickException(f"Demo API returned an invalid problem: {e}")


@cli.command()
@click.option("--preset", "-P", "preset_id", default=DEFAULT_PRESET, show_default=True)
@click.option("--endpoint", default=DEFAULT_ENDPOINT, show_default=True)
@click.option("--speed", type=click.IntRange(1, len(SPEED_MAP_MS)), default=DEFAULT_SPEED)
@click.option("--no-play", is_flag=True, help="Print the summary without playback")
@click.option("--interactive", "-i", is_flag=True, help="Step, pause and change speed from the keyboard")
def fetch(preset_id: str, endpoint: str, speed: int, no_play: bool, interactive: bool):
    """Fetch a preset from the demo API and play it."""
    problem = fetch_preset(endpoint, preset_id)
    sequence = solve(problem)
    if not no_play:
        player(sequence, speed, interactive)
    print_summary(sequence)


@cli.command("demo-api")
@click.option("--host", default="127.0.0.1", help="Host to bind the server to")
@click.option("--port", default=8000, help="Port to bind the server to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
def demo_api(host: str, port: int, reload: bool):
    """Start the demo API server that serves presets and solved traces."""
    import uvicorn
    from demo_api.api import app

    click.echo(f"Starting demo API server on http://{host}:{port}")
    click.echo("Available endpoints:")
    click.echo("  - GET  /api/presets              - List presets")
    click.echo("  - GET  /api/presets/{preset_id}  - One preset")
    click.echo("  - POST /api/solve                - Solve a problem and return its trace")
    click.echo("\nPress Ctrl+C to stop the server")

    if reload:
        uvicorn.run("demo_api.api:app", host=host, port=port, reload=True)
    else:
        uvicorn.run(app, host=host, port=port, reload=False)


if __name__ == "__main__":
    cli()
