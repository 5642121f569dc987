import logging
from collections import deque
from typing import Optional

from rich.console import Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rod_tickler import explain
from rod_tickler.log import LOGGER_NAME
from rod_tickler.models.step import Phase, Step
from rod_tickler.models.step_sequence import StepSequence
from rod_tickler.playback import StepFeed

EMPTY = "—"

COLORS = {
    "active": "bold yellow",
    "target": "bold magenta",
    "filled": "green",
    "empty": "dim",
    "best": "bold green",
    "current": "bold yellow on black",
    "code": "dim",
    "code_active": "bold black on yellow",
}

# Indexed by piece length - 1.
ROD_COLORS = [
    "blue", "purple", "green", "yellow", "red",
    "cyan", "magenta", "chartreuse3", "dark_orange", "slate_blue1",
    "dark_cyan", "deep_pink3", "medium_purple", "deep_sky_blue1", "orchid",
]

STATUS = {
    Phase.INIT: "Initializing…",
    Phase.COMPARING: "Filling DP table…",
    Phase.FILLED: "Filling DP table…",
    Phase.TRACEBACK: "Tracing optimal cuts…",
    Phase.COMPLETE: "Solution found ✓",
}

LOG_BUFFER = deque(maxlen=500)
LEVEL_STYLE = {
    logging.DEBUG: "dim",
    logging.INFO: "",
    logging.WARNING: "yellow",
    logging.ERROR: "red",
    logging.CRITICAL: "bold red",
}


class UILogHandler(logging.Handler):
    def emit(self, record):
        msg = self.format(record)
        LOG_BUFFER.append((record.levelno, msg))


def get_ui_log_handler() -> UILogHandler:
    uih = UILogHandler()
    uih.setFormatter(logging.Formatter("%(message)s"))
    return uih


def render_log_panel(title: str, max_lines: int) -> Panel:
    """Render exactly max_lines log entries (cropped to width, no wrap)."""
    items = list(LOG_BUFFER)[-max_lines:]
    if len(items) < max_lines:
        items = [("", "")] * (max_lines - len(items)) + items

    grid = Table.grid(padding=(0, 0))
    grid.add_column(no_wrap=True, overflow="crop")
    for lvl, msg in items:
        style = LEVEL_STYLE.get(lvl, "")
        grid.add_row(Text(msg, style=style))
    return Panel(grid, title=title, padding=(0, 1))


def dp_table(step: Step, prices) -> Table:
    """The dp/cut table with the active, target and resolved rows highlighted."""
    table = Table(title="DP Table", show_lines=False, padding=(0, 1))
    table.add_column("Length", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Max Profit", justify="right")
    table.add_column("Cut", justify="right")

    for i in range(step.rod_length + 1):
        resolved = i <= step.filled_up_to
        profit = str(step.dp[i]) if resolved else EMPTY
        cut = str(step.cut[i]) if resolved and i > 0 else EMPTY
        price = str(prices[i - 1]) if i > 0 else EMPTY

        if i == step.active_row:
            style = COLORS["active"]
        elif i == step.target_row:
            style = COLORS["target"]
        elif resolved:
            style = COLORS["filled"]
        else:
            style = COLORS["empty"]
        table.add_row(str(i), price, profit, cut, style=style)
    return table


def formula_panel(step: Step) -> Panel:
    if not step.formula:
        if step.phase == Phase.COMPLETE:
            idle = "Algorithm complete. The DP table holds all optimal values."
        else:
            idle = "The DP recurrence appears here while the table fills."
        return Panel(Text(idle, style="dim"), title="Formula")

    if step.phase == Phase.FILLED:
        target = f"dp[{step.active_row}] = {step.best_profit}"
    else:
        target = f"dp[{step.active_row}] = max(...)"

    lines = [Text(target, style="bold")]
    for row in step.formula:
        text = explain.describe_formula_row(
            row.j, row.remainder_length, row.price, row.remainder_profit, row.total
        )
        style = ""
        if row.is_best:
            text += "  ← Best"
            style = COLORS["best"]
        if row.j == step.comparing_j:
            style = COLORS["current"]
        lines.append(Text(text, style=style))

    if step.phase == Phase.FILLED:
        lines.append(Text(
            f"Best: cut {explain.units(step.best_cut)} → profit = {step.best_profit}",
            style=COLORS["best"],
        ))
    return Panel(Group(*lines), title="Formula")


def rod_panel(step: Step, prices) -> Panel:
    """Draw the rod whole, or cut into the pieces found so far."""
    if not step.pieces:
        bar = Text(f" {step.rod_length} ".center(step.rod_length * 4), style="black on grey70")
        return Panel(bar, title="Rod")

    bar = Text()
    labels = Text()
    for piece in step.pieces:
        color = ROD_COLORS[(piece - 1) % len(ROD_COLORS)]
        width = piece * 4
        bar.append(str(piece).center(width - 1), style=f"black on {color}")
        bar.append(" ")
        labels.append(f"${prices[piece - 1]}".center(width - 1))
        labels.append(" ")
    return Panel(Group(bar, labels), title="Rod")


def code_panel(step: Step) -> Panel:
    lines = []
    for number, line in enumerate(explain.PSEUDOCODE):
        style = COLORS["code_active"] if number in step.code_lines else COLORS["code"]
        lines.append(Text(line, style=style))
    return Panel(Group(*lines), title="Pseudocode")


def stats_header(step: Step, sequence: StepSequence) -> Text:
    parts = [
        f"Step {step.index} / {sequence.last_index}",
        str(step.phase),
        f"Comparisons {step.comparisons}",
    ]
    if step.pieces:
        parts.append(f"Cuts {len(step.pieces)}")
    if step.phase == Phase.COMPLETE:
        parts.append(f"Max profit ${step.max_profit}")
    parts.append(STATUS[step.phase])
    return Text("  |  ".join(parts), style="bold")


def render(step: Optional[Step], sequence: Optional[StepSequence], log_lines: int = 0):
    """Render one frame of the visualization."""
    if step is None or sequence is None:
        return Panel("Waiting for first step…", title="Rod Cutting", border_style="dim")

    prices = sequence.problem.prices
    body = Table.grid(padding=(0, 2))
    body.add_column()
    body.add_column()
    body.add_row(dp_table(step, prices), Group(formula_panel(step), code_panel(step)))

    parts = [
        stats_header(step, sequence),
        body,
        rod_panel(step, prices),
        Panel(Text(step.rationale), title="Explanation"),
    ]
    if log_lines:
        parts.append(render_log_panel("Logs", log_lines))
    return Group(*parts)


def ui_loop(feed: StepFeed[Step], sequence: StepSequence, log_lines: int = 5) -> None:
    """Loop the UI until the feed is closed."""
    logger = logging.getLogger(LOGGER_NAME)
    handler = get_ui_log_handler()
    logger.addHandler(handler)
    propagate = logger.propagate
    logger.propagate = False

    try:
        with Live(render(None, None), refresh_per_second=30, screen=False) as live:
            while True:
                step = feed.get()
                if step is None:
                    break
                live.update(render(step, sequence, log_lines))
    finally:
        logger.removeHandler(handler)
        logger.propagate = propagate
