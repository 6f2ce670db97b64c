"""
Gnuplot Renderer

Renders the monthly series as a PNG by piping an inline data block and
a fixed script into gnuplot:

- blue boxes: monthly inflow
- red boxes: monthly outflow
- yellow line: monthly net
- green line (right axis): cumulative sum

The renderer only consumes the text layout of SeriesRow.to_line().
"""

import subprocess
from pathlib import Path
from typing import Iterable, Optional, Union

from nummi.queries.series import SeriesRow, format_series


PLOT_SCRIPT = r"""
set term png size {width},{height}
set output '{output}'
set grid
set xtics 3 * 30 * 24 * 60 * 60
set ytics nomirror
set y2tics
set xdata time
set format x "%Y-%m"
set timefmt "%Y-%m"
w = 15 * 24 * 60 * 60
o(x) = (x + 200 * (x < 0 ? -1 : 1))
plot \
	$d using 1:2:(w)     with boxes  lc "blue"        title "in", \
	$d using 1:(o($2)):2 with labels tc "blue"        notitle, \
	$d using 1:3:(w)     with boxes  lc "red"         title "out", \
	$d using 1:(o($3)):3 with labels tc "red"         notitle, \
	$d using 1:4         with lines  lc "dark-yellow" title "net", \
	$d using 1:4:4       with labels tc "dark-yellow" notitle, \
	$d using 1:5         with lines  lc "dark-green"  title "sum" axes x1y2, \
	$d using 1:5:5       with labels tc "dark-green"  notitle axes x1y2
"""

# Pixels per month on the x axis
MONTH_WIDTH = 64
MIN_WIDTH = 1024
HEIGHT = 1080


class PlotError(Exception):
    """gnuplot is missing or failed."""
    pass


def build_script(rows: list[SeriesRow], output: Union[str, Path]) -> str:
    """Complete gnuplot input: data block followed by the plot script."""
    width = max(MIN_WIDTH, MONTH_WIDTH * len(rows))
    output = str(output).replace("'", "''")
    return (
        "$d <<EOD\n"
        + format_series(rows)
        + "EOD\n"
        + PLOT_SCRIPT.format(width=width, height=HEIGHT, output=output)
    )


class GnuplotRenderer:
    """Runs gnuplot as a subprocess."""

    def __init__(self, command: str = "gnuplot", timeout: Optional[float] = 60.0):
        self._command = command
        self._timeout = timeout

    def render(self, rows: Iterable[SeriesRow], output: Union[str, Path]) -> Path:
        """
        Write the plot of rows to output as PNG.

        Raises:
            PlotError: If there is nothing to plot, gnuplot cannot be
                started, or it exits with an error
        """
        rows = list(rows)
        if not rows:
            raise PlotError("no data to plot")

        script = build_script(rows, output)
        try:
            result = subprocess.run(
                [self._command],
                input=script,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as e:
            raise PlotError(f"{self._command} not found; install gnuplot to plot") from e
        except subprocess.TimeoutExpired as e:
            raise PlotError(f"{self._command} timed out") from e

        if result.returncode != 0:
            raise PlotError(
                f"{self._command} exited with status {result.returncode}: "
                f"{result.stderr.strip()}"
            )
        return Path(output)
