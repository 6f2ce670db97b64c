"""Plot rendering."""

from nummi.services.plot.gnuplot import GnuplotRenderer, PlotError, build_script

__all__ = ["GnuplotRenderer", "PlotError", "build_script"]
