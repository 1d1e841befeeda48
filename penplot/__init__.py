"""Path filters, CoreXY motion planning and AxiDraw command spooling for pen plotters."""

__version__ = "0.1.0"