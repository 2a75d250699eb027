"""Command-line options of the corrector."""

from __future__ import annotations

import argparse
from dataclasses import asdict, dataclass

DEFAULT_PIDFILE = "/tmp/loccorr.pid"


@dataclass
class GlobalParams:
    """Global parameters set from the command line."""

    pidfile: str = DEFAULT_PIDFILE
    logfile: str | None = None
    inputname: str | None = None
    throwpart: float = 0.5
    equalize: int = 0
    medradius: int = 1
    verb: int = 0
    ndilations: int = 2
    nerosions: int = 2
    minarea: int = 5
    intensthres: float = 0.01


def _parser() -> argparse.ArgumentParser:
    d = GlobalParams()
    p = argparse.ArgumentParser(prog="loccorr")
    p.add_argument("-l", "--logfile", default=d.logfile,
                   help="file to save logs (default: none)")
    p.add_argument("-P", "--pidfile", default=d.pidfile,
                   help=f"pidfile (default: {DEFAULT_PIDFILE})")
    p.add_argument("-v", "--verbose", dest="verb", action="count", default=d.verb,
                   help="increase verbosity level of log file (each -v increased by 1)")
    p.add_argument("-i", "--input", dest="inputname", default=d.inputname,
                   help="file or directory name for monitoring")
    p.add_argument("-b", "--blackp", dest="throwpart", type=float, default=d.throwpart,
                   help="fraction of black pixels to throw away when make histogram eq")
    p.add_argument("-r", "--radius", dest="medradius", type=int, default=d.medradius,
                   help="radius of median filter (r=1 -> 3x3, r=2 -> 5x5 etc.)")
    p.add_argument("-e", "--equalize", type=int, default=d.equalize,
                   help="make histogram equalization of saved jpeg")
    p.add_argument("-D", "--ndilat", dest="ndilations", type=int, default=d.ndilations,
                   help="amount of dilations after erosions (default: 2)")
    p.add_argument("-E", "--neros", dest="nerosions", type=int, default=d.nerosions,
                   help="amount of erosions after thresholding (default: 2)")
    p.add_argument("-A", "--minarea", type=int, default=d.minarea,
                   help="minimal object pixels amount (default: 5)")
    p.add_argument("-T", "--intthres", dest="intensthres", type=float, default=d.intensthres,
                   help="threshold by total object intensity when sorting = "
                        "|I1-I2|/(I1+I2), default: 0.01")
    return p


def parse_args(argv=None) -> GlobalParams:
    """Parse command-line arguments; extra positional arguments are an error."""
    ns = _parser().parse_args(argv)
    values = vars(ns)
    return GlobalParams(**{key: values[key] for key in asdict(GlobalParams())})