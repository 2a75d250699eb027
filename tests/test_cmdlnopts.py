import pytest

from loccorr.cmdlnopts import DEFAULT_PIDFILE, GlobalParams, parse_args


def test_defaults():
    gp = parse_args([])
    assert gp == GlobalParams()
    assert gp.pidfile == DEFAULT_PIDFILE == "/tmp/loccorr.pid"
    assert gp.throwpart == 0.5
    assert (gp.ndilations, gp.nerosions, gp.minarea) == (2, 2, 5)
    assert gp.intensthres == 0.01
    assert gp.inputname is None


def test_short_options():
    gp = parse_args(["-i", "dir", "-b", "0.25", "-r", "3", "-e", "1",
                     "-D", "4", "-E", "6", "-A", "10", "-T", "0.2",
                     "-l", "log.txt", "-P", "pid"])
    assert gp.inputname == "dir"
    assert gp.throwpart == 0.25
    assert gp.medradius == 3
    assert gp.equalize == 1
    assert gp.ndilations == 4
    assert gp.nerosions == 6
    assert gp.minarea == 10
    assert gp.intensthres == 0.2
    assert gp.logfile == "log.txt"
    assert gp.pidfile == "pid"


def test_long_options():
    gp = parse_args(["--input=img.fits", "--ndilat", "3", "--neros=1", "--intthres", "0.5"])
    assert gp.inputname == "img.fits"
    assert (gp.ndilations, gp.nerosions) == (3, 1)
    assert gp.intensthres == 0.5


def test_verbosity_counts():
    assert parse_args(["-vvv"]).verb == 3
    assert parse_args(["-v", "--verbose"]).verb == 2


def test_extra_parameters():
    with pytest.raises(SystemExit):
        parse_args(["unexpected"])


def test_bad_number():
    with pytest.raises(SystemExit):
        parse_args(["-r", "wide"])