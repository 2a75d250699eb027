"""Camera frame processing: image I/O, median filtering, erosion and component labelling."""

__version__ = "0.0.1"

__all__ = [
    "binmorph",
    "cmdlnopts",
    "draw",
    "fits",
    "imagefile",
    "labeling",
    "median",
    "watcher",
]