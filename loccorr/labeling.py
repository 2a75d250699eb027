"""Labeling of 4-connected components on a binary image."""

from __future__ import annotations

import numpy as np


def _root(parent: list[int], mark: int) -> int:
    while parent[mark] != mark:
        mark = parent[mark]
    return mark


def _merge(parent: list[int], first: int, second: int) -> None:
    """Join two marks: the larger root is pointed at the smaller one."""
    a, b = _root(parent, first), _root(parent, second)
    if a > b:
        parent[a] = b
    else:
        parent[b] = a


def label_components(labels, width: int, height: int) -> tuple[np.ndarray, int]:
    """Label the 4-connected components of a binary image.

    Every non-zero element of `labels` is an object pixel. Returns an
    integer array shaped (height, width) where background stays 0 and
    the components are numbered from 1 in the order in which their first
    pixel is met in a row-by-row scan, together with the amount of
    components found.
    """
    if width < 1 or height < 1:
        raise ValueError("image size must be positive")
    arr = np.asarray(labels)
    if arr.size != width * height:
        raise ValueError("label array does not match the image size")
    grid = (arr.reshape(height, width) != 0).tolist()

    parent = [0]  # index 0 stands for the background
    marks: list[list[int]] = []
    above: list[int] = [0] * width
    for row in grid:
        current: list[int] = []
        found = False
        curmark = 0
        for pixel, up in zip(row, above):
            if not pixel:
                found = False
                current.append(0)
                continue
            if found:
                if up and up != curmark:
                    _merge(parent, up, curmark)
                    curmark = up
            else:
                found = True
                if up:
                    curmark = up
                else:
                    curmark = len(parent)
                    parent.append(curmark)
            current.append(curmark)
        marks.append(current)
        above = current

    indexes = [0] * len(parent)
    count = 0
    for mark in range(1, len(parent)):
        root = _root(parent, mark)
        if root == mark:
            count += 1
            indexes[mark] = count
        else:
            indexes[mark] = indexes[root]

    lookup = np.asarray(indexes, dtype=np.int64)
    result = lookup[np.asarray(marks, dtype=np.int64).reshape(height, width)]
    return result, count