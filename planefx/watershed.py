"""Watershed segmentation by immersion (Vincent-Soille flooding).

Pixels are flooded level by level in ascending order of value. Every pixel
reached gets the number of the basin it drains into, and pixels where two
basins meet are marked as watershed.
"""

from __future__ import annotations

from collections import deque
from typing import Dict, List, Optional, Tuple

import numpy as np

_INIT = -1
_MASK = -2
_WSHED = 0

_NEIGHBOURS_4 = ((-1, 0), (0, -1), (0, 1), (1, 0))
_NEIGHBOURS_8 = tuple(
    (s, t) for s in (-1, 0, 1) for t in (-1, 0, 1) if (s, t) != (0, 0)
)
_CORNERS = ((1, -1), (-1, -1), (1, 1), (-1, 1))


def _group_levels(flat: np.ndarray) -> Tuple[List, Dict[object, List[int]]]:
    order = np.argsort(flat, kind="stable").tolist()
    values = flat.tolist()
    levels: Dict[object, List[int]] = {}
    for idx in order:
        levels.setdefault(values[idx], []).append(idx)
    return [values[order[0]], values[order[-1]]], levels


def watershed(image, connect4: bool = True) -> Tuple[np.ndarray, np.ndarray]:
    """Segment a 2-D image into basins.

    Returns ``(tags, watershed_mask)``. ``tags`` holds the basin number
    (from 1) of every pixel, or -1 for pixels whose value is not a whole
    number and so is never reached by the integer flooding levels.
    ``watershed_mask`` is True on watershed pixels. With ``connect4`` False,
    diagonal neighbours are connected too.
    """
    img = np.asarray(image)
    if img.ndim != 2:
        raise ValueError(f"image must be 2-D, got {img.ndim} dimensions")
    if img.size == 0:
        raise ValueError("image must not be empty")

    ht, wd = img.shape
    psize = ht * wd
    (lowest, highest), levels = _group_levels(img.ravel())
    gmin, gmax = int(lowest), int(highest)
    neighbours = _NEIGHBOURS_4 if connect4 else _NEIGHBOURS_8

    tag = [_INIT] * psize
    dist = [0] * psize
    ws = [_INIT] * psize
    curtag = 0
    queue: deque[Optional[int]] = deque()

    def touches_basin(p: int, offsets) -> bool:
        for dh, dw in offsets:
            n = p + dh * wd + dw
            if tag[n] > 0 or ws[n] == _WSHED:
                return True
        return False

    for g in range(gmin, gmax + 1):
        pixels = levels.get(g)
        if not pixels:
            continue

        for p in pixels:
            tag[p] = _MASK

        for p in pixels:
            h, w = divmod(p, wd)
            if 0 < h < ht - 1 and 0 < w < wd - 1:
                if touches_basin(p, _NEIGHBOURS_4) or (
                    not connect4 and touches_basin(p, _CORNERS)
                ):
                    dist[p] = 1
                    queue.append(p)

        # Extend existing basins into this level.
        curdist = 1
        queue.append(None)
        while True:
            p = queue.popleft()
            if p is None:
                if not queue:
                    break
                curdist += 1
                queue.append(None)
                p = queue.popleft()

            h, w = divmod(p, wd)
            for s, t in neighbours:
                nh, nw = h + s, w + t
                if not (0 <= nh < ht and 0 <= nw < wd):
                    continue
                n = nh * wd + nw
                if dist[n] < curdist and (tag[n] > 0 or ws[n] == _WSHED):
                    if tag[n] > 0:
                        if tag[p] == _MASK or ws[p] == _WSHED:
                            tag[p] = tag[n]
                        elif tag[p] != tag[n]:
                            ws[p] = _WSHED
                    elif tag[p] == _MASK:
                        ws[p] = _WSHED
                elif tag[n] == _MASK and dist[n] == 0:
                    dist[n] = curdist + 1
                    queue.append(n)

        # Pixels still masked lie in new minima at this level.
        for p in pixels:
            dist[p] = 0
            if tag[p] != _MASK:
                continue
            curtag += 1
            tag[p] = curtag
            queue.append(p)
            while queue:
                q = queue.popleft()
                qh, qw = divmod(q, wd)
                for s, t in neighbours:
                    nh, nw = qh + s, qw + t
                    if not (0 <= nh < ht and 0 <= nw < wd):
                        continue
                    n = nh * wd + nw
                    if tag[n] == _MASK:
                        queue.append(n)
                        tag[n] = curtag

    tags = np.array(tag, dtype=np.int32).reshape(ht, wd)
    mask = (np.array(ws, dtype=np.int32) == _WSHED).reshape(ht, wd)
    return tags, mask