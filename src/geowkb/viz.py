from __future__ import annotations
from .models.geometry import CircularString, Geometry, LineString, Point


def _draw(node: Geometry, ax, xs: list, ys: list) -> None:
    if isinstance(node, (LineString, CircularString)):
        pts = [p for p in node.points if not p.is_empty()]
        ax.plot([p.x for p in pts], [p.y for p in pts], linewidth=1)
    elif isinstance(node, Point):
        if not node.is_empty():
            xs.append(node.x)
            ys.append(node.y)
    else:
        for child in node.children():
            _draw(child, ax, xs, ys)


def plot_geometry(geom: Geometry, *, show: bool = True):
    """Minimal XY plot of a decoded tree for sanity-checking.

    Circular arcs are drawn through their control points.
    """
    import matplotlib.pyplot as plt
    fig, ax = plt.subplots()
    xs, ys = [], []
    _draw(geom, ax, xs, ys)
    if xs:
        ax.scatter(xs, ys, s=6)
    ax.set_xlabel("X")
    ax.set_ylabel("Y")
    ax.set_title(f"{geom.geometry_type} (SRID {geom.srid})")
    ax.set_aspect("equal", adjustable="datalim")
    if show:
        plt.show()
    return fig
