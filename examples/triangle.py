"""A triangle with its midpoints and centroid.

The vertices are placed; everything else is constructed from them and
follows along when a vertex moves:

    constructions show examples/triangle.py
    constructions calc examples/triangle.py -i examples/triangle_input.toml -o out.toml
"""

from pydantic import BaseModel

import constructions as cs


class Point(BaseModel):
    x: float
    y: float


def midpoint(p: Point, q: Point) -> Point:
    return Point(x=(p.x + q.x) / 2, y=(p.y + q.y) / 2)


def centroid(p: Point, q: Point, r: Point) -> Point:
    return Point(x=(p.x + q.x + r.x) / 3, y=(p.y + q.y + r.y) / 3)


def area(p: Point, q: Point, r: Point) -> float:
    return abs((q.x - p.x) * (r.y - p.y) - (r.x - p.x) * (q.y - p.y)) / 2


construction = cs.Construction()

construction.place("A", Point(x=0, y=0))
construction.place("B", Point(x=4, y=0))
construction.place("C", Point(x=0, y=3))

construction.construct_from("M_AB", midpoint, "A", "B")
construction.construct_from("M_BC", midpoint, "B", "C")
construction.construct_from("M_CA", midpoint, "C", "A")
construction.construct_from("G", centroid, "A", "B", "C")


@construction.define("area", "A", "B", "C")
def triangle_area(p: Point, q: Point, r: Point) -> float:
    return area(p, q, r)


# The medial triangle has a quarter of the area of the original
construction.construct_from("medial_area", area, "M_AB", "M_BC", "M_CA")
