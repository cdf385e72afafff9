# gpxmap/formats/svg.py
"""
SVG output for gpxmap

A minimal line-segment renderer built on ElementTree. Draw calls are kept in
call order: later lines are painted over earlier ones, so nothing is ever
reordered or deduplicated.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from gpxmap.util.paths import ensure_dir

SVG_NS = "http://www.w3.org/2000/svg"

ET.register_namespace("", SVG_NS)


def qn(tag: str) -> str:
    """Build an ElementTree-qualified name for an SVG tag."""
    return f"{{{SVG_NS}}}{tag}"


def _fmt(value: float) -> str:
    """Compact number formatting: 12.0 -> "12", 12.50 -> "12.5"."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def _indent(elem: ET.Element, level: int = 0, indent: str = "  ") -> None:
    """
    In-place pretty-printer for ElementTree output. Eliminates double blank-line
    issues by explicitly controlling .text/.tail.
    """
    i = "\n" + level * indent
    j = "\n" + (level - 1) * indent if level > 0 else "\n"

    children = list(elem)
    if children:
        if elem.text is None or not elem.text.strip():
            elem.text = i + indent
        for child in children:
            _indent(child, level + 1, indent=indent)
        if children[-1].tail is None or not children[-1].tail.strip():
            children[-1].tail = i
    if elem.tail is None or not elem.tail.strip():
        elem.tail = j


class SvgRenderer:
    """Collects a canvas size and line draw calls, then writes one SVG file."""

    def __init__(self) -> None:
        self.root: Optional[ET.Element] = None

    def canvas(self, width: float, height: float) -> None:
        self.root = ET.Element(qn("svg"), {
            "version": "1.1",
            "width": _fmt(width),
            "height": _fmt(height),
        })

    def line(self, x1: float, y1: float, x2: float, y2: float, *,
             stroke: str, stroke_width: float, stroke_opacity: float) -> None:
        if self.root is None:
            raise RuntimeError("canvas() must be called before line()")
        ET.SubElement(self.root, qn("line"), {
            "x1": _fmt(x1),
            "y1": _fmt(y1),
            "x2": _fmt(x2),
            "y2": _fmt(y2),
            "stroke": stroke,
            "stroke-width": _fmt(stroke_width),
            "stroke-opacity": repr(float(stroke_opacity)),
        })

    def tostring(self, *, pretty: bool = True) -> str:
        if self.root is None:
            raise RuntimeError("nothing rendered yet")
        if pretty:
            _indent(self.root)
        return ET.tostring(self.root, encoding="unicode")

    def write(self, out_path: Path, *, pretty: bool = True) -> None:
        """
        Write the SVG document to disk.

        - pretty=True applies indentation for human readability
        - writes UTF-8 with XML declaration
        """
        if self.root is None:
            raise RuntimeError("nothing rendered yet")
        if pretty:
            _indent(self.root)
        ensure_dir(out_path.parent)
        ET.ElementTree(self.root).write(out_path, encoding="utf-8", xml_declaration=True)
