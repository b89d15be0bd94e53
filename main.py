"""
HEX Illumination

A single-file Python CLI tool that traces the exterior perimeter of filled
cells on a pointy-top, row-offset hexagonal grid and renders the grid with
its lit perimeter to a PNG image via Pillow.

The perimeter is found by flood-filling the empty space from a corner of a
one-cell empty border ring; every side of a filled cell touched by that fill
is one unit of perimeter. Filled cells (and empty holes) that the outside
fill cannot reach contribute nothing.

Usage:
    python main.py --debug
    python main.py --input grid.txt --file lit.png
    python main.py --columns 6 --rows 5 --toggle 2,3 --toggle 3,3
    python main.py --import_settings settings.json
    python main.py --export_settings settings.json
"""

import argparse
import json
import math
import os
import re
import sys
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Tuple

from PIL import Image, ImageColor, ImageDraw


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
class GridError(ValueError):
    """Base class for rejected grid operations."""


class OutOfRangeError(GridError):
    """A cell outside the content area was addressed."""


class InvalidDimensionsError(GridError):
    """A grid was requested with a non-positive width or height."""


class BorderInvariantError(AssertionError):
    """The empty border ring around the content area was found filled."""


# ---------------------------------------------------------------------------
# PerimeterEdge
# ---------------------------------------------------------------------------
class PerimeterEdge(NamedTuple):
    """One lit side: the filled cell at (row, col) and its side index 0..5."""

    row: int
    col: int
    side: int


# ---------------------------------------------------------------------------
# OffsetGrid
# ---------------------------------------------------------------------------
class OffsetGrid:
    """Occupancy model for a row-offset hexagonal grid.

    Content cells occupy rows 1..height and columns 1..width. A one-cell
    ring around them (row 0, row height+1, column 0, column width+1) is
    always empty so that a flood fill started at (0, 0) can walk all the way
    around the content.

    Directions are numbered 0..5 as Right, Bottom-Right, Bottom-Left, Left,
    Top-Left, Top-Right. Odd rows sit half a cell to the right of even rows,
    so the diagonal offsets depend on row parity.

    Attributes:
        width: Number of content columns.
        height: Number of content rows.
    """

    # (dcol, drow) per direction, indexed by row parity.
    EVEN_ROW_OFFSETS: Tuple[Tuple[int, int], ...] = (
        (+1, 0), (0, +1), (-1, +1),
        (-1, 0), (-1, -1), (0, -1),
    )
    ODD_ROW_OFFSETS: Tuple[Tuple[int, int], ...] = (
        (+1, 0), (+1, +1), (0, +1),
        (-1, 0), (0, -1), (+1, -1),
    )

    DIRECTION_NAMES: Tuple[str, ...] = (
        "right", "bottom-right", "bottom-left",
        "left", "top-left", "top-right",
    )

    def __init__(self, width: int, height: int) -> None:
        """Allocate an empty grid with an empty border ring.

        Args:
            width: Number of content columns (>= 1).
            height: Number of content rows (>= 1).

        Raises:
            InvalidDimensionsError: If either dimension is not a positive int.
        """
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidDimensionsError(f"Grid {name} must be an integer, got {value!r}")
            if value < 1:
                raise InvalidDimensionsError(f"Grid {name} must be positive, got {value}")
        self._width: int = width
        self._height: int = height
        self._cells: List[List[bool]] = [
            [False] * (width + 2) for _ in range(height + 2)
        ]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "OffsetGrid":
        """Build a grid from content rows of truthy/falsy values.

        Args:
            rows: ``height`` rows, each holding ``width`` values.

        Returns:
            A new OffsetGrid with the truthy cells filled.

        Raises:
            InvalidDimensionsError: If there are no rows or the rows are empty.
            ValueError: If the rows differ in length.
        """
        height = len(rows)
        width = len(rows[0]) if height else 0
        grid = cls(width, height)
        for r, values in enumerate(rows, start=1):
            if len(values) != width:
                raise ValueError(f"Row {r} has {len(values)} cells, expected {width}")
            for c, value in enumerate(values, start=1):
                if value:
                    grid.set_cell(r, c, True)
        return grid

    @property
    def width(self) -> int:
        """Return the number of content columns."""
        return self._width

    @property
    def height(self) -> int:
        """Return the number of content rows."""
        return self._height

    @staticmethod
    def opposite(direction: int) -> int:
        """Return the direction pointing back along ``direction``."""
        return (direction + 3) % 6

    def offset(self, row: int, direction: int) -> Tuple[int, int]:
        """Return the (dcol, drow) offset for ``direction`` from a cell on ``row``."""
        table = self.ODD_ROW_OFFSETS if row % 2 else self.EVEN_ROW_OFFSETS
        return table[direction]

    def neighbor(self, row: int, col: int, direction: int) -> Tuple[int, int]:
        """Return the (row, col) adjacent to (row, col) in ``direction``.

        The result may lie outside the grid; see ``in_bounds``.
        """
        dcol, drow = self.offset(row, direction)
        return row + drow, col + dcol

    def neighbors(self, row: int, col: int) -> Iterator[Tuple[int, Tuple[int, int]]]:
        """Yield (direction, (row, col)) for every in-bounds neighbour."""
        for direction in range(6):
            n_row, n_col = self.neighbor(row, col, direction)
            if self.in_bounds(n_row, n_col):
                yield direction, (n_row, n_col)

    def in_bounds(self, row: int, col: int) -> bool:
        """Return True if (row, col) lies inside the padded grid."""
        return 0 <= row <= self._height + 1 and 0 <= col <= self._width + 1

    def in_content(self, row: int, col: int) -> bool:
        """Return True if (row, col) lies inside the content area."""
        return 1 <= row <= self._height and 1 <= col <= self._width

    def is_filled(self, row: int, col: int) -> bool:
        """Return the occupancy of any cell in the padded grid.

        Raises:
            OutOfRangeError: If (row, col) lies outside the padded grid.
        """
        if not self.in_bounds(row, col):
            raise OutOfRangeError(f"Cell ({row}, {col}) is outside the grid")
        return self._cells[row][col]

    def set_cell(self, row: int, col: int, filled: bool) -> None:
        """Set the occupancy of a content cell.

        Args:
            row: Content row in [1, height].
            col: Content column in [1, width].
            filled: New occupancy.

        Raises:
            OutOfRangeError: If (row, col) is not a content cell.
        """
        if not self.in_content(row, col):
            raise OutOfRangeError(
                f"Cell ({row}, {col}) is outside the content area "
                f"[1, {self._height}] x [1, {self._width}]"
            )
        self._cells[row][col] = bool(filled)
        self._check_border()

    def toggle_cell(self, row: int, col: int) -> bool:
        """Flip a content cell and return its new occupancy.

        Raises:
            OutOfRangeError: If (row, col) is not a content cell.
        """
        if not self.in_content(row, col):
            raise OutOfRangeError(
                f"Cell ({row}, {col}) is outside the content area "
                f"[1, {self._height}] x [1, {self._width}]"
            )
        filled = not self._cells[row][col]
        self.set_cell(row, col, filled)
        return filled

    def filled_cells(self) -> List[Tuple[int, int]]:
        """Return the filled content cells in row-major order."""
        return [
            (r, c)
            for r in range(1, self._height + 1)
            for c in range(1, self._width + 1)
            if self._cells[r][c]
        ]

    def _check_border(self) -> None:
        last_row, last_col = self._height + 1, self._width + 1
        for c in range(last_col + 1):
            if self._cells[0][c] or self._cells[last_row][c]:
                raise BorderInvariantError(f"Border cell in column {c} is filled")
        for r in range(last_row + 1):
            if self._cells[r][0] or self._cells[r][last_col]:
                raise BorderInvariantError(f"Border cell in row {r} is filled")


# ---------------------------------------------------------------------------
# PerimeterTracer
# ---------------------------------------------------------------------------
class PerimeterTracer:
    """Owns an OffsetGrid and traces the perimeter visible from outside.

    Every trace starts from scratch: the visited matrix and the edge list are
    rebuilt on each ``compute_perimeter`` call, so any mutation between
    traces simply requires tracing again.
    """

    SEED: Tuple[int, int] = (0, 0)

    def __init__(self, width: int = 8, height: int = 4, grid: Optional[OffsetGrid] = None) -> None:
        """Create a tracer over a new empty grid, or over ``grid`` if given.

        Args:
            width: Content columns for a new grid.
            height: Content rows for a new grid.
            grid: An existing grid to take ownership of.
        """
        self._grid: OffsetGrid = grid if grid is not None else OffsetGrid(width, height)
        self._visited: List[List[bool]] = []
        self._edges: List[PerimeterEdge] = []

    @property
    def grid(self) -> OffsetGrid:
        """Return the owned grid."""
        return self._grid

    @property
    def perimeter_edges(self) -> List[PerimeterEdge]:
        """Return a copy of the edges found by the last trace."""
        return list(self._edges)

    def set_dimensions(self, width: int, height: int) -> None:
        """Replace the owned grid with a new, all-empty one.

        Raises:
            InvalidDimensionsError: If either dimension is not positive.
        """
        self._grid = OffsetGrid(width, height)
        self._visited = []
        self._edges = []

    def set_cell(self, row: int, col: int, filled: bool) -> None:
        """Set a content cell; see ``OffsetGrid.set_cell``."""
        self._grid.set_cell(row, col, filled)

    def toggle_cell(self, row: int, col: int) -> bool:
        """Flip a content cell; see ``OffsetGrid.toggle_cell``."""
        return self._grid.toggle_cell(row, col)

    def compute_perimeter(self) -> int:
        """Flood-fill the outside space and collect the lit sides.

        The fill starts at the border corner (0, 0) and walks empty cells
        only. Whenever it probes a filled neighbour, the side of that
        neighbour facing back toward the probing cell is recorded. Each empty
        cell is expanded once, so each (empty, filled) adjacency yields
        exactly one edge.

        Returns:
            The number of perimeter edges.
        """
        grid = self._grid
        self._visited = [
            [False] * (grid.width + 2) for _ in range(grid.height + 2)
        ]
        self._edges = []

        stack = [self.SEED]
        while stack:
            row, col = stack.pop()
            if grid.is_filled(row, col) or self._visited[row][col]:
                continue
            self._visited[row][col] = True
            for direction, (n_row, n_col) in grid.neighbors(row, col):
                if grid.is_filled(n_row, n_col):
                    self._edges.append(
                        PerimeterEdge(n_row, n_col, grid.opposite(direction))
                    )
                elif not self._visited[n_row][n_col]:
                    stack.append((n_row, n_col))

        return len(self._edges)

    def get_perimeter_edges(self) -> List[PerimeterEdge]:
        """Return the edges found by the last trace (empty before any trace)."""
        return self.perimeter_edges

    def is_reachable(self, row: int, col: int) -> bool:
        """Return True if the last trace reached (row, col) from outside."""
        if not self._visited or not self._grid.in_bounds(row, col):
            return False
        return self._visited[row][col]


# ---------------------------------------------------------------------------
# GridParser
# ---------------------------------------------------------------------------
class GridParser:
    """Parses the textual grid format into an OffsetGrid.

    The first non-blank line is ``<width> <height>``; each of the next
    ``height`` non-blank lines holds up to ``width`` whitespace-separated
    ``0``/``1`` tokens. Missing trailing tokens count as empty cells.
    """

    _TOKENS: Dict[str, bool] = {"0": False, "1": True}

    def parse(self, text: str) -> OffsetGrid:
        """Parse grid text.

        Args:
            text: The grid description.

        Returns:
            The populated OffsetGrid.

        Raises:
            ValueError: If the header or any row is malformed.
        """
        lines = [line.strip() for line in text.splitlines()]
        lines = [line for line in lines if line]
        if not lines:
            raise ValueError("Grid input is empty")

        width, height = self._parse_header(lines[0])
        if len(lines) - 1 < height:
            raise ValueError(
                f"Grid header declares {height} rows but only {len(lines) - 1} follow"
            )

        grid = OffsetGrid(width, height)
        for r in range(1, height + 1):
            tokens = lines[r].split()
            for c, token in enumerate(tokens[:width], start=1):
                if token not in self._TOKENS:
                    raise ValueError(
                        f"Invalid cell token '{token}' at row {r}, column {c} (expected 0 or 1)"
                    )
                if self._TOKENS[token]:
                    grid.set_cell(r, c, True)
        return grid

    def load(self, path: str) -> OffsetGrid:
        """Read and parse a grid file.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the contents are malformed.
        """
        with open(path, "r", encoding="utf-8") as f:
            return self.parse(f.read())

    def _parse_header(self, line: str) -> Tuple[int, int]:
        parts = line.split()
        if len(parts) != 2:
            raise ValueError(f"Grid header must be '<width> <height>', got '{line}'")
        try:
            width, height = int(parts[0]), int(parts[1])
        except ValueError:
            raise ValueError(f"Grid dimensions must be integers: '{line}'")
        if width < 1 or height < 1:
            raise ValueError(f"Grid dimensions must be positive, got {width} x {height}")
        return width, height


# ---------------------------------------------------------------------------
# HexagonGeometry
# ---------------------------------------------------------------------------
class HexagonGeometry:
    """Vertex computation for pointy-top regular hexagons.

    Vertex k sits at angle 60k - 30 degrees with the y axis pointing down,
    so side k (vertex k to vertex k+1) faces grid direction k.

    Attributes:
        circumradius: The circumradius (centre-to-vertex distance) in pixels.
    """

    def __init__(self, circumradius: float) -> None:
        self._circumradius: float = circumradius

    @property
    def circumradius(self) -> float:
        """Return the circumradius R."""
        return self._circumradius

    @property
    def inradius(self) -> float:
        """Return the inradius (apothem) r = R * sqrt(3)/2."""
        return self._circumradius * math.sqrt(3) / 2.0

    def vertices(self, cx: float, cy: float) -> List[Tuple[float, float]]:
        """Compute the 6 vertices of a pointy-top hexagon centred at (cx, cy).

        Args:
            cx: X coordinate of the hexagon centre.
            cy: Y coordinate of the hexagon centre.

        Returns:
            A list of 6 (x, y) tuples, starting at the upper-right vertex and
            proceeding clockwise on screen.
        """
        R = self._circumradius
        return [
            (cx + R * math.cos(math.radians(60 * k - 30)),
             cy + R * math.sin(math.radians(60 * k - 30)))
            for k in range(6)
        ]

    def side(self, cx: float, cy: float, side: int) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Return the two endpoints of side ``side`` of the hexagon at (cx, cy)."""
        verts = self.vertices(cx, cy)
        return verts[side], verts[(side + 1) % 6]


# ---------------------------------------------------------------------------
# OffsetLayout
# ---------------------------------------------------------------------------
class OffsetLayout:
    """Maps row-offset grid cells to pixel centres.

    Columns are spaced sqrt(3)*R apart and rows 1.5*R apart; odd rows are
    shifted right by half a column.
    """

    def __init__(self, circumradius: float, padding: float = 40.0) -> None:
        self._geometry = HexagonGeometry(circumradius)
        self._padding: float = padding

    @property
    def geometry(self) -> HexagonGeometry:
        """Return the hexagon geometry used by this layout."""
        return self._geometry

    @property
    def h_spacing(self) -> float:
        """Return the distance between horizontally adjacent centres."""
        return math.sqrt(3) * self._geometry.circumradius

    @property
    def v_spacing(self) -> float:
        """Return the distance between rows."""
        return 1.5 * self._geometry.circumradius

    def cell_to_pixel(self, row: int, col: int) -> Tuple[float, float]:
        """Convert a grid cell to its pixel centre.

        Args:
            row: Grid row (padded coordinates).
            col: Grid column (padded coordinates).

        Returns:
            A (cx, cy) tuple of pixel coordinates.
        """
        shift = self.h_spacing / 2.0 if row % 2 == 1 else 0.0
        cx = col * self.h_spacing + shift + self._padding
        cy = row * self.v_spacing + self._padding
        return cx, cy

    def canvas_size(self, width: int, height: int) -> Tuple[int, int]:
        """Return the canvas (w, h) in pixels that holds a width x height grid."""
        w = (width + 1.5) * self.h_spacing + self._padding * 2
        h = (height + 1) * self.v_spacing + self._geometry.circumradius * 0.5 + self._padding * 2
        return int(math.ceil(w)), int(math.ceil(h))

    def edge_segment(self, edge: PerimeterEdge) -> Tuple[Tuple[float, float], Tuple[float, float]]:
        """Return the pixel endpoints of a perimeter edge."""
        cx, cy = self.cell_to_pixel(edge.row, edge.col)
        return self._geometry.side(cx, cy, edge.side)


# ---------------------------------------------------------------------------
# ColorParser
# ---------------------------------------------------------------------------
class ColorParser:
    """Parses colour strings into RGB tuples.

    Supports CSS named colours, hex codes (#RGB, #RRGGBB), and RGB
    comma-separated tuples (e.g. '255,59,48').
    """

    _RGB_TUPLE = re.compile(r"^\s*(-?\d+)\s*,\s*(-?\d+)\s*,\s*(-?\d+)\s*$")

    def parse(self, color_str: str) -> Tuple[int, int, int]:
        """Parse a colour string into an (R, G, B) tuple.

        Raises:
            ValueError: If the colour string cannot be parsed.
        """
        s = color_str.strip()
        if "," in s:
            m = self._RGB_TUPLE.match(s)
            if not m:
                raise ValueError(f"RGB tuple must be three integers, got '{color_str}'")
            values = tuple(int(v) for v in m.groups())
            bad = [v for v in values if not 0 <= v <= 255]
            if bad:
                raise ValueError(f"RGB values must be in [0, 255], got {bad[0]}: '{color_str}'")
            return (values[0], values[1], values[2])

        try:
            rgb = ImageColor.getrgb(s)
        except (ValueError, AttributeError):
            raise ValueError(f"Invalid color specification: '{color_str}'")
        return (rgb[0], rgb[1], rgb[2])


# ---------------------------------------------------------------------------
# PerimeterRenderer
# ---------------------------------------------------------------------------
class PerimeterRenderer:
    """Draws a grid and its traced perimeter into a Pillow image.

    Cells and perimeter segments are drawn on a supersampled canvas which is
    then downsampled; coordinate labels go on the final image.
    """

    # Anti-alias scale factors.
    _AA_SCALES: Dict[str, int] = {
        "off": 1,
        "low": 2,
        "medium": 4,
        "high": 8,
    }

    def render(
        self,
        grid: OffsetGrid,
        edges: Iterable[PerimeterEdge],
        circumradius: float,
        padding: float,
        line_width: int,
        color_filled: Tuple[int, int, int],
        color_empty: Tuple[int, int, int],
        color_grid: Tuple[int, int, int],
        color_perimeter: Tuple[int, int, int],
        color_background: Tuple[int, int, int],
        antialias: str,
        show_coords: bool,
    ) -> Tuple[Image.Image, int]:
        """Render the grid with its perimeter.

        Args:
            grid: The grid whose content cells are drawn.
            edges: Perimeter edges to highlight.
            circumradius: Hexagon circumradius R in pixels.
            padding: Canvas padding in pixels.
            line_width: Perimeter stroke width in pixels.
            color_filled: Fill colour for filled cells.
            color_empty: Fill colour for empty cells.
            color_grid: Outline colour for every cell.
            color_perimeter: Stroke colour for perimeter edges.
            color_background: Background colour.
            antialias: Anti-alias level ('off', 'low', 'medium', 'high').
            show_coords: Whether to label each cell with 'col,row'.

        Returns:
            A tuple of (PIL Image, number of perimeter segments drawn).
        """
        k = self._AA_SCALES.get(antialias, 1)

        layout = OffsetLayout(circumradius, padding)
        width, height = layout.canvas_size(grid.width, grid.height)

        s_layout = OffsetLayout(circumradius * k, padding * k)
        s_geom = s_layout.geometry

        img = Image.new("RGB", (width * k, height * k), color_background)
        draw = ImageDraw.Draw(img)

        for r in range(1, grid.height + 1):
            for c in range(1, grid.width + 1):
                cx, cy = s_layout.cell_to_pixel(r, c)
                fill = color_filled if grid.is_filled(r, c) else color_empty
                draw.polygon(s_geom.vertices(cx, cy), fill=fill, outline=color_grid)

        segment_count = 0
        s_lw = max(int(round(line_width * k)), 1)
        for edge in edges:
            start, end = s_layout.edge_segment(edge)
            draw.line([start, end], fill=color_perimeter, width=s_lw)
            segment_count += 1

        if k > 1:
            img = img.resize((width, height), Image.LANCZOS)

        if show_coords:
            self._draw_labels(img, grid, layout, color_grid)

        return img, segment_count

    def _draw_labels(
        self,
        img: Image.Image,
        grid: OffsetGrid,
        layout: OffsetLayout,
        color: Tuple[int, int, int],
    ) -> None:
        draw = ImageDraw.Draw(img)
        for r in range(1, grid.height + 1):
            for c in range(1, grid.width + 1):
                label = f"{c},{r}"
                cx, cy = layout.cell_to_pixel(r, c)
                left, top, right, bottom = draw.textbbox((0, 0), label)
                draw.text(
                    (cx - (right - left) / 2.0, cy - (bottom - top) / 2.0),
                    label, fill=color,
                )


# ---------------------------------------------------------------------------
# SettingsManager
# ---------------------------------------------------------------------------
class SettingsManager:
    """JSON import/export of parameter sets with CLI-precedence logic.

    JSON overrides defaults, explicit CLI args override JSON.
    """

    # Keys that are persisted to JSON.
    _PERSISTED_KEYS: List[str] = [
        "input", "columns", "rows", "toggle", "circumradius", "padding",
        "line_width", "color_filled", "color_empty", "color_grid",
        "color_perimeter", "color_background", "antialias", "file",
        "show_coords", "debug",
    ]

    def export_settings(self, params: argparse.Namespace, path: str) -> None:
        """Write the persisted parameters of ``params`` to ``path`` as JSON.

        Raises:
            IOError: If the file cannot be written.
        """
        data = {key: getattr(params, key, None) for key in self._PERSISTED_KEYS}
        if data["toggle"] is not None:
            data["toggle"] = [list(cell) for cell in data["toggle"]]
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def import_settings(self, path: str) -> Dict:
        """Load a settings dictionary from ``path``.

        Raises:
            FileNotFoundError: If the file does not exist.
            json.JSONDecodeError: If the file is not valid JSON.
        """
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)

    def merge_settings(
        self,
        defaults: argparse.Namespace,
        json_settings: Dict,
        explicit_keys: set,
    ) -> argparse.Namespace:
        """Apply JSON values to every persisted key not given on the CLI.

        Args:
            defaults: The argparse Namespace with default/CLI values.
            json_settings: Dictionary loaded from JSON.
            explicit_keys: Set of parameter names explicitly provided on CLI.

        Returns:
            The updated Namespace.
        """
        for key in self._PERSISTED_KEYS:
            if key in json_settings and key not in explicit_keys:
                value = json_settings[key]
                if key == "toggle" and value is not None:
                    value = [tuple(cell) for cell in value]
                setattr(defaults, key, value)
        return defaults


# ---------------------------------------------------------------------------
# Version helper
# ---------------------------------------------------------------------------
def _changelog_version(fallback: str = "0.0.0") -> str:
    """Read the highest version from CHANGELOG.md next to this script.

    Returns *fallback* when the file is missing or has no versioned headings.
    """
    changelog = os.path.join(os.path.dirname(os.path.abspath(__file__)), "CHANGELOG.md")
    try:
        with open(changelog, "r", encoding="utf-8") as fh:
            for line in fh:
                m = re.match(r"^##\s+\[(\d+\.\d+\.\d+)\]", line)
                if m:
                    return m.group(1)
    except OSError:
        pass
    return fallback


def _with_extension(path: str, ext: str) -> str:
    """Append ``ext`` to ``path`` unless it already ends with it (any case)."""
    return path if path.lower().endswith(ext) else path + ext


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------
class Application:
    """Top-level entry point for HEX Illumination.

    Orchestrates CLI argument parsing, settings loading, grid construction,
    perimeter tracing, rendering, file output, and debug reporting.
    """

    VERSION:      str = _changelog_version("1.0.0")
    BUILD_DATE:   str = "2026-10-18"
    TITLE:        str = "HEX Illumination"
    AUTHOR:       str = "HEX Illumination contributors"
    BANNER_WIDTH: int = 60

    _ANTIALIAS_LEVELS = {"off", "low", "medium", "high"}

    def run(self) -> None:
        """Execute the full application pipeline.

        Exits with status 1 on any settings, input, grid or colour error.
        """
        # Step 1: Parse CLI arguments and detect explicit keys
        args, explicit_keys = self._parse_args()

        # Step 2: Import settings if requested
        if args.import_settings:
            args.import_settings = _with_extension(args.import_settings, ".json")
            try:
                manager = SettingsManager()
                json_data = manager.import_settings(args.import_settings)
                args = manager.merge_settings(args, json_data, explicit_keys)
            except FileNotFoundError:
                self._fail(f"Settings file not found: '{args.import_settings}'")
            except json.JSONDecodeError as e:
                self._fail(f"Malformed JSON in settings file: {e}")

        # Step 3: Export settings if requested
        export_path = None
        if args.export_settings:
            export_path = _with_extension(args.export_settings, ".json")
            try:
                SettingsManager().export_settings(args, export_path)
            except IOError as e:
                self._fail(f"Cannot write settings file: {e}")

        # Step 4: Parse colour strings
        parser = ColorParser()
        try:
            colors = {
                name: parser.parse(getattr(args, name))
                for name in ("color_filled", "color_empty", "color_grid",
                             "color_perimeter", "color_background")
            }
        except ValueError as e:
            self._fail(str(e))

        if args.antialias not in self._ANTIALIAS_LEVELS:
            self._fail(f"Invalid antialias level '{args.antialias}'. "
                       f"Must be one of: {', '.join(sorted(self._ANTIALIAS_LEVELS))}")

        # Step 5: Build the grid and apply toggles
        try:
            tracer = self._build_tracer(args)
        except FileNotFoundError:
            self._fail(f"Grid input file not found: '{args.input}'")
        except ValueError as e:
            self._fail(str(e))

        # Step 6: Trace
        perimeter = tracer.compute_perimeter()
        edges = tracer.get_perimeter_edges()

        # Step 7: Render
        renderer = PerimeterRenderer()
        img, segment_count = renderer.render(
            grid=tracer.grid,
            edges=edges,
            circumradius=args.circumradius,
            padding=args.padding,
            line_width=args.line_width,
            color_filled=colors["color_filled"],
            color_empty=colors["color_empty"],
            color_grid=colors["color_grid"],
            color_perimeter=colors["color_perimeter"],
            color_background=colors["color_background"],
            antialias=args.antialias,
            show_coords=args.show_coords,
        )

        # Step 8: Save
        out_file = _with_extension(args.file, ".png")
        img.save(out_file, "PNG")
        file_size = os.path.getsize(out_file)

        self._print_banner()
        print(f"  Perimeter length: {perimeter}")
        print(f"  Saved: {out_file} ({self._format_file_size(file_size)})")
        if export_path:
            print(f"  Saved: {export_path} ({self._format_file_size(os.path.getsize(export_path))})")

        if args.debug:
            self._print_debug(args, tracer, edges, segment_count, img.size)
        print()

    def _build_tracer(self, args: argparse.Namespace) -> PerimeterTracer:
        """Create the tracer from --input or --columns/--rows, then apply --toggle."""
        if args.input:
            tracer = PerimeterTracer(grid=GridParser().load(args.input))
        else:
            tracer = PerimeterTracer(args.columns, args.rows)
        for row, col in args.toggle or []:
            tracer.toggle_cell(row, col)
        return tracer

    def _fail(self, message: str) -> None:
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(1)

    def _parse_args(self) -> Tuple[argparse.Namespace, set]:
        """Parse CLI arguments and detect which were explicitly provided.

        Returns:
            A tuple of (parsed Namespace, set of explicitly-provided key names).
        """
        parser = self._build_parser()
        args = parser.parse_args()

        # Second parse with SUPPRESS defaults to detect explicit keys
        suppress_parser = self._build_parser(suppress_defaults=True)
        explicit_args = suppress_parser.parse_args()
        explicit_keys = set(vars(explicit_args).keys())

        return args, explicit_keys

    def _build_parser(self, suppress_defaults: bool = False) -> argparse.ArgumentParser:
        """Build the argparse ArgumentParser.

        Args:
            suppress_defaults: If True, set all defaults to SUPPRESS to
                detect explicitly-provided CLI args.
        """
        S = argparse.SUPPRESS if suppress_defaults else None

        banner = self._banner_text()

        class _BannerParser(argparse.ArgumentParser):
            """ArgumentParser that prints the banner before help text."""

            def print_help(self, file=None):
                if file is None:
                    file = sys.stdout
                file.write(banner + "\n\n")
                super().print_help(file)

        parser = _BannerParser(
            description="HEX Illumination: trace and render the outside perimeter of a hex grid.",
        )
        d = S  # shorthand

        parser.add_argument("--input", type=str, default=d if d else None,
                            help="Grid text file: '<width> <height>' then rows of 0/1")
        parser.add_argument("--columns", type=int, default=d if d else 8,
                            help="Columns of the empty grid used without --input (default: 8)")
        parser.add_argument("--rows", type=int, default=d if d else 4,
                            help="Rows of the empty grid used without --input (default: 4)")
        parser.add_argument("--toggle", type=self._parse_cell, action="append",
                            default=d if d else None, metavar="ROW,COL",
                            help="Toggle a content cell; may be repeated")
        parser.add_argument("--circumradius", type=float, default=d if d else 30.0,
                            help="Hexagon circumradius R in pixels (default: 30)")
        parser.add_argument("--padding", type=float, default=d if d else 40.0,
                            help="Canvas padding in pixels (default: 40)")
        parser.add_argument("--line_width", type=int, default=d if d else 4,
                            help="Perimeter stroke width in pixels (default: 4)")
        parser.add_argument("--color_filled", type=str, default=d if d else "dimgrey",
                            help="Filled cell colour (default: dimgrey)")
        parser.add_argument("--color_empty", type=str, default=d if d else "#2a2f3a",
                            help="Empty cell colour (default: #2a2f3a)")
        parser.add_argument("--color_grid", type=str, default=d if d else "#8c93a3",
                            help="Cell outline and label colour (default: #8c93a3)")
        parser.add_argument("--color_perimeter", type=str, default=d if d else "#ff3b30",
                            help="Perimeter colour (default: #ff3b30)")
        parser.add_argument("--color_background", type=str, default=d if d else "#151821",
                            help="Background colour (default: #151821)")
        parser.add_argument("--antialias", type=str, default=d if d else "high",
                            help="Anti-alias level: off, low, medium, high (default: high)")
        parser.add_argument("--file", type=str, default=d if d else "perimeter.png",
                            help="Output PNG filename (default: perimeter.png)")
        parser.add_argument("--show_coords", nargs="?", const=True, default=d if d else True,
                            type=self._parse_bool_flag,
                            help="Label cells with 'col,row' (default: true)")
        parser.add_argument("--debug", nargs="?", const=True, default=d if d else False,
                            type=self._parse_bool_flag,
                            help="Enable debug output")
        parser.add_argument("--export_settings", type=str, default=None,
                            help="Export parameters to a JSON file")
        parser.add_argument("--import_settings", type=str, default=None,
                            help="Import parameters from a JSON file")

        return parser

    def _parse_cell(self, value: str) -> Tuple[int, int]:
        """Parse a 'ROW,COL' pair."""
        parts = [p.strip() for p in value.split(",")]
        try:
            row, col = (int(p) for p in parts)
        except ValueError:
            raise argparse.ArgumentTypeError(f"Cell must be 'ROW,COL', got '{value}'")
        return row, col

    def _parse_bool_flag(self, value: str) -> bool:
        if isinstance(value, bool):
            return value
        if value.lower() in ("true", "1", "yes"):
            return True
        if value.lower() in ("false", "0", "no"):
            return False
        raise argparse.ArgumentTypeError(f"Boolean value expected, got '{value}'")

    def _banner_text(self) -> str:
        """Build the application banner as a string."""
        w = self.BANNER_WIDTH
        inner = w - 2  # space between │ and │
        lines = [
            "┌" + "─" * inner + "┐",
            f"│{'  Program:    ' + self.TITLE:<{inner}}│",
            f"│{'  Version:    ' + self.VERSION:<{inner}}│",
            f"│{'  Build Date: ' + self.BUILD_DATE:<{inner}}│",
            f"│{'  Author:     ' + self.AUTHOR:<{inner}}│",
            "└" + "─" * inner + "┘",
        ]
        return "\n".join(lines)

    def _print_banner(self) -> None:
        print(self._banner_text())

    def _print_debug(
        self,
        args: argparse.Namespace,
        tracer: PerimeterTracer,
        edges: Sequence[PerimeterEdge],
        segment_count: int,
        image_size: Tuple[int, int],
    ) -> None:
        """Print parameters, grid summary and the perimeter edge list."""
        grid = tracer.grid
        source = args.input if args.input else "empty grid"
        print(f"\n  Grid source:      {source}")
        print(f"  Grid size:        {grid.width} x {grid.height}")
        print(f"  Filled cells:     {len(grid.filled_cells())}")
        toggles = ", ".join(f"({r},{c})" for r, c in args.toggle) if args.toggle else "none"
        print(f"  Toggled:          {toggles}")
        print(f"  Circumradius:     {args.circumradius}")
        print(f"  Padding:          {args.padding}")
        print(f"  Line width:       {args.line_width}")
        print(f"  Anti-alias:       {args.antialias}")
        print(f"  Show coords:      {args.show_coords}")
        print(f"  Image size:       {image_size[0]} x {image_size[1]}")
        print(f"  Segments drawn:   {segment_count}")
        print("  Perimeter edges:")
        for edge in sorted(edges):
            name = OffsetGrid.DIRECTION_NAMES[edge.side]
            print(f"    row {edge.row:>3}  col {edge.col:>3}  side {edge.side} ({name})")

    def _format_file_size(self, size_bytes: int) -> str:
        """Format a file size in human-readable form (e.g. '1.23 KB')."""
        if size_bytes < 1024:
            return f"{size_bytes} B"
        elif size_bytes < 1024 * 1024:
            return f"{size_bytes / 1024:.2f} KB"
        else:
            return f"{size_bytes / (1024 * 1024):.2f} MB"


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------
def main() -> None:
    """Main entry point for HEX Illumination."""
    if sys.stdout and hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    app = Application()
    app.run()


if __name__ == "__main__":
    main()
