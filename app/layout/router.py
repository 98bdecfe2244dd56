"""
layout/router.py

Deterministic Manhattan wire routing for laid-out components.

Every net with two or more pins gets its own horizontal channel above all
component bodies; channel Y values are handed out one grid step apart, so
no two nets ever share one. Each pin then climbs to its net's channel
along a vertical column: the pin's own X if that is clear, otherwise the
nearest clear column (X + g, X - g, X + 2g, ...) reached by a short
horizontal stub at pin height. Finally the net's columns are joined along
the channel.

A candidate segment is clear when it
  - does not run along another net's segment on the same axis,
  - does not touch another net's pin or wire endpoint, and
  - does not end on another net's wire.
Those are exactly the ways two axis-aligned segments become connected,
so accepted routes never merge nets. If no column is clear within the
search limit, the pin is routed with a grid A* search that treats
other nets' wires and pins as obstacles.

All tracking state belongs to one ``route()`` call.
"""

import heapq
import logging
from dataclasses import dataclass, field

from models.geometry import point_on_segment, ranges_overlap, snap
from settings.constants import GRID_SIZE, OVERLAP_TOLERANCE, ROUTE_SEARCH_LIMIT

logger = logging.getLogger(__name__)


class RoutingError(RuntimeError):
    """Raised when a pin cannot be connected to its net."""


@dataclass
class RoutedNet:
    name: str
    channel_y: int = 0
    columns: list[int] = field(default_factory=list)
    segments: list[tuple] = field(default_factory=list)   # (x1, y1, x2, y2)

    @property
    def label_point(self):
        """Where a net label sits on the routed wiring (top of the first column)."""
        if self.columns:
            return (self.columns[0], self.channel_y)
        return None


@dataclass
class RoutingResult:
    nets: list[RoutedNet] = field(default_factory=list)
    junctions: list[tuple] = field(default_factory=list)

    @property
    def segments(self):
        return [(net.name, seg) for net in self.nets for seg in net.segments]


class GridPathfinder:
    """A* search on grid cells, used when no straight column is free."""

    def __init__(self, grid_size=GRID_SIZE, max_iterations=50000):
        self.grid_size = grid_size
        self.max_iterations = max_iterations

    def find_path(self, start, goal_row, obstacles, bounds, no_horizontal_rows=frozenset()):
        """
        Find a path from ``start`` to any free cell on row ``goal_row``.

        Args:
            start: (x, y) scene position (grid aligned).
            goal_row: scene Y of the row to reach.
            obstacles: set of (grid_x, grid_y) blocked cells.
            bounds: (min_x, min_y, max_x, max_y) in scene units.
            no_horizontal_rows: grid rows that may be crossed but not followed.

        Returns:
            list of (x, y) waypoints with collinear points removed, or None.
        """
        g = self.grid_size
        start_cell = (round(start[0] / g), round(start[1] / g))
        goal = round(goal_row / g)
        min_gx, min_gy = round(bounds[0] / g), round(bounds[1] / g)
        max_gx, max_gy = round(bounds[2] / g), round(bounds[3] / g)

        open_set = [(abs(start_cell[1] - goal), 0, start_cell)]
        came_from = {}
        g_score = {start_cell: 0}
        iterations = 0

        while open_set and iterations < self.max_iterations:
            iterations += 1
            _, cost, current = heapq.heappop(open_set)
            if cost > g_score.get(current, cost):
                continue
            if current[1] == goal:
                path = self._reconstruct_path(came_from, current)
                logger.debug("A* found path with %d cells after %d iterations", len(path), iterations)
                return self._simplify_path([(x * g, y * g) for x, y in path])

            # Up first so ties prefer climbing toward the channel
            for dx, dy in ((0, -1), (1, 0), (-1, 0), (0, 1)):
                neighbor = (current[0] + dx, current[1] + dy)
                if not (min_gx <= neighbor[0] <= max_gx and min_gy <= neighbor[1] <= max_gy):
                    continue
                if neighbor in obstacles:
                    continue
                if dx and current[1] in no_horizontal_rows:
                    continue
                tentative = cost + 1
                if tentative < g_score.get(neighbor, tentative + 1):
                    came_from[neighbor] = current
                    g_score[neighbor] = tentative
                    heapq.heappush(open_set, (tentative + abs(neighbor[1] - goal), tentative, neighbor))

        logger.debug("A* failed after %d iterations from %s", iterations, start_cell)
        return None

    @staticmethod
    def _reconstruct_path(came_from, current):
        path = [current]
        while current in came_from:
            current = came_from[current]
            path.append(current)
        path.reverse()
        return path

    @staticmethod
    def _simplify_path(waypoints):
        """Remove collinear waypoints."""
        if len(waypoints) <= 2:
            return waypoints

        def sign(v):
            return 0 if v == 0 else (1 if v > 0 else -1)

        simplified = [waypoints[0]]
        for prev, current, nxt in zip(waypoints, waypoints[1:], waypoints[2:]):
            d1 = (sign(current[0] - prev[0]), sign(current[1] - prev[1]))
            d2 = (sign(nxt[0] - current[0]), sign(nxt[1] - current[1]))
            if d1 != d2:
                simplified.append(current)
        simplified.append(waypoints[-1])
        return simplified


class _RoutingState:
    """Claimed runs and points for one routing pass."""

    def __init__(self, tolerance):
        self.tolerance = tolerance
        self.vertical: dict[int, list[tuple]] = {}     # x -> [(y_min, y_max, net)]
        self.horizontal: dict[int, list[tuple]] = {}   # y -> [(x_min, x_max, net)]
        self.points: dict[tuple, set] = {}             # pin or wire end -> nets
        self.segments: list[tuple] = []                # (net, (x1, y1, x2, y2))

    def add_point(self, point, net):
        self.points.setdefault(point, set()).add(net)

    def claim(self, net, seg):
        x1, y1, x2, y2 = seg
        if x1 == x2:
            self.vertical.setdefault(x1, []).append((min(y1, y2), max(y1, y2), net))
        else:
            self.horizontal.setdefault(y1, []).append((min(x1, x2), max(x1, x2), net))
        self.add_point((x1, y1), net)
        self.add_point((x2, y2), net)
        self.segments.append((net, seg))

    def _runs_clear(self, runs, axis_value, lo, hi, net):
        for key, claimed in runs.items():
            if abs(key - axis_value) >= self.tolerance:
                continue
            for c_lo, c_hi, c_net in claimed:
                if c_net != net and ranges_overlap(lo, hi, c_lo, c_hi, self.tolerance):
                    return False
        return True

    def is_clear(self, net, seg) -> bool:
        x1, y1, x2, y2 = seg
        start, end = (x1, y1), (x2, y2)
        if x1 == x2:
            if not self._runs_clear(self.vertical, x1, min(y1, y2), max(y1, y2), net):
                return False
        elif not self._runs_clear(self.horizontal, y1, min(x1, x2), max(x1, x2), net):
            return False

        for point, nets in self.points.items():
            if nets - {net} and point_on_segment(point, start, end, self.tolerance):
                return False

        for other_net, (ox1, oy1, ox2, oy2) in self.segments:
            if other_net == net:
                continue
            for end_point in (start, end):
                if point_on_segment(end_point, (ox1, oy1), (ox2, oy2), self.tolerance):
                    return False
        return True


class ChannelRouter:
    """Routes nets of pin positions into grid-aligned segments."""

    def __init__(
        self,
        grid_size=GRID_SIZE,
        tolerance=OVERLAP_TOLERANCE,
        channel_margin=GRID_SIZE,
        search_limit=ROUTE_SEARCH_LIMIT,
    ):
        self.grid_size = grid_size
        self.tolerance = tolerance
        self.channel_margin = channel_margin
        self.search_limit = search_limit

    def route(self, nets, boxes) -> RoutingResult:
        """
        Route every net.

        Args:
            nets: dict net name -> list of pin positions (grid aligned), in
                routing order.
            boxes: component bounding boxes (min_x, min_y, max_x, max_y).

        Returns:
            RoutingResult with one RoutedNet per input net (segments empty
            for single-pin nets) and the junction points.

        Raises:
            RoutingError: If a pin cannot be reached by any route.
        """
        g = self.grid_size
        state = _RoutingState(self.tolerance)
        for name, pins in nets.items():
            for pin in pins:
                state.add_point(pin, name)

        all_points = [p for pins in nets.values() for p in pins]
        all_points += [(b[0], b[1]) for b in boxes] + [(b[2], b[3]) for b in boxes]
        if not all_points:
            return RoutingResult()
        min_x = min(p[0] for p in all_points)
        max_x = max(p[0] for p in all_points)
        top = min(p[1] for p in all_points)
        bottom = max(p[1] for p in all_points)

        # Channels: one distinct Y per multi-pin net, stacked upward above everything
        first_channel = snap(top - self.channel_margin, g)
        if first_channel > top - self.channel_margin:
            first_channel -= g
        routed = {}
        channel_rows = {}
        next_channel = first_channel
        for name, pins in nets.items():
            routed[name] = RoutedNet(name=name)
            if len(pins) < 2:
                continue
            routed[name].channel_y = next_channel
            channel_rows[name] = next_channel
            next_channel -= g

        limits = (min_x, bottom)
        for name, pins in nets.items():
            if len(pins) < 2:
                continue
            self._route_net(routed[name], pins, state, channel_rows, limits)

        result = RoutingResult(nets=list(routed.values()))
        result.junctions = find_junctions([seg for _, seg in state.segments])
        logger.debug(
            "Routed %d nets: %d segments, %d junctions",
            sum(1 for n in result.nets if n.segments),
            len(state.segments),
            len(result.junctions),
        )
        return result

    def _route_net(self, net, pins, state, channel_rows, limits):
        channel = net.channel_y
        column_bottoms: dict[int, int] = {}   # column x -> lowest y reached

        # Bottom-most pins first so one column can pick up pins above it
        for pin in sorted(pins, key=lambda p: (p[0], -p[1])):
            if self._on_column(pin, column_bottoms, channel):
                continue
            routed = self._column_route(net.name, pin, channel, column_bottoms, state)
            if routed is None:
                segments = self._astar_route(net.name, pin, channel, state, channel_rows, limits)
                for seg in segments:
                    state.claim(net.name, seg)
                    net.segments.append(seg)
                column = segments[-1][2]
                if column not in net.columns:
                    net.columns.append(column)
                continue
            column, segments = routed
            for seg in segments:
                state.claim(net.name, seg)
                net.segments.append(seg)
                if seg[0] == seg[2]:
                    column_bottoms[column] = max(column_bottoms.get(column, channel), seg[1], seg[3])
            if column not in net.columns:
                net.columns.append(column)

        net.columns.sort()
        for a, b in zip(net.columns, net.columns[1:]):
            seg = (a, channel, b, channel)
            state.claim(net.name, seg)
            net.segments.append(seg)

    @staticmethod
    def _on_column(pin, column_bottoms, channel):
        bottom = column_bottoms.get(pin[0])
        return bottom is not None and channel <= pin[1] <= bottom

    def _column_route(self, net, pin, channel, column_bottoms, state):
        """(column, segments) for the first clear column, or None."""
        px, py = pin
        g = self.grid_size
        candidates = [px]
        for step in range(1, self.search_limit + 1):
            candidates.extend((px + step * g, px - step * g))

        for cx in candidates:
            segments = []
            if cx != px:
                segments.append((px, py, cx, py))
            bottom = column_bottoms.get(cx)
            if bottom is None:
                segments.append((cx, py, cx, channel))
            elif py > bottom:
                segments.append((cx, py, cx, bottom))
            if all(state.is_clear(net, seg) for seg in segments):
                if cx != px:
                    logger.debug("Net %s pin %s shifted to column %s", net, pin, cx)
                return cx, segments
        return None

    def _astar_route(self, net, pin, channel, state, channel_rows, limits):
        g = self.grid_size
        obstacles = set()
        for other_net, (x1, y1, x2, y2) in state.segments:
            if other_net == net:
                continue
            for cell in _raster((x1, y1), (x2, y2), g):
                obstacles.add(cell)
        for point, nets in state.points.items():
            if nets - {net}:
                obstacles.add((round(point[0] / g), round(point[1] / g)))

        rows = frozenset(round(y / g) for name, y in channel_rows.items() if name != net)
        margin = 10 * g
        min_x, bottom = limits
        xs = [p[0] for p in state.points] + [pin[0]]
        bounds = (min(min(xs), min_x) - margin, channel, max(xs) + margin, bottom + margin)

        path = GridPathfinder(g).find_path(pin, channel, obstacles, bounds, rows)
        if path is None or len(path) < 2:
            raise RoutingError(f"Cannot route net {net} pin at {pin}")
        logger.warning("Net %s pin %s routed with A* fallback", net, pin)
        return [(a[0], a[1], b[0], b[1]) for a, b in zip(path, path[1:])]


def _raster(start, end, g):
    """Grid cells covered by an axis-aligned segment."""
    x1, y1 = round(start[0] / g), round(start[1] / g)
    x2, y2 = round(end[0] / g), round(end[1] / g)
    if x1 == x2:
        return [(x1, y) for y in range(min(y1, y2), max(y1, y2) + 1)]
    return [(x, y1) for x in range(min(x1, x2), max(x1, x2) + 1)]


def find_junctions(segments):
    """
    Junction points for a set of segments: three or more segment ends
    meeting at one point, or a segment end landing inside another segment.
    """
    counts = {}
    for x1, y1, x2, y2 in segments:
        for point in ((x1, y1), (x2, y2)):
            counts[point] = counts.get(point, 0) + 1

    junctions = [p for p, n in counts.items() if n >= 3]
    for point in counts:
        if point in junctions:
            continue
        for x1, y1, x2, y2 in segments:
            if point in ((x1, y1), (x2, y2)):
                continue
            if point_on_segment(point, (x1, y1), (x2, y2)):
                junctions.append(point)
                break
    return junctions
