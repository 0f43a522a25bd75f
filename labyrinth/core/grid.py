from array import array
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

from labyrinth.core.errors import MazeConfigError

Coord = Tuple[int, int]


class WallState(NamedTuple):
    broken: bool
    checked: bool
    solution: bool


class CellState(NamedTuple):
    """Read-only snapshot of one cell, for hosts and tests."""
    x: int
    y: int
    visited: bool
    set_id: int
    checked: bool
    solution: bool
    walls: Dict[str, WallState]


class Grid:
    # Wall bits: set = wall standing, cleared = passage
    NORTH = 0b0000_0001
    EAST  = 0b0000_0010
    SOUTH = 0b0000_0100
    WEST  = 0b0000_1000

    # Cell flags
    VISITED = 0b0001_0000
    PATH    = 0b0010_0000
    CHECKED = 0b0100_0000

    # Per-wall flags live in the high byte: checked << 8, solution << 12
    WALL_CHECKED_SHIFT = 8
    WALL_PATH_SHIFT = 12

    ALL_WALLS = NORTH | EAST | SOUTH | WEST
    ALL_WALLS_CHECKED = ALL_WALLS << WALL_CHECKED_SHIFT
    ALL_WALLS_PATH = ALL_WALLS << WALL_PATH_SHIFT
    SOLVER_FLAGS = PATH | CHECKED | ALL_WALLS_CHECKED | ALL_WALLS_PATH

    # Clockwise, used by the wall follower for turning
    DIRECTIONS = (NORTH, EAST, SOUTH, WEST)
    DX = {NORTH: 0, SOUTH: 0, EAST: 1, WEST: -1}
    DY = {NORTH: -1, SOUTH: 1, EAST: 0, WEST: 0}
    OPPOSITE = {NORTH: SOUTH, SOUTH: NORTH, EAST: WEST, WEST: EAST}
    NAMES = {NORTH: "north", EAST: "east", SOUTH: "south", WEST: "west"}

    __slots__ = ('width', 'height', 'cells', 'set_ids', 'event_writer')

    def __init__(self, width: int, height: int, event_writer=None):
        if width < 2 or height < 2:
            raise MazeConfigError(f"Maze needs at least 2x2 cells, got {width}x{height}")
        self.width = width
        self.height = height
        self.event_writer = event_writer
        # 'H' (unsigned short) -> 2 bytes per cell, walls + flags
        self.cells = array('H', [self.ALL_WALLS] * (width * height))
        self.set_ids = array('i', range(width * height))

        if self.event_writer:
            self.event_writer.write_header(width, height)

    def reset(self):
        """Restores every wall, clears all flags and gives each cell its own set."""
        size = self.width * self.height
        self.cells = array('H', [self.ALL_WALLS] * size)
        self.set_ids = array('i', range(size))

    def reset_solution(self):
        """
        Clears solver marks and closes any boundary wall opened for an entrance or exit.
        Interior passages are left untouched.
        """
        w, h = self.width, self.height
        for y in range(h):
            for x in range(w):
                idx = y * w + x
                val = self.cells[idx] & ~self.SOLVER_FLAGS
                if y == 0: val |= self.NORTH
                if y == h - 1: val |= self.SOUTH
                if x == 0: val |= self.WEST
                if x == w - 1: val |= self.EAST
                self.cells[idx] = val

    def get_index(self, x: int, y: int) -> int:
        if 0 <= x < self.width and 0 <= y < self.height:
            return y * self.width + x
        raise IndexError(f"Coordinate ({x}, {y}) out of bounds")

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def on_boundary(self, x: int, y: int) -> bool:
        return self.in_bounds(x, y) and (
            x == 0 or y == 0 or x == self.width - 1 or y == self.height - 1)

    def boundary_directions(self, x: int, y: int) -> List[int]:
        """Outer walls of (x, y); two for a corner, none for an interior cell."""
        dirs = []
        if y == 0: dirs.append(self.NORTH)
        elif y == self.height - 1: dirs.append(self.SOUTH)
        if x == 0: dirs.append(self.WEST)
        elif x == self.width - 1: dirs.append(self.EAST)
        return dirs

    def direction_to(self, x1: int, y1: int, x2: int, y2: int) -> int:
        dx, dy = x2 - x1, y2 - y1
        if dx == 0 and dy == -1: return self.NORTH
        if dx == 0 and dy == 1: return self.SOUTH
        if dx == 1 and dy == 0: return self.EAST
        if dx == -1 and dy == 0: return self.WEST
        raise ValueError(f"({x1}, {y1}) and ({x2}, {y2}) are not adjacent")

    # --- Walls ---

    def carve_path(self, x1: int, y1: int, dir_bit: int):
        """
        Removes the wall between current cell (x,y) and the neighbor in 'dir_bit'.
        Also removes the OPPOSITE wall from the neighbor.
        """
        x2 = x1 + self.DX[dir_bit]
        y2 = y1 + self.DY[dir_bit]
        if not (0 <= x2 < self.width and 0 <= y2 < self.height):
            return  # Cannot carve into void, see open_boundary

        if self.event_writer:
            self.event_writer.log_carve(x1, y1, dir_bit)

        self.cells[y1 * self.width + x1] &= ~dir_bit
        self.cells[y2 * self.width + x2] &= ~self.OPPOSITE[dir_bit]

    def link(self, x1: int, y1: int, x2: int, y2: int):
        """Creates a passage between two adjacent cells."""
        self.carve_path(x1, y1, self.direction_to(x1, y1, x2, y2))

    def open_boundary(self, x: int, y: int, dir_bit: int):
        """Breaks an outer wall so (x, y) leads outside the maze."""
        if dir_bit not in self.boundary_directions(x, y):
            raise ValueError(f"{self.NAMES[dir_bit]} wall of ({x}, {y}) is not on the boundary")
        if self.event_writer:
            self.event_writer.log_open(x, y, dir_bit)
        self.cells[y * self.width + x] &= ~dir_bit

    def has_wall(self, x: int, y: int, dir_bit: int) -> bool:
        return (self.cells[y * self.width + x] & dir_bit) != 0

    def broken_count(self, x: int, y: int) -> int:
        """Number of broken walls, outer walls included."""
        walls = self.cells[y * self.width + x] & self.ALL_WALLS
        return 4 - bin(walls).count("1")

    def unchecked_broken_count(self, x: int, y: int) -> int:
        val = self.cells[y * self.width + x]
        checked = (val >> self.WALL_CHECKED_SHIFT) & self.ALL_WALLS
        open_unchecked = ~val & ~checked & self.ALL_WALLS
        return bin(open_unchecked).count("1")

    def count_passages(self) -> int:
        """Broken interior walls, each counted once."""
        total = 0
        w, h = self.width, self.height
        for y in range(h):
            for x in range(w):
                val = self.cells[y * w + x]
                if x < w - 1 and not (val & self.EAST): total += 1
                if y < h - 1 and not (val & self.SOUTH): total += 1
        return total

    # --- Generation flags ---

    def set_visited(self, x: int, y: int, visited: bool = True):
        idx = y * self.width + x
        if visited:
            self.cells[idx] |= self.VISITED
            if self.event_writer:
                self.event_writer.log_visit(x, y)
        else:
            self.cells[idx] &= ~self.VISITED

    def is_visited(self, x: int, y: int) -> bool:
        return (self.cells[y * self.width + x] & self.VISITED) != 0

    def all_visited(self) -> bool:
        return all(val & self.VISITED for val in self.cells)

    def set_id(self, x: int, y: int) -> int:
        return self.set_ids[y * self.width + x]

    def overtake_set(self, absorbing: int, doomed: int) -> int:
        """
        Relabels every cell of set 'doomed' with 'absorbing'. Full scan, O(n).
        Returns the number of relabelled cells.
        """
        if absorbing == doomed:
            return 0
        ids = self.set_ids
        count = 0
        for i in range(len(ids)):
            if ids[i] == doomed:
                ids[i] = absorbing
                count += 1
        return count

    # --- Solver flags ---

    def mark_checked(self, x: int, y: int):
        """Rules a cell out of the solution."""
        idx = y * self.width + x
        was_path = self.cells[idx] & self.PATH
        self.cells[idx] = (self.cells[idx] | self.CHECKED) & ~self.PATH
        if self.event_writer:
            if was_path:
                self.event_writer.log_path_rem(x, y)
            self.event_writer.log_check(x, y)

    def is_checked(self, x: int, y: int) -> bool:
        return (self.cells[y * self.width + x] & self.CHECKED) != 0

    def mark_solution(self, x: int, y: int, on: bool = True):
        idx = y * self.width + x
        if on:
            self.cells[idx] = (self.cells[idx] | self.PATH) & ~self.CHECKED
            if self.event_writer:
                self.event_writer.log_path_add(x, y)
        else:
            self.cells[idx] &= ~self.PATH
            if self.event_writer:
                self.event_writer.log_path_rem(x, y)

    def is_solution(self, x: int, y: int) -> bool:
        return (self.cells[y * self.width + x] & self.PATH) != 0

    def _set_wall_flag(self, x: int, y: int, dir_bit: int, shift: int, on: bool):
        nx, ny = x + self.DX[dir_bit], y + self.DY[dir_bit]
        pairs = [(y * self.width + x, dir_bit)]
        if 0 <= nx < self.width and 0 <= ny < self.height:
            pairs.append((ny * self.width + nx, self.OPPOSITE[dir_bit]))
        for idx, bit in pairs:
            if on:
                self.cells[idx] |= bit << shift
            else:
                self.cells[idx] &= ~(bit << shift)

    def mark_wall_checked(self, x: int, y: int, dir_bit: int):
        """Marks the wall on both sides as checked; it stops being part of the solution."""
        self._set_wall_flag(x, y, dir_bit, self.WALL_CHECKED_SHIFT, True)
        self._set_wall_flag(x, y, dir_bit, self.WALL_PATH_SHIFT, False)

    def is_wall_checked(self, x: int, y: int, dir_bit: int) -> bool:
        return (self.cells[y * self.width + x] & (dir_bit << self.WALL_CHECKED_SHIFT)) != 0

    def mark_wall_solution(self, x: int, y: int, dir_bit: int, on: bool = True):
        """Marks the wall on both sides as part of the solution; it stops being checked."""
        self._set_wall_flag(x, y, dir_bit, self.WALL_PATH_SHIFT, on)
        if on:
            self._set_wall_flag(x, y, dir_bit, self.WALL_CHECKED_SHIFT, False)

    def is_wall_solution(self, x: int, y: int, dir_bit: int) -> bool:
        return (self.cells[y * self.width + x] & (dir_bit << self.WALL_PATH_SHIFT)) != 0

    def mark_broken_walls_checked(self, x: int, y: int):
        val = self.cells[y * self.width + x]
        for dir_bit in self.DIRECTIONS:
            if not (val & dir_bit):
                self.mark_wall_checked(x, y, dir_bit)

    # --- Neighbor queries ---

    def top_neighbor(self, x: int, y: int) -> Optional[Coord]:
        return (x, y - 1) if y > 0 else None

    def bottom_neighbor(self, x: int, y: int) -> Optional[Coord]:
        return (x, y + 1) if y < self.height - 1 else None

    def left_neighbor(self, x: int, y: int) -> Optional[Coord]:
        return (x - 1, y) if x > 0 else None

    def right_neighbor(self, x: int, y: int) -> Optional[Coord]:
        return (x + 1, y) if x < self.width - 1 else None

    def get_neighbors(self, x: int, y: int) -> Iterator[Tuple[int, int, int]]:
        """
        Yields (nx, ny, direction_to_neighbor) for all valid grid neighbors.
        Does NOT check walls (that's for pathfinding).
        """
        if y > 0:
            yield (x, y - 1, self.NORTH)
        if y < self.height - 1:
            yield (x, y + 1, self.SOUTH)
        if x < self.width - 1:
            yield (x + 1, y, self.EAST)
        if x > 0:
            yield (x - 1, y, self.WEST)

    def unvisited_neighbors(self, x: int, y: int) -> List[Tuple[int, int, int]]:
        return [n for n in self.get_neighbors(x, y) if not self.is_visited(n[0], n[1])]

    def visited_neighbors(self, x: int, y: int) -> List[Tuple[int, int, int]]:
        return [n for n in self.get_neighbors(x, y) if self.is_visited(n[0], n[1])]

    def neighbors_not_in_set(self, x: int, y: int) -> List[Tuple[int, int, int]]:
        own = self.set_ids[y * self.width + x]
        return [n for n in self.get_neighbors(x, y)
                if self.set_ids[n[1] * self.width + n[0]] != own]

    def get_open_neighbors(self, x: int, y: int) -> Iterator[Tuple[int, int]]:
        """
        Yields (nx, ny) for neighbors that are NOT blocked by a wall.
        """
        val = self.cells[y * self.width + x]

        if not (val & self.NORTH) and y > 0:
            yield (x, y - 1)
        if not (val & self.SOUTH) and y < self.height - 1:
            yield (x, y + 1)
        if not (val & self.EAST) and x < self.width - 1:
            yield (x + 1, y)
        if not (val & self.WEST) and x > 0:
            yield (x - 1, y)

    def get_passable_neighbors(self, x: int, y: int) -> List[Tuple[int, int, int]]:
        """
        Neighbors a solver may still step to: broken and unchecked wall,
        cell neither checked nor already on the solution.
        """
        val = self.cells[y * self.width + x]
        result = []
        for nx, ny, dir_bit in self.get_neighbors(x, y):
            if val & dir_bit or val & (dir_bit << self.WALL_CHECKED_SHIFT):
                continue
            if self.cells[ny * self.width + nx] & (self.CHECKED | self.PATH):
                continue
            result.append((nx, ny, dir_bit))
        return result

    def cell(self, x: int, y: int) -> CellState:
        idx = self.get_index(x, y)
        val = self.cells[idx]
        walls = {
            self.NAMES[d]: WallState(
                broken=not (val & d),
                checked=bool(val & (d << self.WALL_CHECKED_SHIFT)),
                solution=bool(val & (d << self.WALL_PATH_SHIFT)),
            )
            for d in self.DIRECTIONS
        }
        return CellState(x, y, bool(val & self.VISITED), self.set_ids[idx],
                         bool(val & self.CHECKED), bool(val & self.PATH), walls)
