from collections import deque

import numpy as np

from labyrinth.core.grid import Grid


class MazePostProcessor:
    @staticmethod
    def wall_counts(grid: Grid) -> np.ndarray:
        """Standing walls per cell as a (height, width) array."""
        cells = np.frombuffer(grid.cells, dtype=np.uint16).reshape(grid.height, grid.width)
        walls = cells & Grid.ALL_WALLS
        return ((walls & Grid.NORTH) > 0).astype(np.int8) \
            + ((walls & Grid.EAST) > 0) \
            + ((walls & Grid.SOUTH) > 0) \
            + ((walls & Grid.WEST) > 0)

    @staticmethod
    def calculate_stats(grid: Grid):
        counts = MazePostProcessor.wall_counts(grid)

        dead_ends = int(np.count_nonzero(counts == 3))
        corridors = int(np.count_nonzero(counts == 2))
        junctions = int(np.count_nonzero(counts <= 1))

        total = grid.width * grid.height
        return {
            "dead_ends": dead_ends,
            "corridors": corridors,
            "junctions": junctions,
            "passages": grid.count_passages(),
            "dead_end_percent": (dead_ends / total) * 100 if total > 0 else 0
        }

    @staticmethod
    def reachable(grid: Grid, x: int = 0, y: int = 0) -> int:
        """Cells reachable from (x, y) through passages, BFS."""
        seen = np.zeros((grid.height, grid.width), dtype=bool)
        seen[y, x] = True
        queue = deque([(x, y)])
        count = 1
        while queue:
            cx, cy = queue.popleft()
            for nx, ny in grid.get_open_neighbors(cx, cy):
                if not seen[ny, nx]:
                    seen[ny, nx] = True
                    count += 1
                    queue.append((nx, ny))
        return count

    @staticmethod
    def is_connected(grid: Grid) -> bool:
        return MazePostProcessor.reachable(grid) == grid.width * grid.height

    @staticmethod
    def is_perfect(grid: Grid) -> bool:
        """Connected with exactly n - 1 passages, i.e. a spanning tree."""
        total = grid.width * grid.height
        return grid.count_passages() == total - 1 and MazePostProcessor.is_connected(grid)
