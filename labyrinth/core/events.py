import struct
from typing import Iterator, Tuple

# Event Types
EVT_VISIT = 0x02
EVT_CARVE = 0x03
EVT_PATH_ADD = 0x04
EVT_PATH_REM = 0x05
EVT_CHECK = 0x06
EVT_OPEN = 0x07

MAGIC = b"MAZELOG"


class EventWriter:
    """
    Appends one record per grid mutation. Attach it to a Grid to observe a run
    without touching the algorithm: the grid calls the log_* hooks itself.
    """
    def __init__(self, filename: str):
        self.filename = filename
        self.file = open(filename, "wb")
        self.count = 0

    def write_header(self, width: int, height: int):
        # Header: Magic "MAZELOG" + Width (4b) + Height (4b)
        self.file.write(MAGIC)
        self.file.write(struct.pack(">II", width, height))

    def _cell_event(self, type_code: int, x: int, y: int):
        # 1 byte type + 2b X + 2b Y. 'H' caps coordinates at 65535.
        self.file.write(struct.pack(">BHH", type_code, x, y))
        self.count += 1

    def _wall_event(self, type_code: int, x: int, y: int, direction: int):
        self.file.write(struct.pack(">BHHB", type_code, x, y, direction))
        self.count += 1

    def log_visit(self, x: int, y: int):
        self._cell_event(EVT_VISIT, x, y)

    def log_carve(self, x: int, y: int, direction: int):
        self._wall_event(EVT_CARVE, x, y, direction)

    def log_open(self, x: int, y: int, direction: int):
        self._wall_event(EVT_OPEN, x, y, direction)

    def log_check(self, x: int, y: int):
        self._cell_event(EVT_CHECK, x, y)

    def log_path_add(self, x: int, y: int):
        self._cell_event(EVT_PATH_ADD, x, y)

    def log_path_rem(self, x: int, y: int):
        self._cell_event(EVT_PATH_REM, x, y)

    def close(self):
        if self.file:
            self.file.close()
            self.file = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class EventReader:
    def __init__(self, filename: str):
        self.filename = filename
        self.file = open(filename, "rb")
        self.width = 0
        self.height = 0

    def read_header(self) -> Tuple[int, int]:
        magic = self.file.read(len(MAGIC))
        if magic != MAGIC:
            raise ValueError("Invalid event log file")
        data = self.file.read(8)
        self.width, self.height = struct.unpack(">II", data)
        return self.width, self.height

    def stream_events(self) -> Iterator[Tuple[int, Tuple]]:
        while True:
            type_byte = self.file.read(1)
            if not type_byte:
                break

            type_code = ord(type_byte)

            if type_code in (EVT_CARVE, EVT_OPEN):
                x, y, d = struct.unpack(">HHB", self.file.read(5))
                yield (type_code, (x, y, d))
            elif type_code in (EVT_VISIT, EVT_CHECK, EVT_PATH_ADD, EVT_PATH_REM):
                x, y = struct.unpack(">HH", self.file.read(4))
                yield (type_code, (x, y))
            else:
                raise ValueError(f"Unknown event type {type_code:#x}")

    def close(self):
        if self.file:
            self.file.close()
            self.file = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def replay(grid, reader: EventReader) -> int:
    """
    Applies a recorded event stream to 'grid'. Wall-level solver flags are not
    logged, so only cell flags and passages are reproduced.
    Returns the number of events applied.
    """
    count = 0
    for type_code, data in reader.stream_events():
        count += 1
        if type_code == EVT_CARVE:
            grid.carve_path(*data)
            continue
        if type_code == EVT_OPEN:
            x, y, d = data
            grid.cells[grid.get_index(x, y)] &= ~d
            continue

        idx = grid.get_index(*data)
        if type_code == EVT_VISIT:
            grid.cells[idx] |= grid.VISITED
        elif type_code == EVT_CHECK:
            grid.cells[idx] |= grid.CHECKED
        elif type_code == EVT_PATH_ADD:
            grid.cells[idx] |= grid.PATH
        elif type_code == EVT_PATH_REM:
            grid.cells[idx] &= ~grid.PATH
    return count
