import struct
import json
import zlib
from typing import Optional, Dict, Any, Tuple
from array import array
from labyrinth.core.grid import Grid


class MazeSerializer:
    MAGIC = b"MAZE"
    VERSION = 2

    # Flags
    FLAG_COMPRESSED = 1
    FLAG_SEED_ONLY = 2

    @staticmethod
    def save(grid: Grid, filepath: str, meta: Optional[Dict[str, Any]] = None,
             seed_only=False, compress=False):
        """
        Saves the maze to a binary file.
        Format (little endian):
        - MAGIC (4 bytes)
        - VERSION (1 byte)
        - FLAGS (1 byte)
        - WIDTH (4 bytes)
        - HEIGHT (4 bytes)
        - META_LEN (2 bytes)
        - META_JSON (META_LEN bytes)
        - DATA_LEN (4 bytes, 0 if seed_only)
        - DATA: cell words ('H') followed by set ids ('i'), compressed or raw
        """
        if meta is None:
            meta = {}

        flags = 0
        if compress:
            flags |= MazeSerializer.FLAG_COMPRESSED
        if seed_only:
            flags |= MazeSerializer.FLAG_SEED_ONLY

        meta_bytes = json.dumps(meta).encode('utf-8')

        with open(filepath, "wb") as f:
            f.write(MazeSerializer.MAGIC)
            f.write(struct.pack("<BB", MazeSerializer.VERSION, flags))
            f.write(struct.pack("<II", grid.width, grid.height))
            f.write(struct.pack("<H", len(meta_bytes)))
            f.write(meta_bytes)

            if seed_only:
                f.write(struct.pack("<I", 0))
            else:
                data = grid.cells.tobytes() + grid.set_ids.tobytes()
                if compress:
                    data = zlib.compress(data)

                f.write(struct.pack("<I", len(data)))
                f.write(data)

    @staticmethod
    def load(filepath: str) -> Tuple[Grid, Dict[str, Any]]:
        with open(filepath, "rb") as f:
            magic = f.read(4)
            if magic != MazeSerializer.MAGIC:
                raise ValueError("Invalid file format")

            version, flags = struct.unpack("<BB", f.read(2))
            if version != MazeSerializer.VERSION:
                raise ValueError(f"Unsupported maze file version {version}")
            width, height = struct.unpack("<II", f.read(8))
            meta_len = struct.unpack("<H", f.read(2))[0]
            meta = json.loads(f.read(meta_len).decode('utf-8'))

            grid = Grid(width, height)

            data_len = struct.unpack("<I", f.read(4))[0]

            if flags & MazeSerializer.FLAG_SEED_ONLY:
                # Caller regenerates from meta['seed'] and meta['algo']
                pass
            elif data_len > 0:
                data = f.read(data_len)
                if flags & MazeSerializer.FLAG_COMPRESSED:
                    data = zlib.decompress(data)

                size = width * height
                cells = array('H')
                cells.frombytes(data[:size * cells.itemsize])
                set_ids = array('i')
                set_ids.frombytes(data[size * cells.itemsize:])
                if len(cells) != size or len(set_ids) != size:
                    raise ValueError("Truncated maze data")
                grid.cells = cells
                grid.set_ids = set_ids

            return grid, meta
