import pytest

DEFAULT_BOX = ((0.0, 10.0), (0.0, 10.0), (0.0, 10.0))


def format_dump(frames, columns="id type x y z", boxes=None):
    """
    Render frames as a LAMMPS custom dump.

    Args:
        frames: One list of rows per frame; a row is a sequence of values
        columns: Column names following ``ITEM: ATOMS``
        boxes: Optional (lo, hi) triples per frame
    """
    lines = []
    for k, rows in enumerate(frames):
        box = boxes[k] if boxes is not None else DEFAULT_BOX
        lines += ["ITEM: TIMESTEP", str(k * 100), "ITEM: NUMBER OF ATOMS", str(len(rows)),
                  "ITEM: BOX BOUNDS pp pp pp"]
        lines += [f"{lo} {hi}" for lo, hi in box]
        lines.append(f"ITEM: ATOMS {columns}")
        lines += [" ".join(str(v) for v in row) for row in rows]
    return "\n".join(lines) + "\n"


@pytest.fixture
def make_dump():
    return format_dump


@pytest.fixture
def write_dump(tmp_path):
    """Write a dump file under tmp_path and return its path."""
    def _write(frames, name="traj.lammpstrj", **kwargs):
        path = tmp_path / name
        path.write_text(format_dump(frames, **kwargs))
        return path
    return _write


@pytest.fixture
def moving_frames():
    """Two atoms moving apart along x, five frames."""
    return [[(1, 1, 1.0, 2.0, 3.0), (2, 2, 1.0 + k, 6.0, 3.0)] for k in range(5)]
