import math

import pytest
import numpy as np
import yaml

from molsolvent.calculations import CALCULATIONS, create, launch
from molsolvent.calculations.distance import DistTwoAtomsParams
from molsolvent.core.errors import ConfigurationError, FrameParseError


def _rows(path):
    lines = path.read_text().splitlines()
    return lines[0].split(), [line.split() for line in lines[1:]]


def test_lookup_table():
    """Test that every calculation type is registered."""
    assert set(CALCULATIONS) == {"dist_two_atoms", "radius_gyration", "no_pbc", "gr", "volume"}


def test_unknown_type():
    """Test that an unknown calculation type is refused."""
    with pytest.raises(ConfigurationError, match="unknown calculation type: msd"):
        create("msd", {})


@pytest.mark.parametrize("changes, message", [
    ({"cfg_start": 5, "cfg_end": 5}, "CfgStart is greater or equal than CfgEnd"),
    ({"cfg_start": -1}, "CfgStart must not be negative"),
    ({"atom_1": 3, "atom_2": 1}, "Atom1 is greater or equal than Atom2"),
    ({"atom_1": 2.5}, "must be an integer"),
    ({"cfg_end": "ten"}, "must be of type int"),
])
def test_distance_params_validation(changes, message):
    """Test range and type checks of the distance parameters."""
    params = {"file_in": "a", "file_out": "b", "cfg_start": 0, "cfg_end": 5, "atom_1": 0, "atom_2": 1}
    params.update(changes)
    with pytest.raises(ConfigurationError, match=message):
        DistTwoAtomsParams.from_dict(params)


@pytest.mark.parametrize("value, expected", [
    (True, True), (False, False), ("false", False), ("False", False), ("no", False),
    ("true", True), ("yes", True), (0, False), (1, True),
])
def test_boolean_settings(value, expected):
    """Test that quoted booleans are read by their meaning."""
    params = DistTwoAtomsParams.from_dict({"file_in": "a", "file_out": "b", "cfg_start": 0, "cfg_end": 5,
                                           "atom_1": 0, "atom_2": 1, "plot": value, "progress": value})
    assert params.plot is expected
    assert params.progress is expected


@pytest.mark.parametrize("value", ["maybe", 2, 0.5, [True]])
def test_boolean_settings_reject_other_values(value):
    """Test that a boolean setting refuses values that are not true or false."""
    with pytest.raises(ConfigurationError, match="setting plot must be true or false"):
        DistTwoAtomsParams.from_dict({"file_in": "a", "file_out": "b", "cfg_start": 0, "cfg_end": 5,
                                      "atom_1": 0, "atom_2": 1, "plot": value})


def test_missing_parameter():
    """Test that a missing required setting is reported by name."""
    with pytest.raises(ConfigurationError, match="missing required setting: atom_2"):
        DistTwoAtomsParams.from_dict({"file_in": "a", "file_out": "b", "cfg_start": 0, "cfg_end": 5,
                                      "atom_1": 0})


def test_parameters_under_type_key():
    """Test parameters nested under the calculation name."""
    calc = create("dist_two_atoms", {"dist_two_atoms": {"file_in": "a", "file_out": "b", "cfg_start": 0,
                                                        "cfg_end": 5, "atom_1": 0, "atom_2": 1}})
    assert calc.params.cfg_end == 5
    assert calc.params.dt == 1.0


def test_dist_two_atoms(write_dump, moving_frames, tmp_path):
    """Test the distance table for an atom moving along x."""
    path = write_dump(moving_frames)
    out = tmp_path / "dist.txt"
    launch("dist_two_atoms", {"file_in": str(path), "file_out": str(out), "cfg_start": 1, "cfg_end": 4,
                              "atom_1": 0, "atom_2": 1, "dt": 0.5, "progress": False})
    columns, rows = _rows(out)
    assert columns == ["cfg", "t", "x", "y", "z", "dist"]
    assert rows == [
        ["1", "0.5", "-1.0", "-4.0", "0.0", repr(math.sqrt(17.0))],
        ["2", "1.0", "-2.0", "-4.0", "0.0", repr(math.sqrt(20.0))],
        ["3", "1.5", "-3.0", "-4.0", "0.0", "5.0"],
    ]
    sidecar = yaml.safe_load((tmp_path / "dist.txt.yaml").read_text())
    assert sidecar["dist_two_atoms"]["atom_2"] == 1


def test_dist_prefers_unwrapped(write_dump, tmp_path):
    """Test that unwrapped coordinates win over wrapped ones."""
    frames = [[(1, 1, 1.0, 0.0, 0.0, 11.0, 0.0, 0.0), (2, 1, 2.0, 0.0, 0.0, 2.0, 0.0, 0.0)]]
    path = write_dump(frames, columns="id type x y z xu yu zu")
    out = tmp_path / "dist.txt"
    launch("dist_two_atoms", {"file_in": str(path), "file_out": str(out), "cfg_start": 0, "cfg_end": 1,
                              "atom_1": 0, "atom_2": 1, "progress": False})
    _, rows = _rows(out)
    assert rows[0][-1] == "9.0"


def test_malformed_row_keeps_earlier_rows(write_dump, moving_frames, tmp_path):
    """Test that a bad row fails its frame and keeps the rows already written."""
    moving_frames[3][0] = (1, 1, 1.0, 2.0)
    path = write_dump(moving_frames)
    out = tmp_path / "dist.txt"
    calc = create("dist_two_atoms", {"file_in": str(path), "file_out": str(out), "cfg_start": 0,
                                     "cfg_end": 5, "atom_1": 0, "atom_2": 1, "progress": False})
    with pytest.raises(FrameParseError) as excinfo:
        calc.start()
    assert excinfo.value.frame == 3
    assert "frame 3" in str(excinfo.value)
    _, rows = _rows(out)
    assert [row[0] for row in rows] == ["0", "1", "2"]


def test_atom_out_of_range(write_dump, moving_frames, tmp_path):
    """Test an atom index beyond the atom count."""
    calc = create("dist_two_atoms", {"file_in": str(write_dump(moving_frames)), "file_out": str(tmp_path / "d"),
                                     "cfg_start": 0, "cfg_end": 2, "atom_1": 0, "atom_2": 2, "progress": False})
    with pytest.raises(ConfigurationError, match="out of range"):
        calc.start()


def test_missing_input(tmp_path):
    """Test a missing trajectory file."""
    calc = create("dist_two_atoms", {"file_in": str(tmp_path / "nope"), "file_out": str(tmp_path / "d"),
                                     "cfg_start": 0, "cfg_end": 2, "atom_1": 0, "atom_2": 1})
    with pytest.raises(FileNotFoundError):
        calc.start()


def test_radius_gyration(write_dump, tmp_path):
    """Test the radius of gyration table."""
    frames = [[(1, "C", 0.0, 0.0, 0.0), (2, "C", 2.0, 0.0, 0.0), (3, "O", 7.0, 7.0, 7.0)]] * 2
    out = tmp_path / "rg.txt"
    launch("radius_gyration", {"file_in": str(write_dump(frames)), "file_out": str(out), "cfg_start": 0,
                               "cfg_end": 2, "atom_start": 0, "atom_end": 2, "masses": {"C": 12.0},
                               "dt": 2.0, "progress": False})
    columns, rows = _rows(out)
    assert columns == ["cfg", "t", "radius"]
    assert [row[:2] for row in rows] == [["0", "0.0"], ["1", "2.0"]]
    assert float(rows[0][2]) == pytest.approx(math.sqrt(1.0 / 3.0))


def test_radius_gyration_missing_mass(write_dump, tmp_path):
    """Test that a type without a mass stops the calculation."""
    frames = [[(1, "C", 0.0, 0.0, 0.0), (2, "N", 2.0, 0.0, 0.0)]]
    calc = create("radius_gyration", {"file_in": str(write_dump(frames)), "file_out": str(tmp_path / "rg"),
                                      "cfg_start": 0, "cfg_end": 1, "atom_start": 0, "atom_end": 2,
                                      "masses": {"C": 12.0}, "progress": False})
    with pytest.raises(ConfigurationError, match="mass for atom type `N`"):
        calc.start()


def test_no_pbc(write_dump, tmp_path):
    """Test the unwrapped trajectory written by no_pbc."""
    frames = [
        [(1, 1, 7, 9.9, 5.0, 5.0), (2, 1, 7, 9.5, 5.0, 5.0)],
        [(1, 1, 7, 0.2, 5.0, 5.0), (2, 1, 7, 9.8, 5.0, 5.0)],
    ]
    path = write_dump(frames, columns="id type mol x y z")
    out = tmp_path / "unwrapped.lammpstrj"
    launch("no_pbc", {"file_in": str(path), "file_out": str(out), "progress": False})

    source_lines = path.read_text().splitlines()
    result = out.read_text().splitlines()
    assert len(result) == len(source_lines)
    assert result[:8] == source_lines[:8]
    assert result[8] == "ITEM: ATOMS id type mol xu yu zu"
    assert result[9] == "1 1 7 9.9 5.0 5.0"
    assert result[19] == "ITEM: ATOMS id type mol xu yu zu"
    assert result[20] == "1 1 7 10.2 5.0 5.0"
    assert result[21] == "2 1 7 9.8 5.0 5.0"


def test_no_pbc_requires_wrapped_columns(write_dump, tmp_path):
    """Test that no_pbc needs wrapped coordinate columns."""
    path = write_dump([[(1, 1.0, 1.0, 1.0)]], columns="id xu yu zu")
    with pytest.raises(FrameParseError, match="cannot find the columns x, y, z"):
        launch("no_pbc", {"file_in": str(path), "file_out": str(tmp_path / "o"), "progress": False})


def _water_dump(write_dump, n_frames=6, seed=5):
    rng = np.random.default_rng(seed)
    frames = []
    for _ in range(n_frames):
        xyz = rng.uniform(0.0, 10.0, size=(30, 3))
        frames.append([(i + 1, "O" if i < 10 else "H", *xyz[i]) for i in range(30)])
    return write_dump(frames, name="water.lammpstrj")


def test_gr_output_layout(write_dump, tmp_path):
    """Test the columns and rows of the g(r) table."""
    path = _water_dump(write_dump)
    out = tmp_path / "gr.txt"
    launch("gr", {"file_in": str(path), "file_out": str(out), "cfg_start": 1, "cfg_end": 6,
                  "rmax": 3.0, "dr": 0.5, "atoms": {"O": ["H"]}, "threads": 2, "progress": False})
    columns, rows = _rows(out)
    assert columns[0] == "dist"
    assert columns[1:3] == ["O-H(0)-intg", "O-H(0)-hstg"]
    assert columns[-1] == "O-H(9)-hstg"
    assert len(columns) == 21
    assert [row[0] for row in rows] == ["0.25", "0.75", "1.25", "1.75", "2.25", "2.75"]
    assert (tmp_path / "gr.txt.yaml").exists()


@pytest.mark.parametrize("threads", [2, 4])
def test_gr_independent_of_threads(write_dump, tmp_path, threads):
    """Test that the g(r) table does not depend on the thread count."""
    path = _water_dump(write_dump)
    params = {"file_in": str(path), "cfg_start": 0, "cfg_end": 6, "rmax": 4.0, "dr": 0.2,
              "atoms": {"O": ["H", "O"]}, "progress": False}
    launch("gr", {**params, "file_out": str(tmp_path / "one.txt"), "threads": 1})
    launch("gr", {**params, "file_out": str(tmp_path / "many.txt"), "threads": threads})
    assert (tmp_path / "one.txt").read_text() == (tmp_path / "many.txt").read_text()


def test_volume(write_dump, tmp_path):
    """Test the volume table and its point cloud."""
    frames = [[(1, "A", 2.5 + 0.1 * k, 2.5, 2.5), (2, "S", 7.5, 7.5, 7.5)] for k in range(7)]
    path = write_dump(frames)
    out = tmp_path / "vol.txt"
    launch("volume", {"file_in": str(path), "file_out": str(out), "cfg_start": 1, "cfg_end": 7,
                      "cfg_spacing": 1, "bloc": [1.0, 1.0, 1.0], "blocs": [0, 0, 0], "atoms": ["A"],
                      "sigma": {"A": 1.0, "S": 1.0}, "dt": 0.1, "threads": 2, "progress": False})
    columns, rows = _rows(out)
    assert columns == ["cfg", "t", "vol(atoms)", "vol(other)"]
    assert sorted(int(row[0]) for row in rows) == [1, 3, 5]
    assert all(row[2:] == ["1.0", "999.0"] for row in rows)

    cloud = (tmp_path / "vol.txt.xyz").read_text().splitlines()
    assert cloud[0] == "1"
    assert cloud[1] == " Atom C == solvent"
    assert cloud[2] == "O 2.5 2.5 2.5"


def test_volume_params_defaults():
    """Test the defaults of the volume parameters."""
    calc = create("volume", {"file_in": "in", "file_out": "out.txt", "cfg_start": 0, "cfg_end": 3,
                             "bloc": [1, 1, 1], "blocs": [1, 1, 1], "atoms": ["A"], "sigma": {"A": 1.0}})
    assert calc.params.file_out_xyz == "out.txt.xyz"
    assert calc.params.cfg_spacing == 0


def test_plot_option(write_dump, moving_frames, tmp_path):
    """Test that the plot option writes a PNG next to the table."""
    out = tmp_path / "dist.txt"
    launch("dist_two_atoms", {"file_in": str(write_dump(moving_frames)), "file_out": str(out), "cfg_start": 0,
                              "cfg_end": 5, "atom_1": 0, "atom_2": 1, "plot": True, "progress": False})
    assert (tmp_path / "dist.txt.png").exists()
