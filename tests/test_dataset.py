"""
Tests for CSV example loading.
"""

import numpy as np
import pytest

from netview.data.dataset import Dataset, load_csv


def write_csv(path, rows, header=None):
    lines = []
    if header:
        lines.append(header)
    lines.extend(",".join(str(v) for v in row) for row in rows)
    path.write_text("\n".join(lines) + "\n")
    return str(path)


class TestLoadCsv:

    def test_scaling_and_one_hot(self, tmp_path):
        path = write_csv(tmp_path / "d.csv", [[3, 0, 255, 51, 102], [0, 255, 0, 0, 0]])
        data = load_csv(path, input_size=4)
        assert len(data) == 2
        assert data.inputs[0] == pytest.approx([0.0, 1.0, 0.2, 0.4])
        assert data.targets.shape == (2, 10)
        assert data.targets[0, 3] == 1.0 and data.targets[0].sum() == 1.0
        assert list(data.labels) == [3, 0]

    def test_header_skipped(self, tmp_path):
        path = write_csv(tmp_path / "d.csv", [[1, 0, 0]], header="label,p0,p1")
        data = load_csv(path, input_size=2)
        assert len(data) == 1
        assert data.labels[0] == 1

    def test_single_row(self, tmp_path):
        path = write_csv(tmp_path / "d.csv", [[9, 10, 20]])
        assert load_csv(path, input_size=2).inputs.shape == (1, 2)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_csv(str(tmp_path / "missing.csv"))

    def test_wrong_width(self, tmp_path):
        path = write_csv(tmp_path / "d.csv", [[1, 0, 0]])
        with pytest.raises(ValueError):
            load_csv(path, input_size=784)

    def test_label_out_of_range(self, tmp_path):
        path = write_csv(tmp_path / "d.csv", [[10, 0, 0]])
        with pytest.raises(ValueError):
            load_csv(path, input_size=2)

    def test_fractional_label(self, tmp_path):
        path = write_csv(tmp_path / "d.csv", [[1.5, 0, 0]])
        with pytest.raises(ValueError):
            load_csv(path, input_size=2)


class TestDataset:

    def test_from_labels(self):
        data = Dataset.from_labels(np.zeros((3, 4)), [0, 2, 1], num_classes=3)
        assert data.targets.tolist() == [[1, 0, 0], [0, 0, 1], [0, 1, 0]]
        assert data.input_size == 4

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            Dataset(np.zeros((3, 4)), np.zeros((2, 10)))

    def test_shape_check(self):
        with pytest.raises(ValueError):
            Dataset(np.zeros(4), np.zeros((4, 10)))
