"""Tests for tab-separated ingestion."""

import io

import pytest

from algorithms.kmeans_clustering.engine import SparseKMeans
from utils.data_loader import KeyMap, dump_vectors, parse_line, read_vectors


@pytest.fixture
def write_data(tmp_path):
    def _write(text):
        path = tmp_path / "data.tsv"
        path.write_text(text, encoding="utf-8")
        return str(path)
    return _write


class TestKeyMap:
    """Key ids are dense and stable."""

    def test_first_occurrence_order(self):
        keymap = KeyMap()
        assert keymap.get_id("b") == 0
        assert keymap.get_id("a") == 1
        assert keymap.get_id("b") == 0
        assert keymap.names == ["b", "a"]
        assert len(keymap) == 2


class TestParseLine:
    """Record splitting."""

    def test_valid_record(self):
        keymap = KeyMap()
        label, vector = parse_line("doc1\tapple\t1.5\tpear\t2\n", keymap)
        assert label == "doc1"
        assert vector == {0: 1.5, 1: 2.0}

    def test_zero_values_dropped(self):
        _, vector = parse_line("doc1\tapple\t0\tpear\t2", KeyMap())
        assert vector == {1: 2.0}

    def test_label_only_is_valid_but_empty(self):
        label, vector = parse_line("onlylabel", KeyMap())
        assert label == "onlylabel"
        assert not vector

    @pytest.mark.parametrize("line", ["label\tkey", "label\tk1\t1\tk2"])
    def test_even_field_count_rejected(self, line):
        with pytest.raises(ValueError):
            parse_line(line, KeyMap())

    def test_non_numeric_value_rejected(self):
        with pytest.raises(ValueError):
            parse_line("label\tkey\tabc", KeyMap())

    def test_crlf_stripped(self):
        _, vector = parse_line("x\tk\t3\r\n", KeyMap())
        assert vector == {0: 3.0}


class TestReadVectors:
    """File ingestion into the engine."""

    def test_malformed_lines_skipped(self, write_data, capsys):
        path = write_data("A\tf1\t1\nlabel\tkey\nB\tf1\t1\nC\tf2\t1\n")
        kmeans = SparseKMeans(verbose=False)
        keymap, added = read_vectors(path, kmeans)

        assert added == 3
        assert kmeans.dataset.labels == ["A", "B", "C"]
        assert "label" not in kmeans.dataset.label_index
        assert "format error" in capsys.readouterr().err

    def test_empty_label_and_empty_vector_dropped_silently(self, write_data, capsys):
        path = write_data("\tf1\t1\nzero\tf1\t0\n\nok\tf1\t2\n")
        kmeans = SparseKMeans(verbose=False)
        _, added = read_vectors(path, kmeans)

        assert added == 1
        assert kmeans.dataset.labels == ["ok"]
        assert capsys.readouterr().err == ""

    def test_duplicate_label_skipped_with_warning(self, write_data, capsys):
        path = write_data("A\tf1\t1\nA\tf2\t1\n")
        kmeans = SparseKMeans(verbose=False)
        _, added = read_vectors(path, kmeans)

        assert added == 1
        assert kmeans.dataset.vectors[0] == {0: 1.0}
        assert "Warning" in capsys.readouterr().err

    def test_undecodable_line_skipped(self, tmp_path, capsys):
        path = tmp_path / "data.tsv"
        path.write_bytes(b"A\tf1\t1\nB\xff\tf1\t1\nC\tf2\t1\n")
        kmeans = SparseKMeans(verbose=False)
        _, added = read_vectors(str(path), kmeans)

        assert added == 2
        assert kmeans.dataset.labels == ["A", "C"]
        assert "format error on line 2" in capsys.readouterr().err

    def test_keymap_shared_across_lines(self, write_data):
        path = write_data("A\tx\t1\ty\t2\nB\ty\t3\n")
        kmeans = SparseKMeans(verbose=False)
        keymap, _ = read_vectors(path, kmeans)
        assert keymap.names == ["x", "y"]
        assert kmeans.dataset.vectors[1] == {1: 3.0}

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            read_vectors(str(tmp_path / "missing.tsv"), SparseKMeans(verbose=False))


class TestDumpVectors:
    """Debug dump uses the original key names."""

    def test_dump(self, write_data):
        path = write_data("A\tx\t1\ty\t2.25\n")
        kmeans = SparseKMeans(verbose=False)
        keymap, _ = read_vectors(path, kmeans)
        out = io.StringIO()
        dump_vectors(kmeans.dataset, keymap, file=out)
        assert out.getvalue() == "A\tx\t1.000\ty\t2.250\n"
