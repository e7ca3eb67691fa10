"""Tests for the lattice adjacency of CellAgent.neighbors on the mesa grid."""

import pytest

from epidemic_grid.simulation.model import EpidemicModel


def neighbor_set(index, width, **kwargs):
    model = EpidemicModel(width=width, density=1.0, seed=1, **kwargs)
    return sorted(c.index for c in model.cells[index].neighbors)


class TestMooreClipped:
    def test_interior_cell_has_eight(self):
        assert neighbor_set(12, 5) == [6, 7, 8, 11, 13, 16, 17, 18]

    def test_corner_cell_has_three(self):
        assert neighbor_set(0, 10) == [1, 10, 11]

    def test_edge_cell_has_five(self):
        assert neighbor_set(2, 5) == [1, 3, 6, 7, 8]

    def test_last_index(self):
        assert neighbor_set(24, 5) == [18, 19, 23]

    def test_single_cell_grid_has_no_neighbors(self):
        assert neighbor_set(0, 1) == []


class TestVonNeumann:
    def test_interior_cell_has_four(self):
        assert neighbor_set(12, 5, neighborhood="von_neumann") == [7, 11, 13, 17]

    def test_corner_cell_has_two(self):
        assert neighbor_set(0, 5, neighborhood="von_neumann") == [1, 5]


class TestTorus:
    def test_corner_wraps(self):
        assert neighbor_set(0, 5, torus=True) == [1, 4, 5, 6, 9, 20, 21, 24]

    def test_von_neumann_corner_wraps(self):
        assert neighbor_set(0, 5, neighborhood="von_neumann", torus=True) == [1, 4, 5, 20]

    def test_small_torus_has_no_duplicates_or_self(self):
        model = EpidemicModel(width=2, density=1.0, seed=1, torus=True)
        neighbors = [c.index for c in model.cells[0].neighbors]
        assert sorted(neighbors) == [1, 2, 3]


class TestContract:
    @pytest.mark.parametrize("neighborhood", ["moore", "von_neumann"])
    @pytest.mark.parametrize("torus", [True, False])
    def test_never_self_never_twice(self, neighborhood, torus):
        model = EpidemicModel(width=4, density=1.0, seed=1, neighborhood=neighborhood, torus=torus)
        for cell in model.cells:
            indices = [c.index for c in cell.neighbors]
            assert cell.index not in indices
            assert len(indices) == len(set(indices))

    def test_symmetric(self):
        model = EpidemicModel(width=6, density=1.0, seed=1)
        for cell in model.cells:
            for other in cell.neighbors:
                assert cell in other.neighbors

    def test_empty_cells_are_neighbors_too(self):
        model = EpidemicModel(width=5, density=0.0, seed=1, patient_zero=12)
        assert len(model.cells[12].neighbors) == 8

    def test_lookup_is_cached(self):
        model = EpidemicModel(width=5, density=1.0, seed=1)
        cell = model.cells[7]
        assert cell.neighbors is cell.neighbors
