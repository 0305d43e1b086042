import pytest

from genetic_tsp.data import load_delimited_matrix, load_matrix, load_tsplib_instance, parse_delimited_matrix
from genetic_tsp.exceptions import InvalidMatrixError

SQUARE_TSP = """NAME: square4
TYPE: TSP
COMMENT: four corners of a square with side 10
DIMENSION: 4
EDGE_WEIGHT_TYPE: EUC_2D
NODE_COORD_SECTION
1 0 0
2 0 10
3 10 10
4 10 0
EOF
"""

SQUARE_TOUR = """NAME: square4.opt.tour
TYPE: TOUR
DIMENSION: 4
TOUR_SECTION
1
2
3
4
-1
EOF
"""


def test_load_delimited_matrix(six_cities_path):
    instance = load_delimited_matrix(six_cities_path)
    assert instance.name == "6_cities"
    assert instance.matrix.n == 6
    assert instance.matrix.distance(0, 5) == 200
    assert instance.nodes == list(range(6))
    assert instance.optimum is None


def test_parse_other_delimiter_and_blank_lines():
    matrix = parse_delimited_matrix(["0,2.5", "", "3,0", ""], delimiter=",")
    assert matrix.distance(0, 1) == 2.5
    assert matrix.distance(1, 0) == 3.0


def test_parse_rejects_bad_number():
    with pytest.raises(InvalidMatrixError):
        parse_delimited_matrix(["0;1", "x;0"])


def test_parse_rejects_ragged_rows():
    with pytest.raises(InvalidMatrixError):
        parse_delimited_matrix(["0;1;2", "1;0", "2;1;0"])


def test_load_tsplib_instance(tmp_path):
    path = tmp_path / "square4.tsp"
    path.write_text(SQUARE_TSP)
    (tmp_path / "square4.opt.tour").write_text(SQUARE_TOUR)
    instance = load_tsplib_instance(path)
    assert instance.name == "square4"
    assert instance.nodes == [1, 2, 3, 4]
    assert instance.matrix.distance(0, 1) == 10
    assert instance.matrix.distance(0, 2) == 14
    assert instance.optimum == 40.0


def test_load_matrix_dispatches_on_suffix(tmp_path, six_cities_path):
    path = tmp_path / "square4.tsp"
    path.write_text(SQUARE_TSP)
    instance = load_matrix(path)
    assert instance.matrix.n == 4
    assert instance.optimum is None
    assert load_matrix(six_cities_path).matrix.n == 6
