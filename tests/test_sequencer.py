from src.route_optimizer.models.domain import Edge
from src.route_optimizer.services.routing.matrix import CostMatrix
from src.route_optimizer.services.routing.sequencer import sequence


def _matrix(distances: dict[tuple[int, int], float]) -> CostMatrix:
    return CostMatrix(
        {
            (origin, destination): Edge(origin, destination, km, int(km * 60), f"{origin}{destination}")
            for (origin, destination), km in distances.items()
        }
    )


# Origin=0, A=1, B=2
EXAMPLE = {
    (0, 1): 5.0,
    (0, 2): 9.0,
    (1, 2): 3.0,
    (2, 1): 4.0,
    (1, 0): 6.0,
    (2, 0): 7.0,
}


def test_example_route_closes_via_last_stop():
    route = sequence(0, [1, 2], _matrix(EXAMPLE), close_loop=True)

    assert route.stops == [0, 1, 2]
    assert route.closing_edge is not None
    assert (route.closing_edge.origin, route.closing_edge.destination) == (2, 0)
    assert route.closing_edge.distance_km == 7.0


def test_open_route_has_no_closing_edge():
    route = sequence(0, [1, 2], _matrix(EXAMPLE), close_loop=False)

    assert route.stops == [0, 1, 2]
    assert route.closing_edge is None


def test_each_step_takes_the_unique_nearest_unvisited():
    # From 0 the nearest is 3, from 3 it is 1, from 1 it is 4, leaving 2.
    distances = {(i, j): 50.0 for i in range(5) for j in range(5) if i != j}
    distances.update({(0, 3): 1.0, (3, 1): 2.0, (1, 4): 1.5, (4, 2): 9.0, (0, 1): 2.5, (3, 4): 4.0})

    route = sequence(0, [1, 2, 3, 4], _matrix(distances), close_loop=False)

    assert route.stops == [0, 3, 1, 4, 2]


def test_greedy_choice_is_not_globally_optimal():
    # Greedy goes 0->1->2->3 (1 + 10 + 50); 0->2->1->3 costs 1.5 + 1 + 20.
    distances = {(i, j): 100.0 for i in range(4) for j in range(4) if i != j}
    distances.update({(0, 1): 1.0, (0, 2): 1.5, (1, 2): 10.0, (1, 3): 20.0, (2, 1): 1.0, (2, 3): 50.0})

    route = sequence(0, [1, 2, 3], _matrix(distances), close_loop=False)

    assert route.stops == [0, 1, 2, 3]


def test_ties_go_to_the_earlier_candidate():
    distances = {(0, 1): 4.0, (0, 2): 4.0, (1, 2): 1.0, (2, 1): 1.0, (1, 0): 4.0, (2, 0): 4.0}
    matrix = _matrix(distances)

    assert sequence(0, [1, 2], matrix).stops == [0, 1, 2]
    assert sequence(0, [2, 1], matrix).stops == [0, 2, 1]


def test_direction_of_travel_is_respected():
    # 1 is close to 0 only on the way back; going out, 2 is nearer.
    distances = {(0, 1): 8.0, (1, 0): 1.0, (0, 2): 3.0, (2, 0): 9.0, (1, 2): 2.0, (2, 1): 2.0}

    assert sequence(0, [1, 2], _matrix(distances)).stops == [0, 2, 1]


def test_sequence_is_deterministic():
    distances = {(i, j): float((i * 7 + j * 3) % 5 + 1) for i in range(6) for j in range(6) if i != j}
    matrix = _matrix(distances)

    first = sequence(0, [1, 2, 3, 4, 5], matrix)
    for _ in range(5):
        again = sequence(0, [1, 2, 3, 4, 5], matrix)
        assert again.stops == first.stops
        assert again.closing_edge == first.closing_edge


def test_every_candidate_visited_exactly_once():
    distances = {(i, j): float(abs(i - j) ** 2 + (i % 3)) for i in range(8) for j in range(8) if i != j}

    route = sequence(0, [5, 3, 7, 1, 2, 6, 4], _matrix(distances))

    assert route.stops[0] == 0
    assert sorted(route.stops[1:]) == [1, 2, 3, 4, 5, 6, 7]
    assert len(route.stops) == 8


def test_single_stop_has_no_closing_leg():
    route = sequence(0, [1], _matrix({(0, 1): 5.0, (1, 0): 6.0}), close_loop=True)

    assert route.stops == [0, 1]
    assert route.closing_edge is None


def test_origin_alone():
    route = sequence(0, [], CostMatrix(), close_loop=True)

    assert route.stops == [0]
    assert route.closing_edge is None


def test_missing_return_edge_leaves_route_open():
    distances = dict(EXAMPLE)
    del distances[(2, 0)]

    route = sequence(0, [1, 2], _matrix(distances), close_loop=True)

    assert route.stops == [0, 1, 2]
    assert route.closing_edge is None
