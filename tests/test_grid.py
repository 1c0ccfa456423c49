import networkx as nx

from ant_transport.chain.grid import block_cell, grid_graph, legal_moves, move_count


def test_grid_5x5_connected_and_size():
    g = grid_graph(5)
    assert g.number_of_nodes() == 25
    assert g.number_of_edges() == 40
    assert nx.is_connected(g)


def test_corner_edge_and_interior_move_counts():
    g = grid_graph(5)
    for corner in [(0, 0), (4, 0), (0, 4), (4, 4)]:
        assert move_count(corner, g) == 2
    for edge in [(2, 0), (0, 3), (4, 1), (1, 4)]:
        assert move_count(edge, g) == 3
    for interior in [(1, 1), (2, 2), (3, 3), (1, 3)]:
        assert move_count(interior, g) == 4


def test_legal_moves_order_is_up_down_left_right():
    g = grid_graph(5)
    assert legal_moves((2, 2), g) == [(2, 1), (2, 3), (1, 2), (3, 2)]
    assert legal_moves((0, 0), g) == [(0, 1), (1, 0)]


def test_block_cell_isolates_without_touching_input_graph():
    g = grid_graph(3)
    blocked = block_cell(g, (1, 1))
    assert move_count((1, 1), blocked) == 0
    assert move_count((1, 0), blocked) == 2
    assert move_count((1, 1), g) == 4


def test_grid_graph_returns_independent_copies():
    first = grid_graph(4)
    first.remove_node((0, 0))
    assert (0, 0) in grid_graph(4)
