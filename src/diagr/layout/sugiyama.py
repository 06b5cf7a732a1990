"""Sugiyama-style layered graph layout engine.

Phases:
  1. Cycle removal (greedy-FAS)
  2. Layer assignment (longest path, honouring per-edge ``minlen``)
  3. Dummy node insertion
  4. Crossing minimization (weighted barycenter)
  5. Coordinate assignment (``ranksep`` between layers, ``nodesep`` within)

Input is a networkx DiGraph whose nodes carry ``width``/``height`` and whose
edges may carry ``minlen``/``weight``. All iteration follows graph insertion
order so identical input always yields identical output.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass

import networkx as nx

from diagr.layout.types import DUMMY_PREFIX, LayoutBox
from diagr.types import Direction

# ─── Tuning constants ────────────────────────────────────────────────────────

MAX_ORDERING_PASSES: int = 24
COORDINATE_SWEEPS: int = 4


# ─── Cycle Removal (Greedy-FAS) ─────────────────────────────────────────────


def greedy_fas_ordering(graph: nx.DiGraph) -> list[str]:
    """Compute a node ordering using the greedy-FAS heuristic."""
    active: dict[str, None] = dict.fromkeys(graph.nodes)
    out_deg: dict[str, int] = {}
    in_deg: dict[str, int] = {}
    for node in graph.nodes:
        out_deg[node] = sum(1 for succ in graph.successors(node) if succ != node)
        in_deg[node] = sum(1 for pred in graph.predecessors(node) if pred != node)

    s1: list[str] = []
    s2: list[str] = []

    while active:
        changed = True
        while changed:
            changed = False
            sinks = [n for n in active if out_deg[n] == 0]
            if sinks:
                changed = True
                for sink in sinks:
                    del active[sink]
                    s2.append(sink)
                    for pred in graph.predecessors(sink):
                        if pred in active:
                            out_deg[pred] -= 1

        changed = True
        while changed:
            changed = False
            sources = [n for n in active if in_deg[n] == 0]
            if sources:
                changed = True
                for source in sources:
                    del active[source]
                    s1.append(source)
                    for succ in graph.successors(source):
                        if succ in active:
                            in_deg[succ] -= 1

        if active:
            best = max(active, key=lambda n: out_deg[n] - in_deg[n])
            del active[best]
            s1.append(best)
            for succ in graph.successors(best):
                if succ in active:
                    in_deg[succ] -= 1
            for pred in graph.predecessors(best):
                if pred in active:
                    out_deg[pred] -= 1

    s2.reverse()
    s1.extend(s2)
    return s1


def remove_cycles(graph: nx.DiGraph) -> tuple[nx.DiGraph, set[tuple[str, str]]]:
    """Remove cycles using greedy-FAS. Returns (dag, reversed_edges)."""
    if graph.number_of_nodes() == 0:
        return graph.copy(), set()

    ordering = greedy_fas_ordering(graph)
    position: dict[str, int] = {node: pos for pos, node in enumerate(ordering)}

    reversed_edges: set[tuple[str, str]] = set()
    for src, tgt in graph.edges():
        if src == tgt or position[src] > position[tgt]:
            reversed_edges.add((src, tgt))

    new_graph: nx.DiGraph = nx.DiGraph()
    for node_id in graph.nodes:
        new_graph.add_node(node_id, **graph.nodes[node_id])

    for src, tgt, edge_attrs in graph.edges(data=True):
        if src == tgt:
            continue
        a, b = (tgt, src) if (src, tgt) in reversed_edges else (src, tgt)
        if new_graph.has_edge(a, b):
            # A reversed edge can collide with its twin; keep the stronger constraint.
            existing = new_graph.edges[a, b]
            existing["minlen"] = max(existing.get("minlen", 1), edge_attrs.get("minlen", 1))
            existing["weight"] = existing.get("weight", 1) + edge_attrs.get("weight", 1)
            continue
        new_graph.add_edge(a, b, **edge_attrs)

    return new_graph, reversed_edges


# ─── Layer Assignment ────────────────────────────────────────────────────────


class LayerAssignment:
    def __init__(self, layers: dict[str, int], layer_count: int) -> None:
        self.layers = layers
        self.layer_count = layer_count

    @classmethod
    def assign(cls, dag: nx.DiGraph) -> LayerAssignment:
        """Longest-path layering; an edge spans at least its ``minlen`` layers."""
        layers: dict[str, int] = {node_id: 0 for node_id in dag.nodes}
        for node_id in nx.topological_sort(dag):
            for succ in dag.successors(node_id):
                minlen = max(1, int(dag.edges[node_id, succ].get("minlen", 1)))
                if layers[succ] < layers[node_id] + minlen:
                    layers[succ] = layers[node_id] + minlen

        layer_count = (max(layers.values()) + 1) if layers else 1
        return cls(layers=layers, layer_count=layer_count)


# ─── Dummy Node Insertion ────────────────────────────────────────────────────


@dataclass
class AugmentedGraph:
    graph: nx.DiGraph
    layers: dict[str, int]
    layer_count: int


def insert_dummy_nodes(dag: nx.DiGraph, la: LayerAssignment) -> AugmentedGraph:
    """Insert zero-size dummy nodes for edges spanning multiple layers."""
    g: nx.DiGraph = nx.DiGraph()
    for node_id in dag.nodes:
        g.add_node(node_id, **dag.nodes[node_id])

    layers: dict[str, int] = copy.copy(la.layers)
    edge_counter = 0

    for src_id, tgt_id, attrs in dag.edges(data=True):
        weight = attrs.get("weight", 1)
        layer_diff = layers[tgt_id] - layers[src_id]
        if layer_diff <= 1:
            g.add_edge(src_id, tgt_id, weight=weight)
            continue

        chain_prev = src_id
        for i in range(layer_diff - 1):
            dummy_id = f"{DUMMY_PREFIX}{edge_counter}_{i}"
            g.add_node(dummy_id, width=0.0, height=0.0, dummy=True)
            layers[dummy_id] = layers[src_id] + i + 1
            g.add_edge(chain_prev, dummy_id, weight=weight)
            chain_prev = dummy_id
        g.add_edge(chain_prev, tgt_id, weight=weight)
        edge_counter += 1

    layer_count = (max(layers.values()) + 1) if layers else 1
    return AugmentedGraph(graph=g, layers=layers, layer_count=layer_count)


# ─── Crossing Minimization ───────────────────────────────────────────────────


def minimise_crossings(aug: AugmentedGraph) -> list[list[str]]:
    """Minimise edge crossings using a weighted barycenter heuristic.

    The initial order within each layer is graph insertion order; sorting is
    stable, so ties keep that order.
    """
    ordering: list[list[str]] = [[] for _ in range(aug.layer_count)]
    for node_id in aug.graph.nodes:
        ordering[aug.layers[node_id]].append(node_id)

    best = count_crossings(ordering, aug.graph)
    best_ordering = [list(layer) for layer in ordering]

    for _pass in range(MAX_ORDERING_PASSES):
        for layer_idx in range(1, aug.layer_count):
            prev: dict[str, float] = {nid: float(i) for i, nid in enumerate(ordering[layer_idx - 1])}
            ordering[layer_idx].sort(key=lambda a, p=prev: _barycenter(a, aug.graph, p, "incoming"))

        for layer_idx in range(aug.layer_count - 2, -1, -1):
            nxt: dict[str, float] = {nid: float(i) for i, nid in enumerate(ordering[layer_idx + 1])}
            ordering[layer_idx].sort(key=lambda a, n=nxt: _barycenter(a, aug.graph, n, "outgoing"))

        new = count_crossings(ordering, aug.graph)
        if new >= best:
            break
        best = new
        best_ordering = [list(layer) for layer in ordering]

    return best_ordering


def _barycenter(node_id: str, graph: nx.DiGraph, neighbor_pos: dict[str, float], direction: str) -> float:
    if direction == "incoming":
        neighbors = [(nb, graph.edges[nb, node_id].get("weight", 1)) for nb in graph.predecessors(node_id)]
    else:
        neighbors = [(nb, graph.edges[node_id, nb].get("weight", 1)) for nb in graph.successors(node_id)]
    weighted = [(neighbor_pos[nb], w) for nb, w in neighbors if nb in neighbor_pos]
    if not weighted:
        return float("inf")
    total = sum(w for _, w in weighted)
    return sum(pos * w for pos, w in weighted) / total


def count_crossings(ordering: list[list[str]], graph: nx.DiGraph) -> int:
    total = 0
    for l_idx in range(len(ordering) - 1):
        tgt_pos: dict[str, int] = {nid: i for i, nid in enumerate(ordering[l_idx + 1])}
        edges: list[tuple[int, int]] = []
        for sp, src_id in enumerate(ordering[l_idx]):
            for nb in graph.successors(src_id):
                if nb in tgt_pos:
                    edges.append((sp, tgt_pos[nb]))
        for i in range(len(edges)):
            for j in range(i + 1, len(edges)):
                ei, ej = edges[i], edges[j]
                if (ei[0] < ej[0] and ei[1] > ej[1]) or (ei[0] > ej[0] and ei[1] < ej[1]):
                    total += 1
    return total


# ─── Coordinate Assignment ───────────────────────────────────────────────────


def _pack_layer(order: list[str], desired: dict[str, float], cross: dict[str, float], nodesep: float) -> dict[str, float]:
    """Place a layer's nodes as close to ``desired`` as separation allows."""
    positions: list[float] = []
    for i, node_id in enumerate(order):
        pos = desired[node_id]
        if i > 0:
            prev = order[i - 1]
            min_pos = positions[i - 1] + cross[prev] / 2 + nodesep + cross[node_id] / 2
            pos = max(pos, min_pos)
        positions.append(pos)

    if positions:
        # Recentre so the mean displacement from the desired positions is zero.
        shift = sum(desired[nid] - pos for nid, pos in zip(order, positions)) / len(order)
        positions = [pos + shift for pos in positions]

    return dict(zip(order, positions))


def assign_coordinates(
    ordering: list[list[str]],
    aug: AugmentedGraph,
    direction: Direction,
    ranksep: float,
    nodesep: float,
) -> list[LayoutBox]:
    """Assign centre coordinates to every real (non-dummy) node."""
    is_horizontal = direction.is_horizontal
    graph = aug.graph

    def rank_size(node_id: str) -> float:
        attrs = graph.nodes[node_id]
        return float(attrs.get("width", 0.0) if is_horizontal else attrs.get("height", 0.0))

    def cross_size(node_id: str) -> float:
        attrs = graph.nodes[node_id]
        return float(attrs.get("height", 0.0) if is_horizontal else attrs.get("width", 0.0))

    cross: dict[str, float] = {nid: cross_size(nid) for nid in graph.nodes}

    # Rank axis: layers stacked with ranksep between their deepest members.
    layer_depth = [max((rank_size(nid) for nid in layer), default=0.0) for layer in ordering]
    layer_center: list[float] = []
    cursor = 0.0
    for depth in layer_depth:
        layer_center.append(cursor + depth / 2)
        cursor += depth + ranksep

    # Cross axis: initial packing, each layer centred on zero.
    cross_pos: dict[str, float] = {}
    for layer in ordering:
        total = sum(cross[nid] for nid in layer) + nodesep * max(0, len(layer) - 1)
        c = -total / 2
        for nid in layer:
            cross_pos[nid] = c + cross[nid] / 2
            c += cross[nid] + nodesep

    # Barycenter refinement, alternating downward and upward sweeps.
    for _sweep in range(COORDINATE_SWEEPS):
        for layer_idx in range(1, len(ordering)):
            _refine_layer(ordering[layer_idx], graph, cross_pos, cross, nodesep, "incoming")
        for layer_idx in range(len(ordering) - 2, -1, -1):
            _refine_layer(ordering[layer_idx], graph, cross_pos, cross, nodesep, "outgoing")

    sign = -1.0 if direction in (Direction.RL, Direction.BT) else 1.0
    boxes: list[LayoutBox] = []
    for layer_idx, layer in enumerate(ordering):
        for order, node_id in enumerate(layer):
            if graph.nodes[node_id].get("dummy"):
                continue
            attrs = graph.nodes[node_id]
            r = sign * layer_center[layer_idx]
            c = cross_pos[node_id]
            x, y = (r, c) if is_horizontal else (c, r)
            boxes.append(
                LayoutBox(
                    id=node_id,
                    layer=layer_idx,
                    order=order,
                    x=x,
                    y=y,
                    width=float(attrs.get("width", 0.0)),
                    height=float(attrs.get("height", 0.0)),
                )
            )

    if boxes:
        min_left = min(b.left for b in boxes)
        min_top = min(b.top for b in boxes)
        for b in boxes:
            b.x -= min_left
            b.y -= min_top

    return boxes


def _refine_layer(
    order: list[str],
    graph: nx.DiGraph,
    cross_pos: dict[str, float],
    cross: dict[str, float],
    nodesep: float,
    direction: str,
) -> None:
    desired: dict[str, float] = {}
    for node_id in order:
        if direction == "incoming":
            neighbors = [(nb, graph.edges[nb, node_id].get("weight", 1)) for nb in graph.predecessors(node_id)]
        else:
            neighbors = [(nb, graph.edges[node_id, nb].get("weight", 1)) for nb in graph.successors(node_id)]
        if neighbors:
            total = sum(w for _, w in neighbors)
            desired[node_id] = sum(cross_pos[nb] * w for nb, w in neighbors) / total
        else:
            desired[node_id] = cross_pos[node_id]
    cross_pos.update(_pack_layer(order, desired, cross, nodesep))


# ─── SugiyamaLayout Engine ───────────────────────────────────────────────────


class SugiyamaLayout:
    """Sugiyama layered layout engine."""

    def __init__(self, direction: Direction, ranksep: float, nodesep: float) -> None:
        self.direction = direction
        self.ranksep = ranksep
        self.nodesep = nodesep

    def layout(self, graph: nx.DiGraph) -> dict[str, LayoutBox]:
        if graph.number_of_nodes() == 0:
            return {}
        dag, _reversed = remove_cycles(graph)
        la = LayerAssignment.assign(dag)
        aug = insert_dummy_nodes(dag, la)
        ordering = minimise_crossings(aug)
        boxes = assign_coordinates(ordering, aug, self.direction, self.ranksep, self.nodesep)
        return {box.id: box for box in boxes}
