from collections import deque
from enum import Enum

from asrel_topology import C2P, P2C, P2P, UnknownAsn


class Direction(Enum):
    UP = 'up'
    DOWN = 'down'


def step(direction, rel):
    # a peer or provider->customer hop ends the climb; after that only customers remain
    if direction is Direction.UP:
        if rel == C2P:
            return Direction.UP
        if rel in (P2P, P2C):
            return Direction.DOWN
    elif rel == P2C:
        return Direction.DOWN
    return None


def _source(topo, asn):
    handle = topo.index_of(asn)
    if handle is None:
        raise UnknownAsn(asn)
    return handle


def _enumerate(topo, source, max_hops):
    # each entry is a path of handles and the relationship of its last hop
    stack = [((source,), None, Direction.UP)]
    while stack:
        current, rel, direction = stack.pop()
        yield current, rel
        if max_hops is not None and len(current) - 1 >= max_hops:
            continue
        for _, neighbor, kind in topo.graph.out_edges(current[-1], keys=True):
            if neighbor in current:
                continue
            nxt = step(direction, kind)
            if nxt is not None:
                stack.append((current + (neighbor,), kind, nxt))


def iter_paths(topo, asn, max_hops=None):
    """Yield every valley-free path starting at ``asn`` as a tuple of ASNs.

    Each prefix is yielded on its own, starting with ``(asn,)``, so the set of
    last hops is the reachable set. An AS never appears twice in one path.
    """
    source = _source(topo, asn)
    for current, _ in _enumerate(topo, source, max_hops):
        yield tuple(topo.asn_of(h) for h in current)


def _walk(topo, source):
    # breadth-first over (node, direction) states; UP allows every hop DOWN
    # does, so a node revisited in the same walk never adds new reach
    seen = set([(source, Direction.UP)])
    active = deque(seen)
    while active:
        handle, direction = active.popleft()
        for _, neighbor, rel in topo.graph.out_edges(handle, keys=True):
            if neighbor == source:
                continue
            nxt = step(direction, rel)
            if nxt is None:
                continue
            yield handle, neighbor, rel
            if (neighbor, nxt) not in seen:
                seen.add((neighbor, nxt))
                active.append((neighbor, nxt))


def valley_free_of(topo, asn, max_hops=None):
    """New topology holding exactly the edges that lie on a valley-free path from ``asn``.

    Built from the full path enumeration, so its cost follows the number of
    paths, not the size of the graph.
    """
    source = _source(topo, asn)
    edges = set()
    for current, rel in _enumerate(topo, source, max_hops):
        if rel is not None:
            edges.add((current[-2], current[-1], rel))
    return topo.restrict(asn, edges)


paths_graph = valley_free_of


def legal_subgraph(topo, asn):
    """New topology with every edge a reachable automaton state may cross from ``asn``.

    Linear in the graph size. It may keep edges leading back to a node already
    on every path to their tail, but it reaches exactly the ASes that
    ``valley_free_of`` reaches.
    """
    source = _source(topo, asn)
    return topo.restrict(asn, set(_walk(topo, source)))


def reachable_from(topo, asn):
    source = _source(topo, asn)
    return set(topo.asn_of(v) for _, v, _ in _walk(topo, source))


def count_reachable(topo, asn):
    return len(reachable_from(topo, asn))


def is_valley_free(topo, path):
    if not path or len(set(path)) != len(path):
        return False
    if any(asn not in topo for asn in path):
        return False
    direction = Direction.UP
    for i in range(len(path) - 1):
        h1, h2 = topo.index_of(path[i]), topo.index_of(path[i + 1])
        if not topo.graph.has_edge(h1, h2):
            return False
        choices = set(step(direction, rel) for rel in topo.graph[h1][h2])
        if Direction.UP in choices:
            direction = Direction.UP
        elif Direction.DOWN in choices:
            direction = Direction.DOWN
        else:
            return False
    return True
