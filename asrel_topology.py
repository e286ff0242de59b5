import re, bz2, gzip, logging
import networkx as nx

log = logging.getLogger(__name__)

# relationship of the neighbour as seen from the node the edge leaves
C2P, P2C, P2P = 'c2p', 'p2c', 'p2p'
INVERSE = {C2P: P2C, P2C: C2P, P2P: P2P}

MAX_ASN = 2 ** 32 - 1

DIGITS = re.compile(r'[0-9]+\Z')
CODE = re.compile(r'-?[0-9]+\Z')


class BuildError(Exception):
    pass


class MalformedRecord(BuildError):
    def __init__(self, lineno, line, reason):
        self.lineno = lineno
        self.line = line
        self.reason = reason
        super(MalformedRecord, self).__init__('line %d: %s: %r' % (lineno, reason, line))


class DuplicateEdge(BuildError):
    def __init__(self, lineno, asn1, asn2):
        self.lineno = lineno
        self.asn1, self.asn2 = asn1, asn2
        super(DuplicateEdge, self).__init__('line %d: relationship %d|%d already present' % (lineno, asn1, asn2))


class UnknownAsn(KeyError):
    def __init__(self, asn):
        self.asn = asn
        super(UnknownAsn, self).__init__(asn)

    def __str__(self):
        return 'AS%s is not in the topology' % self.asn


def parse_record(lineno, line):
    fields = line.split('|')
    if len(fields) not in (3, 4):
        raise MalformedRecord(lineno, line, 'expected AS1|AS2|rel[|source]')
    if not (DIGITS.match(fields[0]) and DIGITS.match(fields[1]) and CODE.match(fields[2])):
        raise MalformedRecord(lineno, line, 'non-integer field')
    asn1, asn2, code = int(fields[0]), int(fields[1]), int(fields[2])
    for asn in (asn1, asn2):
        if asn > MAX_ASN:
            raise MalformedRecord(lineno, line, 'AS number out of range')
    if asn1 == asn2:
        raise MalformedRecord(lineno, line, 'self relationship')
    if code == -1:
        return asn1, asn2, P2C
    if code == 0:
        return asn1, asn2, P2P
    raise MalformedRecord(lineno, line, 'unknown relationship code %d' % code)


def open_asrel(path):
    # only ASCII fields are parsed; stray bytes in comments must not abort a load
    if path.endswith('.bz2'):
        return bz2.open(path, 'rt', encoding='utf-8', errors='replace')
    if path.endswith('.gz'):
        return gzip.open(path, 'rt', encoding='utf-8', errors='replace')
    return open(path, encoding='utf-8', errors='replace')


def read_asrel(path, strict=False):
    try:
        with open_asrel(path) as f:
            topo = Topology.from_caida(f, strict=strict)
    except (OSError, EOFError) as e:
        raise BuildError('cannot read %s: %s' % (path, e))
    log.info('Loaded %s: %d ASes, %d relationships', path, len(topo), topo.relationship_count())
    return topo


class Topology(object):
    """AS-relationship graph.

    Nodes of ``graph`` are integer handles carrying an ``asn`` attribute;
    ``index`` maps each live AS number to its handle. Edges are keyed by the
    relationship kind seen from the tail node, so ``(u, v, 'c2p')`` means v is
    a provider of u and is always mirrored by ``(v, u, 'p2c')``.
    """

    def __init__(self, graph=None):
        self.graph = nx.MultiDiGraph() if graph is None else graph
        self.index = dict()
        self.next_handle = 0
        for handle, asn in self.graph.nodes(data='asn'):
            self.index[asn] = handle
            self.next_handle = max(self.next_handle, handle + 1)

    @classmethod
    def from_caida(cls, lines, strict=False):
        topo = cls()
        for lineno, line in enumerate(lines, 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            asn1, asn2, rel = parse_record(lineno, line)
            if not topo.add_relationship(asn1, asn2, rel) and strict:
                raise DuplicateEdge(lineno, asn1, asn2)
        return topo

    def __len__(self):
        return len(self.index)

    def __contains__(self, asn):
        return asn in self.index

    def relationship_count(self):
        return self.graph.number_of_edges() // 2

    def add_node(self, asn):
        if asn in self.index:
            return self.index[asn]
        handle = self.next_handle
        self.next_handle += 1
        self.graph.add_node(handle, asn=asn)
        self.index[asn] = handle
        return handle

    def add_relationship(self, asn1, asn2, rel):
        """Store ``asn2`` as ``rel`` of ``asn1`` and the inverse edge.

        Returns False when the two ASes were already related, in which case
        the graph is left as it was.
        """
        h1, h2 = self.add_node(asn1), self.add_node(asn2)
        if self.graph.has_edge(h1, h2):
            return False
        self.graph.add_edge(h1, h2, key=rel)
        self.graph.add_edge(h2, h1, key=INVERSE[rel])
        return True

    def index_of(self, asn):
        return self.index.get(asn)

    def asn_of(self, handle):
        return self.graph.nodes[handle]['asn']

    def neighbors_of(self, asn, rel):
        handle = self.index_of(asn)
        if handle is None:
            raise UnknownAsn(asn)
        return set(self.asn_of(v) for _, v, key in self.graph.out_edges(handle, keys=True) if key == rel)

    def providers_of(self, asn):
        return self.neighbors_of(asn, C2P)

    def customers_of(self, asn):
        return self.neighbors_of(asn, P2C)

    def peers_of(self, asn):
        return self.neighbors_of(asn, P2P)

    def remove(self, asn):
        handle = self.index.pop(asn, None)
        if handle is not None:
            self.graph.remove_node(handle)

    def remove_all(self, asns):
        for asn in asns:
            self.remove(asn)

    def all_asns(self):
        return set(self.index)

    def copy(self):
        topo = Topology(self.graph.copy())
        topo.next_handle = self.next_handle
        return topo

    def restrict(self, asn, edges):
        graph = nx.MultiDiGraph()
        source = self.index[asn]
        graph.add_node(source, asn=asn)
        for u, v, rel in edges:
            graph.add_node(u, asn=self.asn_of(u))
            graph.add_node(v, asn=self.asn_of(v))
            graph.add_edge(u, v, key=rel)
        topo = Topology(graph)
        topo.next_handle = self.next_handle
        return topo
