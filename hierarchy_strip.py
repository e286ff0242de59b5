import logging
from collections import namedtuple

from asrel_topology import UnknownAsn
from valleyfree import legal_subgraph

log = logging.getLogger(__name__)

HEADER = ['asn', 'type', 'provider_free', 'tier1_free', 'hierachy_free', 'total']


class DataRecord(namedtuple('DataRecord', 'asn type provider_free tier1_free hierachy_free')):
    __slots__ = ()

    def to_row(self, total):
        return [self.asn, self.type, self.provider_free, self.tier1_free, self.hierachy_free, total]


def count_hierarchy_free(topo, asn, config):
    log.info('---------- %s ----------', asn)
    try:
        providers = topo.providers_of(asn)
    except UnknownAsn:
        log.warning('AS%s not in topology, counting it as unreachable', asn)
        return 0, 0, 0
    providers.discard(asn)
    tier1 = config.tier1_set - set([asn])
    tier2 = config.tier2_set - set([asn])

    # the reduced graph is a fresh object, so removals below never touch topo
    paths = legal_subgraph(topo, asn)
    counts = []
    for name, excluded in (('providers', providers), ('tier1', tier1), ('tier2', tier2)):
        log.debug('Remove %s', name)
        paths.remove_all(excluded)
        paths = legal_subgraph(paths, asn)
        counts.append(len(paths) - 1)
        log.info('Graph without %s reaches %d ASes', name, counts[-1])
    return tuple(counts)


def analyze(topo, asn, config):
    provider_free, tier1_free, hierachy_free = count_hierarchy_free(topo, asn, config)
    return DataRecord(asn, config.classify(asn), provider_free, tier1_free, hierachy_free)
