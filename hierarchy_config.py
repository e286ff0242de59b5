import yaml

from asrel_topology import MAX_ASN

TIER1_ASNS = [
    7018, 3320, 3257, 6830, 3356, 2914, 5511, 3491, 1239, 6453, 6762, 1299, 12956, 701, 6461,
]

TIER2_ASNS = [
    6939, 7713, 9002, 1764, 34549, 4766, 9304, 22652, 9318, 3292, 2497, 1273, 2516, 23947, 4134,
    4809, 4837, 3462, 5400, 7922, 1257, 12390, 2711, 8002, 14744, 38930, 33891, 41327, 7473, 24482,
    9121, 6663,
]

CLOUD_PROVIDERS = [
    12076,  # Microsoft (Azure)
    36351,  # IBM
    19604,  # IBM Cloud
    15169,  # Google
    8075,   # Microsoft (not Azure)
    16509,  # Amazon
]

TIER1, TIER2, CLOUD_PROVIDER, OTHER = 'tier1', 'tier2', 'cloud_provider', 'other'


class ConfigError(Exception):
    pass


def _asn_list(name, value):
    if not isinstance(value, (list, tuple, set)):
        raise ConfigError('%s must be a list of AS numbers' % name)
    asns = []
    for asn in value:
        if isinstance(asn, bool) or not isinstance(asn, int) or asn < 0 or asn > MAX_ASN:
            raise ConfigError('%s: %r is not an AS number' % (name, asn))
        asns.append(asn)
    return asns


class HierarchyConfig(object):
    def __init__(self, tier1=(), tier2=(), cloud_providers=()):
        self.tier1 = list(dict.fromkeys(tier1))
        self.tier2 = list(dict.fromkeys(tier2))
        self.cloud_providers = list(dict.fromkeys(cloud_providers))
        self.tier1_set = frozenset(self.tier1)
        self.tier2_set = frozenset(self.tier2)
        self.cloud_set = frozenset(self.cloud_providers)

    @classmethod
    def default(cls):
        return cls(TIER1_ASNS, TIER2_ASNS, CLOUD_PROVIDERS)

    @classmethod
    def from_yaml(cls, path):
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except OSError as e:
            raise ConfigError('cannot read %s: %s' % (path, e))
        except yaml.YAMLError as e:
            raise ConfigError('%s is not valid YAML: %s' % (path, e))
        if not isinstance(data, dict):
            raise ConfigError('%s must contain a mapping' % path)
        unknown = set(data) - set(['tier1', 'tier2', 'cloud_providers'])
        if unknown:
            raise ConfigError('unknown keys in %s: %s' % (path, ', '.join(sorted(unknown))))
        return cls(
            _asn_list('tier1', data.get('tier1', TIER1_ASNS)),
            _asn_list('tier2', data.get('tier2', TIER2_ASNS)),
            _asn_list('cloud_providers', data.get('cloud_providers', CLOUD_PROVIDERS)),
        )

    def classify(self, asn):
        if asn in self.tier1_set:
            return TIER1
        if asn in self.tier2_set:
            return TIER2
        if asn in self.cloud_set:
            return CLOUD_PROVIDER
        return OTHER

    def curated(self):
        return list(dict.fromkeys(self.cloud_providers + self.tier1 + self.tier2))

    def targets(self, topo, mode):
        if mode == 'curated':
            return self.curated()
        if mode == 'all':
            return sorted(topo.all_asns())
        raise ConfigError('unknown target set %r' % mode)
