import pytest

from asrel_topology import Topology
from hierarchy_config import HierarchyConfig


def make_topology(text):
    return Topology.from_caida(text.strip().splitlines())


# 1 customer of 2, 2 customer of 3, 2 peer of 4
CHAIN = """
# small chain with a peer
2|1|-1
3|2|-1
2|4|0
"""

# 10 provider of 20, 20 provider of 30, 30 peer of 10
CYCLE = """
10|20|-1
20|30|-1
30|10|0
"""

# 100 buys transit from 200 and peers with a tier1 (1) and a tier2 (2)
LAYERED = """
200|100|-1|bgp
200|201|-1|bgp
100|1|0|bgp
1|11|-1|bgp
100|2|0|mlp
2|22|-1|bgp
100|300|-1|bgp
"""


@pytest.fixture
def chain():
    return make_topology(CHAIN)


@pytest.fixture
def cycle():
    return make_topology(CYCLE)


@pytest.fixture
def layered():
    return make_topology(LAYERED)


@pytest.fixture
def layered_config():
    return HierarchyConfig(tier1=[1], tier2=[2])
