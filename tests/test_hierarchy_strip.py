import pytest

from hierarchy_config import HierarchyConfig
from hierarchy_strip import DataRecord, HEADER, analyze, count_hierarchy_free
from valleyfree import reachable_from


def test_chain_scenario(chain):
    config = HierarchyConfig(tier1=[3])
    assert reachable_from(chain, 1) == set([2, 3, 4])
    assert count_hierarchy_free(chain, 1, config) == (0, 0, 0)


def test_layers_strip_one_by_one(layered, layered_config):
    # without 200: tier1 1 and its cone, tier2 2 and its cone, customer 300
    assert count_hierarchy_free(layered, 100, layered_config) == (5, 3, 1)


def test_base_topology_untouched(layered, layered_config):
    before = sorted(layered.graph.edges(keys=True))
    count_hierarchy_free(layered, 100, layered_config)
    assert sorted(layered.graph.edges(keys=True)) == before
    assert len(layered) == 8


def test_source_never_excluded(layered, layered_config):
    # 1 is itself tier1; it still reaches its peer 100, 100's customer and its own customer
    record = analyze(layered, 1, layered_config)
    assert record == DataRecord(1, 'tier1', 3, 3, 3)


def test_counts_monotonic_and_bounded(layered, layered_config, cycle, chain):
    for topo in (layered, cycle, chain):
        for asn in topo.all_asns():
            provider_free, tier1_free, hierachy_free = count_hierarchy_free(topo, asn, layered_config)
            assert len(topo) - 1 >= provider_free >= tier1_free >= hierachy_free >= 0


def test_cycle_counts(cycle):
    # 10 has no providers, so only the configured layers matter
    assert count_hierarchy_free(cycle, 10, HierarchyConfig()) == (2, 2, 2)
    assert count_hierarchy_free(cycle, 10, HierarchyConfig(tier2=[20])) == (2, 2, 1)


def test_unknown_asn_counts_as_unreachable(layered, layered_config):
    assert analyze(layered, 64512, layered_config) == DataRecord(64512, 'other', 0, 0, 0)


def test_record_row(layered, layered_config):
    record = analyze(layered, 100, layered_config)
    row = record.to_row(len(layered))
    assert len(row) == len(HEADER)
    assert row == [100, 'other', 5, 3, 1, 8]
