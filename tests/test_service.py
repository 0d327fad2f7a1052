"""Tests for the async PatternService facade."""

import asyncio

from energytune.schemas import MetricType, PatternOptions, ReadinessReason
from energytune.patterns.service import PatternService, filter_entries_by_range

from conftest import day, entry, full_entries


def _service(settings, **option_overrides):
    return PatternService(options=PatternOptions(**option_overrides), settings=settings)


def _recurring_entries():
    energy = ["morning bike ride", "good sleep", "morning bike ride", "coffee with friends",
              "morning bike ride", "good sleep"]
    stress = ["work deadline", "traffic jam", "tight work deadline", "traffic jam",
              "noisy neighbours", "work deadline"]
    return [
        entry(i, energy=e, stress=s, energy_levels={"morning": 8}, stress_levels={"morning": 6})
        for i, (e, s) in enumerate(zip(energy, stress))
    ]


def test_filter_entries_by_range():
    entries = full_entries(5)
    assert [e.date for e in filter_entries_by_range(entries, day(1), day(3))] == [day(1), day(2), day(3)]
    assert len(filter_entries_by_range(entries)) == 5
    assert len(filter_entries_by_range(entries, start_date=day(4))) == 1
    assert len(filter_entries_by_range(entries, end_date=day(0))) == 1


def test_gate_short_circuits(settings):
    service = _service(settings)
    analysis = asyncio.run(service.analyze(full_entries(3), MetricType.ENERGY))
    assert analysis.patterns == []
    assert not analysis.readiness.has_enough_data
    assert analysis.readiness.reason == ReadinessReason.TOO_FEW_ENTRIES
    assert len(service.cache) == 0


def test_gate_applies_to_the_requested_window(settings):
    service = _service(settings)
    # Six entries overall, only three inside the window
    analysis = asyncio.run(service.analyze(_recurring_entries(), "energy", day(0), day(2)))
    assert analysis.readiness.progress.label == "3 of 5 entries"


def test_analyze_returns_ranked_patterns(settings):
    service = _service(settings)
    analysis = asyncio.run(service.analyze(_recurring_entries(), MetricType.ENERGY))

    assert analysis.readiness.has_enough_data
    assert analysis.total_mentions == 6
    assert analysis.patterns[0].label == "morning bike ride"
    assert analysis.patterns[0].count == 3
    assert analysis.patterns[1].label == "good sleep"
    assert analysis.patterns[1].emoji == "😴"
    assert len(analysis.patterns) == 3
    assert not analysis.from_cache


def test_second_request_is_served_from_cache(settings):
    service = _service(settings)

    async def scenario():
        first = await service.analyze(_recurring_entries(), MetricType.STRESS)
        second = await service.analyze(_recurring_entries(), MetricType.STRESS, top_n=1)
        return first, second

    first, second = asyncio.run(scenario())
    assert not first.from_cache
    assert second.from_cache
    assert len(second.patterns) == 1
    assert second.patterns[0] == first.patterns[0]


def test_invalidate_forces_recompute(settings):
    service = _service(settings)

    async def scenario():
        await service.analyze(_recurring_entries(), MetricType.ENERGY)
        service.invalidate()
        return await service.analyze(_recurring_entries(), MetricType.ENERGY)

    assert not asyncio.run(scenario()).from_cache


def test_concurrent_identical_requests(settings):
    service = _service(settings)

    async def scenario():
        return await asyncio.gather(*(
            service.analyze(_recurring_entries(), MetricType.ENERGY) for _ in range(4)
        ))

    results = asyncio.run(scenario())
    assert service.cache.misses == 1
    assert service.cache.coalesced == 3
    assert all(r.patterns == results[0].patterns for r in results)


def test_split_sources_option(settings):
    entries = [
        entry(i, energy="bike ride, good sleep", stress="deadline")
        for i in range(5)
    ]
    service = _service(settings, split_sources=True)
    analysis = asyncio.run(service.analyze(entries, MetricType.ENERGY))
    assert analysis.total_mentions == 10
    assert {p.label: p.count for p in analysis.patterns} == {"bike ride": 5, "good sleep": 5}
