from __future__ import annotations

import numpy as np
import pytest

from permsearch.errors import StalledSearch
from permsearch.neighbourhood import TransposeNeighbourhood
from permsearch.tabu import TabuConfig, TabuImprovement

from conftest import EmptyNeighbourhood, ScoreOnlyInstance, ScriptedNeighbourhood, perm


def _engine(instance, **cfg):
    return TabuImprovement(instance, TabuConfig(**cfg))


def test_example_scenario_tenure_grows_on_second_occurrence():
    inst = ScoreOnlyInstance()
    engine = _engine(
        inst,
        tenure=2,
        tt_iterations_wo_modification=3,
        max_occurrences_frequently_encountered=2,
        max_candidate_trigger_escape=5,
    )
    start = perm((0, 1, 2, 3), 10)
    picks = [perm((1, 0, 2, 3), 5), perm((0, 2, 1, 3), 5), perm((0, 1, 3, 2), 5)]
    nb = ScriptedNeighbourhood([[picks[0]], [picks[1]], [picks[2]]])

    p = engine.improve(start, nb)
    assert p == picks[0]
    assert engine.elite.score == 5
    assert engine.tenure == 2
    assert engine.permutation_occurrences == {5: 1}

    p = engine.improve(p, nb)
    assert engine.tenure == 3
    assert engine.frequently_encountered == frozenset({5})
    assert engine.tt_iterations_no_modif == 0

    p = engine.improve(p, nb)
    assert engine.tenure == 3
    assert engine.tt_iterations_no_modif == 1
    assert engine.elite.score == 5
    assert engine.permutation_occurrences == {5: 3}


def test_tenure_shrinks_after_stable_period_and_never_below_one():
    inst = ScoreOnlyInstance()
    engine = _engine(
        inst,
        tenure=2,
        tt_iterations_wo_modification=2,
        max_occurrences_frequently_encountered=100,
    )
    batches = [[perm((i, 0, 0, 0), 100 - i)] for i in range(1, 9)]
    nb = ScriptedNeighbourhood(batches)
    p = perm((0, 0, 0, 0), 200)

    tenures = []
    for _ in range(8):
        p = engine.improve(p, nb)
        tenures.append(engine.tenure)
        assert len(engine.tabu_queue) <= engine.tenure

    assert tenures == [2, 1, 1, 1, 1, 1, 1, 1]
    assert engine.tabu_queue.capacity == 1


def test_recently_visited_solution_is_not_reselected(random_instance):
    engine = _engine(
        random_instance,
        tenure=2,
        tt_iterations_wo_modification=1000,
        max_occurrences_frequently_encountered=1000,
    )
    nb = TransposeNeighbourhood(random_instance)
    visited = [random_instance.identity()]
    for _ in range(40):
        visited.append(engine.improve(visited[-1], nb))

    for prev, nxt in zip(visited[1:], visited[3:]):
        assert nxt != prev


def test_aspiration_picks_best_tabu_candidate_when_all_are_tabu():
    inst = ScoreOnlyInstance()
    start = perm((0, 1, 2, 3), 10)
    x, y = perm((1, 0, 2, 3), 3), perm((0, 2, 1, 3), 7)

    engine = TabuImprovement(inst, TabuConfig(tenure=4), initial=start)
    engine.update_tabu_queue(x)
    engine.update_tabu_queue(y)
    chosen = engine.improve(start, ScriptedNeighbourhood([[y, x]]))
    assert chosen == x
    assert engine.aspirations == 1
    assert engine.elite == x

    # Nothing beats the elite: still the least bad tabu move, without aspiration
    elite = perm((3, 2, 1, 0), 1)
    engine = TabuImprovement(inst, TabuConfig(tenure=4), initial=elite)
    engine.update_tabu_queue(x)
    engine.update_tabu_queue(y)
    chosen = engine.improve(start, ScriptedNeighbourhood([[y, x]]))
    assert chosen == x
    assert engine.aspirations == 0
    assert engine.elite == elite


def test_non_tabu_candidate_preferred_over_better_tabu_one():
    inst = ScoreOnlyInstance()
    start = perm((0, 1, 2, 3), 10)
    tabu_best, free = perm((1, 0, 2, 3), 1), perm((0, 2, 1, 3), 8)
    engine = TabuImprovement(inst, TabuConfig(tenure=3), initial=start)
    engine.update_tabu_queue(tabu_best)
    assert engine.improve(start, ScriptedNeighbourhood([[tabu_best, free]])) == free


def test_ties_keep_first_enumerated_candidate():
    inst = ScoreOnlyInstance()
    a, b = perm((1, 0, 2, 3), 4), perm((0, 2, 1, 3), 4)
    engine = _engine(inst)
    assert engine.improve(perm((0, 1, 2, 3), 9), ScriptedNeighbourhood([[a, b]])) == a


def test_elite_never_worsens(random_instance):
    engine = _engine(
        random_instance,
        tenure=3,
        tt_iterations_wo_modification=4,
        max_occurrences_frequently_encountered=2,
        max_candidate_trigger_escape=3,
        random_steps_escape=4,
    )
    nb = TransposeNeighbourhood(random_instance)
    p = random_instance.identity()
    seen = [p.score]
    elites = []
    for _ in range(150):
        p = engine.improve(p, nb)
        seen.append(p.score)
        elites.append(engine.elite.score)

    assert all(b <= a for a, b in zip(elites, elites[1:]))
    # Solutions replaced by an escape never reach the caller but can still be elite
    assert engine.elite.score <= min(seen)
    assert random_instance.evaluate(engine.elite.order) == engine.elite.score


def test_maximisation_direction_is_respected():
    inst = ScoreOnlyInstance(minimize=False)
    lo, hi = perm((1, 0, 2, 3), 2), perm((0, 2, 1, 3), 9)
    engine = _engine(inst)
    chosen = engine.improve(perm((0, 1, 2, 3), 5), ScriptedNeighbourhood([[lo, hi]]))
    assert chosen == hi
    assert engine.elite.score == 9


def test_escape_fires_when_too_many_frequent_solutions(random_instance):
    engine = _engine(
        random_instance,
        tenure=1,
        tt_iterations_wo_modification=1000,
        max_occurrences_frequently_encountered=1,
        max_candidate_trigger_escape=2,
        random_steps_escape=3,
        full_content_keys=True,
    )
    nb = TransposeNeighbourhood(random_instance)
    p = random_instance.identity()

    p = engine.improve(p, nb)
    p = engine.improve(p, nb)
    assert engine.escapes == 0
    assert len(engine.frequently_encountered) == 2

    engine.improve(p, nb)
    assert engine.escapes == 1
    assert engine.frequently_encountered == frozenset()
    assert engine.permutation_occurrences == {}


def test_escaped_solution_is_made_tabu():
    inst = ScoreOnlyInstance()
    first = perm((0, 1, 3, 2), 7)
    picked = perm((1, 0, 2, 3), 5)
    walk = perm((2, 0, 1, 3), 6)
    # One batch per step, then one per random move (at most 2)
    nb = ScriptedNeighbourhood([[first], [picked], [walk], [walk]])
    engine = _engine(
        inst,
        tenure=5,
        max_occurrences_frequently_encountered=1,
        max_candidate_trigger_escape=1,
        random_steps_escape=2,
    )
    p = engine.improve(perm((0, 1, 2, 3), 9), nb)
    assert p == first
    assert engine.escapes == 0

    out = engine.improve(p, nb)
    assert out == walk
    assert engine.escapes == 1
    assert walk in engine.tabu_queue
    assert picked in engine.tabu_queue
    assert engine.elite == picked


def test_tenure_and_queue_invariants_hold_over_long_run(random_instance):
    engine = _engine(
        random_instance,
        tenure=1,
        tt_iterations_wo_modification=2,
        max_occurrences_frequently_encountered=2,
        max_candidate_trigger_escape=2,
        random_steps_escape=5,
    )
    nb = TransposeNeighbourhood(random_instance)
    p = random_instance.identity()
    for _ in range(300):
        p = engine.improve(p, nb)
        assert engine.tenure >= 1
        assert len(engine.tabu_queue) <= engine.tenure
    assert engine.iterations == 300


def test_same_seed_gives_identical_runs(random_instance):
    cfg = dict(
        tenure=2,
        tt_iterations_wo_modification=3,
        max_occurrences_frequently_encountered=2,
        max_candidate_trigger_escape=1,
        random_steps_escape=6,
    )
    runs = []
    for _ in range(2):
        engine = _engine(random_instance, **cfg)
        nb = TransposeNeighbourhood(random_instance)
        p = random_instance.identity()
        trace = []
        for _ in range(120):
            p = engine.improve(p, nb)
            trace.append(p.order)
        runs.append((trace, engine.escapes))

    assert runs[0] == runs[1]
    assert runs[0][1] > 0


def test_injected_rng_is_used(random_instance):
    a = TabuImprovement(random_instance, rng=np.random.default_rng(1))
    b = TabuImprovement(random_instance, rng=np.random.default_rng(1))
    assert a.rng.integers(1000) == b.rng.integers(1000)
    default = TabuImprovement(random_instance)
    expected = np.random.default_rng(random_instance.seed).integers(1 << 30)
    assert default.rng.integers(1 << 30) == expected


def test_score_keys_merge_equal_scores_full_content_keys_do_not():
    inst = ScoreOnlyInstance()
    a, b = perm((1, 0, 2, 3), 5), perm((0, 2, 1, 3), 5)

    by_score = _engine(inst, max_occurrences_frequently_encountered=2)
    nb = ScriptedNeighbourhood([[a], [b]])
    p = by_score.improve(perm((0, 1, 2, 3), 9), nb)
    by_score.improve(p, nb)
    assert by_score.frequently_encountered == frozenset({5})

    by_content = _engine(inst, max_occurrences_frequently_encountered=2, full_content_keys=True)
    nb = ScriptedNeighbourhood([[a], [b]])
    p = by_content.improve(perm((0, 1, 2, 3), 9), nb)
    by_content.improve(p, nb)
    assert by_content.frequently_encountered == frozenset()
    assert len(by_content.permutation_occurrences) == 2


def test_empty_neighbourhood_raises_stalled_search():
    inst = ScoreOnlyInstance()
    engine = _engine(inst)
    start = perm((0, 1, 2, 3), 9)
    with pytest.raises(StalledSearch) as exc:
        engine.improve(start, EmptyNeighbourhood(inst))
    assert exc.value.permutation == start
    assert exc.value.neighbourhood == "empty"
    assert engine.iterations == 0
    assert len(engine.tabu_queue) == 0


def test_stats_report_counters(random_instance):
    engine = _engine(random_instance)
    nb = TransposeNeighbourhood(random_instance)
    engine.improve(random_instance.identity(), nb)
    stats = engine.stats()
    assert stats["iterations"] == 1
    assert stats["tenure"] == engine.tenure
    assert stats["queue_size"] == 1
    assert stats["elite_score"] == engine.elite.score
