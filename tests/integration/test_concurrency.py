# tests/integration/test_concurrency.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

"""Distinct instances share one compiled graph across threads without locking."""

import threading

from stateful.core.declarations import StateAttribute, Stateful, after_state_change


def test_distinct_instances_on_separate_threads(merge_states):
    class Review(Stateful):
        merge_status = StateAttribute(default="na", states=merge_states)

        def __init__(self):
            self.changes = 0

        @after_state_change
        def _count(self):
            self.changes += 1

    reviews = [Review() for _ in range(8)]
    errors = []
    barrier = threading.Barrier(len(reviews))

    def worker(review):
        try:
            barrier.wait()
            machine = review.state_machine("merge_status")
            for _ in range(100):
                assert machine.change("pending") is True
                assert machine.change("rejected") is True
            assert machine.change("approved") is False
        except Exception as e:  # surfaced below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(review,)) for review in reviews]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10.0)

    assert errors == []
    for review in reviews:
        assert review.merge_status == "rejected"
        assert review.changes == 200


def test_compiled_graph_is_read_only_across_threads(kata_spec):
    results = []

    def reader():
        results.append(tuple(kata_spec.graph["draft"].to_transitions()))

    threads = [threading.Thread(target=reader) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10.0)

    assert set(results) == {("needs_feedback", "needs_approval")}
    assert len(results) == 8
