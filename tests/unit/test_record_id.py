"""Unit tests for cperlib.record_id."""

from __future__ import annotations

import threading

from cperlib.record_id import RecordIdGenerator, next_record_id


class TestRecordIdGenerator:
    """Test seeding and ordering of record IDs."""

    def test_first_id_seeded_from_clock(self, id_generator):
        assert id_generator.next_id() == (1_700_000_000 << 32) + 1

    def test_ids_strictly_increase(self, id_generator):
        ids = [id_generator.next_id() for _ in range(1000)]
        assert ids == sorted(ids)
        assert len(set(ids)) == len(ids)
        assert all(b == a + 1 for a, b in zip(ids, ids[1:]))

    def test_clock_read_only_once(self):
        calls = []

        def clock():
            calls.append(None)
            return 42.0

        gen = RecordIdGenerator(clock=clock)
        for _ in range(10):
            gen.next_id()
        assert len(calls) == 1

    def test_later_start_exceeds_earlier_ids(self):
        earlier = RecordIdGenerator(clock=lambda: 1000.0)
        last_earlier = max(earlier.next_id() for _ in range(10_000))
        later = RecordIdGenerator(clock=lambda: 1001.0)
        assert later.next_id() > last_earlier

    def test_fits_in_64_bits(self, id_generator):
        assert 0 < id_generator.next_id() < 1 << 64

    def test_concurrent_callers_get_unique_ids(self):
        gen = RecordIdGenerator()
        results: list[list[int]] = [[] for _ in range(8)]
        barrier = threading.Barrier(len(results))

        def worker(out: list[int]) -> None:
            barrier.wait()
            for _ in range(2000):
                out.append(gen.next_id())

        threads = [threading.Thread(target=worker, args=(r,)) for r in results]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        all_ids = [rid for r in results for rid in r]
        assert len(all_ids) == 8 * 2000
        assert len(set(all_ids)) == len(all_ids)
        # each thread observes its own IDs in increasing order
        for r in results:
            assert r == sorted(r)

    def test_racing_first_callers_share_one_counter(self):
        # Every racer sees an empty state and computes its own seed;
        # only one counter may end up installed.
        gen = RecordIdGenerator(clock=lambda: 7.0)
        barrier = threading.Barrier(16)
        firsts: list[int] = []
        lock = threading.Lock()

        def worker() -> None:
            barrier.wait()
            rid = gen.next_id()
            with lock:
                firsts.append(rid)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(firsts) == [(7 << 32) + i for i in range(1, 17)]


class TestNextRecordId:
    """Test the process-wide generator."""

    def test_sequential_calls_increase(self):
        a = next_record_id()
        b = next_record_id()
        c = next_record_id()
        assert a < b < c
