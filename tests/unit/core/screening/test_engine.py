"""
Tests for the Screening Engine

Batch submission, per-resume failure isolation, terminal status and the
bounded worker pool.
"""
import threading
from unittest.mock import Mock

import pytest

from core.cache.screening_cache import ScreeningCacheService
from core.screening.analytics import AnalyticsAggregator
from core.screening.engine import BatchTracker, ScreeningEngine
from core.screening.errors import InvalidBatchError, JobNotFoundError, PersistenceError, ScoringError
from core.screening.models import JobStatus
from core.screening.ranking import RankingService
from tests.mocks.screening_mocks import (
    FakeOracle,
    plain_text_extractor,
    text_resume,
)


@pytest.fixture
def make_engine(store, catalog):
    engines = []

    def _make(oracle, max_workers=5, cache=None):
        engine = ScreeningEngine(
            store,
            catalog,
            oracle,
            cache=cache,
            max_workers=max_workers,
            text_extractor=plain_text_extractor,
        )
        engines.append(engine)
        return engine

    yield _make
    for engine in engines:
        engine.shutdown(wait=True)


class TestSubmitBatch:

    def test_01_two_resumes_complete(self, store, make_engine):
        """Two resumes: pending -> processing -> completed, both results stored."""
        engine = make_engine(FakeOracle({"a.pdf": 80, "b.pdf": 40}))

        job = engine.submit_batch("job-1", "employer-1", [text_resume("a.pdf"), text_resume("b.pdf")])

        assert job.status == JobStatus.PROCESSING.value
        assert engine.wait(job.id, timeout=5)

        status = engine.get_status(job.id)
        assert status.status == JobStatus.COMPLETED.value
        assert status.processed_count == 2
        assert status.failed_count == 0
        assert store.status_history[job.id] == ["pending", "processing", "completed"]

        items, total = RankingService(store).get_results(job.id)
        assert total == 2
        assert [i.result.match_percentage for i in items] == [80, 40]
        assert AnalyticsAggregator(store).get_analytics(job.id).total_screened == 2

    def test_02_empty_batch_rejected_without_job(self, store, make_engine):
        engine = make_engine(FakeOracle())

        with pytest.raises(InvalidBatchError) as exc_info:
            engine.submit_batch("job-1", "employer-1", [])

        assert exc_info.value.code == "EMPTY_BATCH"
        assert store.jobs == {}

    def test_03_missing_job_reference_rejected(self, store, make_engine):
        engine = make_engine(FakeOracle())

        with pytest.raises(InvalidBatchError) as exc_info:
            engine.submit_batch("", "employer-1", [text_resume("a.pdf")])

        assert exc_info.value.code == "MISSING_JOB_REFERENCE"
        assert store.jobs == {}

    def test_04_unknown_job_rejected(self, store, make_engine):
        engine = make_engine(FakeOracle())

        with pytest.raises(InvalidBatchError) as exc_info:
            engine.submit_batch("no-such-job", "employer-1", [text_resume("a.pdf")])

        assert exc_info.value.code == "UNKNOWN_JOB"
        assert store.jobs == {}

    def test_05_unknown_screening_job_status(self, make_engine):
        engine = make_engine(FakeOracle())
        with pytest.raises(JobNotFoundError):
            engine.get_status("missing")

    def test_06_queueing_error_leaves_no_job(self, store, make_engine):
        engine = make_engine(FakeOracle())
        store.set_status = Mock(side_effect=PersistenceError("Failed to update screening job"))

        with pytest.raises(PersistenceError):
            engine.submit_batch("job-1", "employer-1", [text_resume("a.pdf")])

        assert store.jobs == {}
        assert engine._batches == {}

    def test_07_submit_after_shutdown_leaves_no_job(self, store, make_engine):
        engine = make_engine(FakeOracle())
        engine.shutdown(wait=True)

        with pytest.raises(RuntimeError):
            engine.submit_batch("job-1", "employer-1", [text_resume("a.pdf")])

        assert store.jobs == {}
        assert engine._batches == {}


class TestPartialFailures:

    def test_01_failed_resume_is_skipped(self, store, make_engine):
        """One oracle failure out of three: batch still completes with two results."""
        oracle = FakeOracle({"bad.pdf": ScoringError("model timed out")})
        engine = make_engine(oracle)

        job = engine.submit_batch(
            "job-1", "employer-1",
            [text_resume("a.pdf"), text_resume("bad.pdf"), text_resume("c.pdf")],
        )
        assert engine.wait(job.id, timeout=5)

        status = store.get_job(job.id)
        assert status.status == JobStatus.COMPLETED.value
        assert status.processed_count == 3
        assert status.failed_count == 1
        assert len(store.list_results(job.id)) == 2

        failures = engine.failures(job.id)
        assert [f.filename for f in failures] == ["bad.pdf"]
        assert "model timed out" in failures[0].reason

    def test_02_out_of_range_score_is_skipped(self, store, make_engine):
        engine = make_engine(FakeOracle({"a.pdf": 150, "b.pdf": 75}))

        job = engine.submit_batch("job-1", "employer-1", [text_resume("a.pdf"), text_resume("b.pdf")])
        assert engine.wait(job.id, timeout=5)

        results = store.list_results(job.id)
        assert [r.match_percentage for r in results] == [75]
        assert store.get_job(job.id).failed_count == 1

    def test_03_unreadable_resume_is_skipped(self, store, make_engine):
        engine = make_engine(FakeOracle())

        empty = text_resume("empty.pdf")
        empty.content = b"   "
        job = engine.submit_batch("job-1", "employer-1", [empty, text_resume("ok.pdf")])
        assert engine.wait(job.id, timeout=5)

        assert store.get_job(job.id).status == JobStatus.COMPLETED.value
        assert len(store.list_results(job.id)) == 1

    def test_04_all_failures_mark_job_failed(self, store, make_engine):
        oracle = FakeOracle({
            "a.pdf": ScoringError("boom"),
            "b.pdf": RuntimeError("unexpected"),
        })
        engine = make_engine(oracle)

        job = engine.submit_batch("job-1", "employer-1", [text_resume("a.pdf"), text_resume("b.pdf")])
        assert engine.wait(job.id, timeout=5)

        status = store.get_job(job.id)
        assert status.status == JobStatus.FAILED.value
        assert status.processed_count == 2
        assert status.failed_count == 2

    def test_05_store_error_still_counts_resume(self, store, make_engine):
        """A result write that fails is recorded as a skip, so the job still reaches its total."""
        engine = make_engine(FakeOracle({"a.pdf": 80, "b.pdf": 40}))
        original_add_result = store.add_result

        def add_result(job_id, candidate_id, candidate_name, resume_filename, analysis):
            if resume_filename == "b.pdf":
                raise PersistenceError("Failed to store screening result")
            return original_add_result(job_id, candidate_id, candidate_name, resume_filename, analysis)

        store.add_result = add_result

        job = engine.submit_batch("job-1", "employer-1", [text_resume("a.pdf"), text_resume("b.pdf")])
        assert engine.wait(job.id, timeout=5)

        status = store.get_job(job.id)
        assert status.status == JobStatus.COMPLETED.value
        assert status.processed_count == status.total_resumes == 2
        assert status.failed_count == 1
        assert [f.filename for f in engine.failures(job.id)] == ["b.pdf"]

    def test_06_unrecordable_failure_does_not_break_batch(self, store, make_engine):
        engine = make_engine(FakeOracle())
        store.add_result = Mock(side_effect=PersistenceError("db down"))
        store.record_failure = Mock(side_effect=PersistenceError("db down"))

        job = engine.submit_batch("job-1", "employer-1", [text_resume("a.pdf")])

        assert engine.wait(job.id, timeout=5)
        assert store.get_job(job.id).status == JobStatus.FAILED.value


class TestConcurrency:

    def test_01_worker_pool_bounds_in_flight_calls(self, store, make_engine):
        gate = threading.Event()
        oracle = FakeOracle(gate=gate)
        engine = make_engine(oracle, max_workers=3)

        resumes = [text_resume(f"r{i}.pdf") for i in range(12)]
        job = engine.submit_batch("job-1", "employer-1", resumes)

        gate.set()
        assert engine.wait(job.id, timeout=10)

        assert oracle.max_in_flight <= 3
        assert store.get_job(job.id).processed_count == 12
        assert len(store.list_results(job.id)) == 12

    def test_02_processed_count_is_exact_under_load(self, store, make_engine):
        engine = make_engine(FakeOracle(), max_workers=8)

        resumes = [text_resume(f"r{i}.pdf") for i in range(100)]
        job = engine.submit_batch("job-1", "employer-1", resumes)
        assert engine.wait(job.id, timeout=20)

        status = store.get_job(job.id)
        assert status.processed_count == 100
        assert status.processed_count <= status.total_resumes

    def test_03_invalid_worker_count(self, store, catalog):
        with pytest.raises(ValueError):
            ScreeningEngine(store, catalog, FakeOracle(), max_workers=0)


class TestCancellation:

    def test_01_delete_during_scoring_drops_remaining_work(self, store, make_engine):
        gate = threading.Event()
        oracle = FakeOracle(gate=gate)
        engine = make_engine(oracle, max_workers=1)

        resumes = [text_resume(f"r{i}.pdf") for i in range(5)]
        job = engine.submit_batch("job-1", "employer-1", resumes)

        assert engine.cancel(job.id) is True
        assert store.delete_job(job.id) is True
        gate.set()

        assert engine.wait(job.id, timeout=5)
        assert store.get_job(job.id) is None
        assert store.list_results(job.id) == []
        # Only the task already blocked in the oracle reached it
        assert len(oracle.calls) <= 1

    def test_02_cancel_unknown_batch(self, make_engine):
        engine = make_engine(FakeOracle())
        assert engine.cancel("nope") is False
        assert engine.wait("nope", timeout=0.1) is True


class TestCacheInteraction:

    def test_01_requirements_read_through_cache(self, catalog, make_engine, fake_redis):
        cache = ScreeningCacheService(client=fake_redis)
        engine = make_engine(FakeOracle(), cache=cache)

        first = engine.submit_batch("job-1", "employer-1", [text_resume("a.pdf")])
        second = engine.submit_batch("job-1", "employer-1", [text_resume("b.pdf")])
        engine.wait(first.id, timeout=5)
        engine.wait(second.id, timeout=5)

        assert catalog.lookups == 1
        assert "screening:job:job-1" in fake_redis.data

    def test_02_completion_invalidates_job_cache(self, make_engine):
        cache = Mock(spec=ScreeningCacheService)
        cache.get_job_requirements.return_value = None
        engine = make_engine(FakeOracle(), cache=cache)

        job = engine.submit_batch("job-1", "employer-1", [text_resume("a.pdf")])
        assert engine.wait(job.id, timeout=5)

        cache.invalidate.assert_called_with(job.id)


class TestBatchTracker:

    def test_task_done_reports_drain_once(self):
        tracker = BatchTracker(screening_job_id="j", remaining=2)
        assert tracker.task_done(True) is False
        assert tracker.task_done(False) is True
        assert tracker.succeeded == 1
