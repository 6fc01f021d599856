#!/usr/bin/env python3
"""
Unit tests for the screening endpoints.
Drives /api/screening/* through a TestClient with the service swapped for
one backed by in-memory storage and a scripted oracle.
"""

import csv
import io
import unittest

from core.screening.engine import ScreeningEngine
from core.screening.models import JobRequirements
from core.screening.service import ScreeningService
from tests.mocks.screening_mocks import (
    FakeOracle,
    InMemoryResultStore,
    StaticJobCatalog,
    plain_text_extractor,
)


def pdf_upload(filename, body="Python developer with PostgreSQL"):
    """A multipart file tuple; the test extractor reads the bytes as text."""
    return ("files", (filename, f"{filename}\n{body}".encode("utf-8"), "application/pdf"))


class ScreeningApiTestCase(unittest.TestCase):

    def setUp(self):
        from fastapi import FastAPI, HTTPException
        from fastapi.testclient import TestClient
        from core.screening.errors import ScreeningError
        from web.backend.dependencies import get_screening_service
        from web.backend.exceptions import http_exception_handler, screening_exception_handler
        from web.backend.routers.screening import add_rate_limit_handlers, limiter, router

        # Disable rate limiting for tests
        limiter.enabled = False

        self.store = InMemoryResultStore()
        self.oracle = FakeOracle({"strong.pdf": 88, "weak.pdf": 20})
        catalog = StaticJobCatalog([JobRequirements(
            job_post_id="job-1",
            title="Backend Engineer",
            required_skills=["Python", "PostgreSQL"],
        )])
        self.engine = ScreeningEngine(
            self.store, catalog, self.oracle,
            max_workers=2, text_extractor=plain_text_extractor,
        )
        self.service = ScreeningService(self.store, self.engine)

        self.app = FastAPI()
        add_rate_limit_handlers(self.app)
        self.app.add_exception_handler(ScreeningError, screening_exception_handler)
        self.app.add_exception_handler(HTTPException, http_exception_handler)
        self.app.include_router(router)
        self.app.dependency_overrides[get_screening_service] = lambda: self.service
        self.client = TestClient(self.app, raise_server_exceptions=False)

    def tearDown(self):
        self.engine.shutdown(wait=True)

    def _seed_job(self, scores, employer_id="employer-1"):
        job = self.store.create_job(employer_id, "job-1", len(scores))
        seeded = self.store.seed_results(job.id, scores)
        self.store.set_status(job.id, "completed")
        return job, seeded


class TestBatchUpload(ScreeningApiTestCase):

    def test_01_upload_returns_202_and_completes(self):
        response = self.client.post(
            "/api/screening/batch-upload",
            data={"job_id": "job-1", "employer_id": "employer-1"},
            files=[pdf_upload("strong.pdf"), pdf_upload("weak.pdf")],
        )

        self.assertEqual(response.status_code, 202)
        body = response.json()
        self.assertTrue(body["success"])
        job_id = body["data"]["id"]
        self.assertEqual(body["data"]["total_resumes"], 2)

        self.assertTrue(self.engine.wait(job_id, timeout=5))
        status = self.client.get(f"/api/screening/{job_id}").json()
        self.assertEqual(status["status"], "completed")
        self.assertEqual(status["processed_count"], 2)
        self.assertEqual(status["progress"], 100.0)

    def test_02_missing_job_id(self):
        response = self.client.post(
            "/api/screening/batch-upload",
            data={"employer_id": "employer-1"},
            files=[pdf_upload("strong.pdf")],
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "MISSING_JOB_REFERENCE")
        self.assertEqual(self.store.jobs, {})

    def test_03_no_files(self):
        response = self.client.post(
            "/api/screening/batch-upload",
            data={"job_id": "job-1", "employer_id": "employer-1"},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "EMPTY_BATCH")
        self.assertEqual(self.store.jobs, {})

    def test_04_non_pdf_rejected(self):
        response = self.client.post(
            "/api/screening/batch-upload",
            data={"job_id": "job-1", "employer_id": "employer-1"},
            files=[("files", ("resume.docx", b"binary", "application/msword"))],
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "INVALID_FILE_TYPE")

    def test_05_unknown_job_post(self):
        response = self.client.post(
            "/api/screening/batch-upload",
            data={"job_id": "no-such-job", "employer_id": "employer-1"},
            files=[pdf_upload("strong.pdf")],
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "UNKNOWN_JOB")


class TestStatusAndResults(ScreeningApiTestCase):

    def test_01_unknown_job_is_404(self):
        for path in ("", "/results", "/analytics", "/export"):
            response = self.client.get(f"/api/screening/missing-id{path}")
            self.assertEqual(response.status_code, 404, path)
            self.assertFalse(response.json()["success"])

    def test_02_results_are_ranked_and_paged(self):
        job, _ = self._seed_job([40, 95, 70, 10, 55])

        first = self.client.get(f"/api/screening/{job.id}/results?limit=2").json()
        second = self.client.get(f"/api/screening/{job.id}/results?limit=2&offset=2").json()

        self.assertEqual([r["match_percentage"] for r in first["results"]], [95, 70])
        self.assertEqual([r["rank"] for r in first["results"]], [1, 2])
        self.assertEqual(first["pagination"], {"total": 5, "limit": 2, "offset": 0, "has_more": True})
        self.assertEqual([r["match_percentage"] for r in second["results"]], [55, 40])

    def test_03_results_filter_by_category(self):
        job, _ = self._seed_job([40, 95, 70, 10, 55])

        body = self.client.get(f"/api/screening/{job.id}/results?category=strong").json()

        self.assertEqual([r["category"] for r in body["results"]], ["strong", "strong"])
        self.assertEqual(body["pagination"]["total"], 2)

    def test_04_invalid_limits_rejected(self):
        job, _ = self._seed_job([50])

        for query in ("limit=0", "limit=101", "offset=-1", "min_match=120", "status=maybe"):
            response = self.client.get(f"/api/screening/{job.id}/results?{query}")
            self.assertEqual(response.status_code, 422, query)

    def test_05_analytics(self):
        job, _ = self._seed_job([90, 60, 20, 80])

        body = self.client.get(f"/api/screening/{job.id}/analytics").json()

        self.assertEqual(body["total_screened"], 4)
        self.assertEqual(body["strong_matches"], 2)
        self.assertEqual(body["distribution"], {"strong": 50, "moderate": 25, "weak": 25})

    def test_06_list_jobs_for_employer(self):
        self._seed_job([50])
        self._seed_job([60])
        self._seed_job([70], employer_id="employer-2")

        body = self.client.get("/api/screening?employer_id=employer-1").json()

        self.assertEqual(len(body["jobs"]), 2)
        self.assertEqual(body["pagination"]["total"], 2)


class TestShortlistAndExport(ScreeningApiTestCase):

    def test_01_shortlist_then_filter(self):
        job, seeded = self._seed_job([30, 60, 90])

        response = self.client.post(
            f"/api/screening/{job.id}/shortlist",
            json={"candidate_ids": [seeded[0].id, seeded[2].id], "action": "add"},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["affected"], 2)
        body = self.client.get(f"/api/screening/{job.id}/results?status=shortlisted").json()
        self.assertEqual(sorted(r["id"] for r in body["results"]), sorted([seeded[0].id, seeded[2].id]))

    def test_02_empty_shortlist_rejected(self):
        job, _ = self._seed_job([30])

        response = self.client.post(f"/api/screening/{job.id}/shortlist", json={"candidate_ids": []})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "EMPTY_SHORTLIST")

    def test_03_export_csv(self):
        job, _ = self._seed_job([30, 90])

        response = self.client.get(f"/api/screening/{job.id}/export?format=csv")

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.headers["content-type"].startswith("text/csv"))
        self.assertIn(f"screening-{job.id}.csv", response.headers["content-disposition"])
        rows = list(csv.DictReader(io.StringIO(response.text)))
        self.assertEqual([float(r["match_percentage"]) for r in rows], [90.0, 30.0])

    def test_04_export_selected_json(self):
        job, seeded = self._seed_job([30, 90])

        response = self.client.get(f"/api/screening/{job.id}/export?format=json&ids={seeded[0].id}")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([r["id"] for r in response.json()], [seeded[0].id])

    def test_05_export_unknown_format(self):
        job, _ = self._seed_job([30])
        response = self.client.get(f"/api/screening/{job.id}/export?format=xml")
        self.assertEqual(response.status_code, 422)


class TestDelete(ScreeningApiTestCase):

    def test_01_delete_removes_job(self):
        job, _ = self._seed_job([30, 90])

        response = self.client.delete(f"/api/screening/{job.id}")

        self.assertEqual(response.json(), {"success": True, "deleted": True})
        self.assertEqual(self.client.get(f"/api/screening/{job.id}").status_code, 404)
        self.assertEqual(self.store.list_results(job.id), [])

    def test_02_delete_unknown_job(self):
        response = self.client.delete("/api/screening/missing-id")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["deleted"])


class TestHealth(unittest.TestCase):

    def test_health(self):
        from fastapi.testclient import TestClient
        from web.backend.app import app

        response = TestClient(app).get("/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")


if __name__ == "__main__":
    unittest.main()
