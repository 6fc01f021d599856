"""
Export Service - CSV and JSON exports of a job's results.

Exports always cover the job's full, unfiltered result set in rank order,
unless an explicit id selection is given.
"""
import csv
import io
import json
import logging
from typing import Any, Dict, Iterable, List, Optional

from core.screening.errors import JobNotFoundError, ValidationError
from core.screening.models import ScreeningResultDTO
from core.screening.ranking import rank_order
from core.screening.store import ResultStore

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("csv", "json")

CONTENT_TYPES = {
    "csv": "text/csv",
    "json": "application/json",
}

# Column order used for CSV headers; extra keys are appended in first-seen order.
DEFAULT_COLUMNS = [
    "rank",
    "id",
    "screening_job_id",
    "candidate_id",
    "candidate_name",
    "resume_filename",
    "match_percentage",
    "category",
    "matched_skills",
    "missing_skills",
    "strengths",
    "improvement_areas",
    "recommendations",
    "is_shortlisted",
    "created_at",
]

LIST_SEPARATOR = "; "


def result_to_row(rank: int, result: ScreeningResultDTO) -> Dict[str, Any]:
    row = {"rank": rank, **result.to_dict()}
    row["category"] = result.category.value
    return row


def union_columns(rows: List[Dict[str, Any]]) -> List[str]:
    """Header columns: the known order first, then any extra keys as first seen."""
    seen = [c for c in DEFAULT_COLUMNS if not rows or any(c in row for row in rows)]
    for row in rows:
        for key in row:
            if key not in seen:
                seen.append(key)
    return seen


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return LIST_SEPARATOR.join(str(v) for v in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def rows_to_csv(rows: List[Dict[str, Any]]) -> str:
    """Every cell quoted, internal quotes doubled."""
    columns = union_columns(rows)
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_cell(row.get(column)) for column in columns])
    return buffer.getvalue()


class ExportService:
    def __init__(self, store: ResultStore):
        self.store = store

    @staticmethod
    def content_type(fmt: str) -> str:
        return CONTENT_TYPES[fmt]

    @staticmethod
    def filename(screening_job_id: str, fmt: str) -> str:
        return f"screening-{screening_job_id}.{fmt}"

    def export(
        self,
        screening_job_id: str,
        fmt: str = "csv",
        ids: Optional[Iterable[str]] = None,
    ) -> bytes:
        """
        Serialize a job's results.

        Args:
            screening_job_id: The screening job.
            fmt: "csv" or "json".
            ids: Optional selection of result ids or candidate ids.

        Returns:
            UTF-8 encoded CSV text or JSON array.

        Raises:
            ValidationError: Unsupported format.
            JobNotFoundError: The screening job does not exist.
        """
        fmt = (fmt or "").lower()
        if fmt not in SUPPORTED_FORMATS:
            raise ValidationError(f"Unsupported export format: {fmt}", code="INVALID_FORMAT")

        if self.store.get_job(screening_job_id) is None:
            raise JobNotFoundError(screening_job_id)

        ranked = list(enumerate(rank_order(self.store.list_results(screening_job_id)), start=1))

        selection = {str(i) for i in ids} if ids else None
        if selection:
            ranked = [
                (rank, r) for rank, r in ranked
                if r.id in selection or r.candidate_id in selection
            ]

        rows = [result_to_row(rank, result) for rank, result in ranked]
        logger.info(f"Exporting {len(rows)} results for screening job {screening_job_id} as {fmt}")

        if fmt == "csv":
            return rows_to_csv(rows).encode("utf-8")
        return json.dumps(rows, default=str).encode("utf-8")
