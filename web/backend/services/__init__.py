"""Response shaping for the screening API."""

from .presenters import (
    to_analytics_response,
    to_job_response,
    to_result_item,
    to_results_response,
)
