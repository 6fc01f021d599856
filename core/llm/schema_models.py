"""JSON Schemas for structured LLM responses."""

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

SCREENING_ANALYSIS_SCHEMA = {
    "name": "screening_analysis",
    "strict": True,
    "schema": {
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "match_percentage": {"type": "number", "minimum": 0, "maximum": 100},
            "matched_skills": _STRING_LIST,
            "missing_skills": _STRING_LIST,
            "strengths": _STRING_LIST,
            "gaps": _STRING_LIST,
            "recommendations": _STRING_LIST,
        },
        "required": [
            "match_percentage",
            "matched_skills",
            "missing_skills",
            "strengths",
            "gaps",
            "recommendations",
        ],
    },
}
