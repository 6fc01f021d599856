"""
Bulk resume screening.

Components are imported from their own modules (engine, ranking, shortlist,
export, analytics, service) to keep this package free of import cycles with
core.llm.
"""
