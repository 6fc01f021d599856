"""LLM Module - scoring oracle interface and the OpenAI implementation."""
from core.llm.interfaces import ScoringOracle
from core.llm.openai_service import OpenAIScoringOracle

__all__ = ['ScoringOracle', 'OpenAIScoringOracle']
