"""
LLM layer - Client factory and response utilities
"""

from rep_gateway.llm.client import create_llm, describe_provider, validate_ollama_model
from rep_gateway.llm.response_utils import extract_text_from_response, parse_json_object

__all__ = [
    "create_llm",
    "describe_provider",
    "validate_ollama_model",
    "extract_text_from_response",
    "parse_json_object",
]
