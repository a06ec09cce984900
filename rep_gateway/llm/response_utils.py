"""
LLM response utilities for handling multi-format model outputs.

Supports both:
- Simple string content (most chat models, and every streamed chunk from them)
- Structured content blocks (models that interleave reasoning and text)
"""

import json
from typing import Any, Optional
from loguru import logger


def extract_text_from_response(response: Any) -> str:
    """
    Extract text content from an LLM response or stream chunk.

    Supports:
    - Simple string: "text here"
    - Structured blocks: [{'type': 'reasoning', ...}, {'type': 'text', 'text': '...'}]
    - LangChain AIMessage / AIMessageChunk with content attribute

    Reasoning blocks are never returned.
    """
    content = response.content if hasattr(response, "content") else response

    if not content:
        return ""

    if isinstance(content, str):
        return content

    if isinstance(content, list):
        text_parts = []
        for block in content:
            if isinstance(block, dict):
                if block.get("type") == "text" and "text" in block:
                    text_parts.append(block["text"])
                elif "text" in block and block.get("type") != "reasoning":
                    text_parts.append(block["text"])
            elif isinstance(block, str):
                text_parts.append(block)

        result = "".join(text_parts)
        if not result:
            logger.debug(f"No text blocks found in structured response: {str(content)[:200]}")
        return result

    return str(content)


def parse_json_object(text: str) -> Optional[dict]:
    """
    Parse a JSON object out of model output, tolerating markdown code fences.

    Returns None when the text is not a JSON object.
    """
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned[3:]
        if cleaned.lower().startswith("json"):
            cleaned = cleaned[4:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    cleaned = cleaned.strip()

    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None
