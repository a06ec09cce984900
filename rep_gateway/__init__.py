"""
Representative chat gateway.

Streams guardrailed LLM answers about a single subject over Server-Sent Events.
"""

__version__ = "1.0.0"
