"""
Common building blocks for the Fitcoin link client.

Modules:
- config: client settings loaded from the environment
- envelope: wire envelope and payload models plus decoding helpers
- http: one-shot async HTTP pipeline (transport failure vs. raw response)
- result: Success / Failure operation results
"""

__all__ = [
    "config",
    "envelope",
    "http",
    "result",
]
