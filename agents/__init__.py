"""
P4 Structure Lens
Agents Package

Primary agents:
    ErrorExplainerAgent - LLM-backed "explain this error" assistance for P4 programs.
"""

from .error_explainer_agent import ErrorExplainerAgent

__all__ = [
    'ErrorExplainerAgent',
]
