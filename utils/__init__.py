"""
utils - Shared utilities for P4 Structure Lens.

Subpackages:
    utils.common   - LLM client (Anthropic Claude)
    utils.parsers  - Configuration loading (GlobalConfig)
"""

__version__ = "0.3.0"
