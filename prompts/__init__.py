"""
Prompt templates for LLM-assisted P4 error explanation.
"""
