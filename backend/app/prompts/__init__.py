"""Prompt templates for text generation operations.

Modules:
    text_generation: Rewrite and tweet-generation prompts
"""
