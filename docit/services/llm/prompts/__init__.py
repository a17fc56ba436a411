"""Prompt templates for summarization"""
from .summary_prompt import prompt_template

__all__ = ["prompt_template"]
