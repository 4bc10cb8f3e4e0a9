"""Lava Show chat middleware: knowledge retrieval, pricing and Gemini answers."""

__version__ = "1.0.0"
