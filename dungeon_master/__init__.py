"""LLM Dungeon Master — narrative RPG served by a local Ollama game master."""

__version__ = "0.1.0"
