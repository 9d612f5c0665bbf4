"""AI formula assistance: prompt completion against OpenAI or HuggingFace."""

__version__ = "0.1.0"
