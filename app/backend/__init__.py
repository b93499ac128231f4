"""
Credit Report Worker Backend Application.

A FastAPI service that turns PDF credit reports into structured credit
items using text extraction, OCR and OpenAI.
"""

__version__ = "1.0.0"
