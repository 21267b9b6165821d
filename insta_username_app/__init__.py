"""
Instagram Username Extractor

A FastAPI application that extracts Instagram usernames from uploaded
images using Gemini vision via OpenRouter, and lets the user review,
edit and copy the resulting profile links.
"""

__version__ = "1.0.0"
__author__ = "Instagram Username Extractor Team"
