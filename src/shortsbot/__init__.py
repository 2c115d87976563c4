"""
ShortsBot - Trend-to-Shorts pipeline.

A backend service that turns trending topics into YouTube Shorts:
- Trend collection from YouTube search
- Script composition and scene image rendering
- Optional narration with ElevenLabs
- Publishing through an OAuth-connected YouTube account
"""

__version__ = "0.1.0"
