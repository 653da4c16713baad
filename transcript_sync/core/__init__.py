"""Core normalization, segmentation and indexing modules.

WHY: The core package is the deterministic heart of the system: the IR
dataclasses and the payload → word → segment → paragraph pipeline. The
playback layer and every formatter consume what it produces.

HOW: ir.py defines the data structures, normalizer.py detects the
payload shape, splitter.py cuts words into segments, paragraphs.py
groups words by speaker and exposes build_transcript(), index.py maps
a playback position to a segment.

RULES:
- IR dataclasses are the contract; change with care
- Nothing in core touches the audio engine or any UI state
- Every function here is pure and deterministic
"""
