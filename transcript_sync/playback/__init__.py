"""Playback synchronization and interaction modules.

WHY: Everything that reacts to time or to the user lives here: the
audio engine port, the active-segment synchronizer, the tap/long-press
state machine, and the controller that owns them all.

HOW: engine.py describes the consumed audio contract, synchronizer.py
maps position updates to the active segment, interaction.py handles
gestures, controller.py wires them to one transcript.

RULES:
- Single event loop; handlers run to completion
- Only the controller mutates PlaybackState and InteractionState
"""
