"""Offline transcription pipeline: normalize, segment, recognize, filter."""
