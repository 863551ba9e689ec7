"""Transcription job processing: dispatch, storage clients, and list utilities."""
