"""Clients for the transcription record API and object storage."""
