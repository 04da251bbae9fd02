"""Pydantic models for the composition document, commands and API envelopes."""
