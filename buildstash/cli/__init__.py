"""Typer CLI for buildstash."""
