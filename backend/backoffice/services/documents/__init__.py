"""Numbered business documents."""
