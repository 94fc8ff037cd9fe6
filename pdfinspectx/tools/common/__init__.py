"""Shared plumbing for pluggable inspection tools."""
