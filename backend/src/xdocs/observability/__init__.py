"""Logging, request correlation, metrics and health endpoints."""
