"""Ingestion pipeline: provider clients, classification, matching, storage."""
