"""Shared test fixtures: entity types, an in-memory record store, ORM models."""
