"""Application layer: store port and the services that run on it."""
