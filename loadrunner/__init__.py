"""Periodic randomized GET driver that exercises the hello server."""
