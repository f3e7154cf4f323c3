"""LoomeroFlow internship management API."""
