"""HTTP surface for Trackflow actions."""
