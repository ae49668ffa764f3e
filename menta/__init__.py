"""MENTA clinical practice API."""
