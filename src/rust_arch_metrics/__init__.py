"""Architectural metrics (LCOM, CBO, WMC) for Rust structs."""

__version__ = "0.1.0"
