"""Daily VLAN usage report tracking: parsing, per-network history and alerts."""

__version__ = "0.1.0"
