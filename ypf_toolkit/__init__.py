"""YPF Toolkit - Read, extract and build YU-RIS YPF archives."""

__version__ = "0.1.0"
