"""Synthetic traffic generator."""

from .sim import ISim, Sim, format_log_line

__all__ = ["ISim", "Sim", "format_log_line"]
