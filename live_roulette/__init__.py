"""Shared real-time roulette simulation with live streaming and bet settlement."""
__version__ = '1.0.0'
