"""CLI package for the Read Verse API"""
from .main import cli

__all__ = ['cli']
