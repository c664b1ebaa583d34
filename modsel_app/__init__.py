"""
Modsel App - Module Selection Resolver

Computes the minimal, consistent, deterministically ordered set of guidance
modules that apply to a target project from its observed signals, and keeps
that decision current as the signals change.
"""

__version__ = "0.1.0"
__author__ = "Modsel Team"
