"""
Design (iproute package)
- Purpose: Bulk kernel route installer (classifier, installer, recorder, dispatcher).
- Entry point: main.py at the project root wires these pieces together.
"""

__version__ = "1.0.0"
