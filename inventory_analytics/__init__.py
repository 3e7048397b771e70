"""
Inventory Analytics Engine

Turns product stock and sales records into classified, ranked inventory
reports with rollups, period comparisons and actionable insights.
"""

__version__ = "1.0.0"
