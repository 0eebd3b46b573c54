"""
Multi-Cloud Unified Overview

Aggregates cost, compute and storage summaries reported by AWS, Azure,
and GCP into one operator-facing snapshot with trends, insights and notes.
"""

__version__ = "1.0.0"
__author__ = "Cost Monitor Team"
