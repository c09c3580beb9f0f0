"""
Medication Label Scanner

Turns photographs of pill bottles and pharmacy labels into structured
medication records.
Pipeline: PREPROCESS → RECOGNIZE → PARSE
"""

__version__ = "1.0.0"
