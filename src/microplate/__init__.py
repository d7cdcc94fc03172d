"""
Microplate - Laboratory Microplate Data Model

Wells, well groups, well sets, plates and plate stacks with bounds-checked
containment, plus a dispatcher that applies any descriptive statistic across
the hierarchy per well or aggregated.
"""

__version__ = "0.1.0"
