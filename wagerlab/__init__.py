"""
WagerLab: Edge-Bucket Accuracy and Model Consensus Engine

Turns model-vs-market disagreement into historical accuracy lookups and
combines independent model predictions into a single consensus call.
"""

__version__ = "0.1.0"
