"""
HVC Recovery Service

Manifest reconciliation and satisfaction recovery for high-value airline
passengers: parses pasted flight manifests, reconciles passengers by name,
tracks detractor-to-promoter recoveries and aggregates airport metrics.
"""

__version__ = "1.0.0"
__author__ = "HVC Airport Operations Team"
