"""
Prober Module - Black Box Interface

Purpose: Decide which containers can run the audit script
Interface: CapabilityProber.classify(refs) -> Classification
Hidden: Shell detection, utility probing, worker pool
"""

from .prober import CapabilityProber

__all__ = ["CapabilityProber"]
