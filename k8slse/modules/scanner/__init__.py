"""
Scanner Module - Black Box Interface

Purpose: Run the audit script in every testable container concurrently
Interface: ScanDispatcher.run(testable, collect)
Hidden: Script normalization, shell invocation per format, worker pool
"""

from .dispatcher import ScanDispatcher, normalize_script, shell_invocation

__all__ = ["ScanDispatcher", "normalize_script", "shell_invocation"]
