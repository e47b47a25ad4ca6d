"""
Inventory Module - Black Box Interface

Purpose: Discover the containers of a namespace
Interface: KubectlInventory.get_containers(), listing(), render_listing()
Hidden: kubectl queries, running filter, workload deduplication

Can be replaced with a Kubernetes API client based implementation.
"""

from .inventory import InventoryError, KubectlInventory, render_listing, split_option, workload_key

__all__ = ["InventoryError", "KubectlInventory", "render_listing", "split_option", "workload_key"]
