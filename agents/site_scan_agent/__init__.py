"""
Site Scan Agent

A LangGraph-based single-call workflow: one web-search-enabled request
returning a strict-schema analysis, normalized and persisted.
"""

from agents.site_scan_agent.graph import run_site_scan


__all__ = ["run_site_scan"]
