"""
Brand Workflow Agent

A LangGraph-based multi-call workflow: query generation, per-query web
research and brand extraction, brand-count scoring, suggestions and
persistence.
"""

from agents.brand_workflow_agent.graph import run_brand_workflow


__all__ = ["run_brand_workflow"]
