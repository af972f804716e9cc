"""Core orchestration logic.

Subpackages:
- guard: which weeks may be mutated
- generation: starting generation jobs, polling them, reporting progress
- reconcile: folding swap / regenerate answers into a held plan
- reporting: nutrition totals for a weekly plan
"""
__all__ = ["guard", "generation", "reconcile", "reporting"]
