"""Scoring module for the Power Index engine.

Implements the complete PPI scoring pipeline:
  Schema Registry → Basis derivation → Normalizer → Aggregator
  → Contribution / Sensitivity analysis → Pairwise Comparator
"""
