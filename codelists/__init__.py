"""
Norwegian Code-List Client
==========================
Hexagonal (Ports & Adapters) architecture.

Layer map
─────────────────────────────────────────────────────
  config/       All tuneable settings (base URLs, timeouts, fallback language)
  domain/       Pure business objects (models, exceptions), no I/O
  ports/        Abstract interfaces (Python Protocols)
  adapters/     Concrete implementations of each Port (SSB, Geonorge, cache)
  services/     Query building, response shaping, fallback orchestration
  interfaces/   Delivery layer: CLI
  tests/        Full test suite: unit / integration / e2e

Swapping a registry or the cache backend:
  1. Write a new adapter in adapters/ implementing the relevant Port
  2. Change the single wiring line in services/container.py
"""
__version__ = "1.0.0"
