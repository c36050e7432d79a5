# === NAVMAP v1 ===
# {
#   "module": "EvolutionMetadata.concurrency.__init__",
#   "purpose": "Concurrency helpers shared across EvolutionMetadata components.",
#   "sections": []
# }
# === /NAVMAP ===

"""
Concurrency helpers shared across EvolutionMetadata components.

Currently exposes :func:`create_executor` which hands the extraction scheduler
an IO-oriented thread pool sized to the batch, keeping executor construction
out of the pipeline modules.
"""

from .executors import create_executor

__all__ = ["create_executor"]
