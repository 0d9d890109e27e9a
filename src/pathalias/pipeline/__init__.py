"""Alias generation pipeline."""

from pathalias.pipeline.generator import AliasGenerator, AliasResult

__all__ = ["AliasGenerator", "AliasResult"]
