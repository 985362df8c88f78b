"""Sigil - Payer key loading and generation."""
