"""Liver index calculations: pure formulas and the strategy registry."""
