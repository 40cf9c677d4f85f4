"""
payroll_kernel -- shared foundation for the payroll engine.

Provides structured logging, the typed exception hierarchy, and the
Decimal helpers used by every other layer.  Nothing in this package
performs I/O or depends on the engines, config, or services layers.
"""
