"""
Pure measurement-quality core: models, thresholds, numeric helpers, the
sample validator, the power-quality evaluator and waveform reconstruction.

Nothing in this package performs I/O.

CHANGELOG:
- 2026-10-17: Initial creation
"""
