"""
Power-quality monitoring service.

Validates electrical measurement samples from a remote sensor, evaluates
PN-EN 50160 compliance, reconstructs waveforms from harmonic amplitudes and
produces daily aggregate statistics with power-quality event counters.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""
