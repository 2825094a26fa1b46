"""Registry — the unit store and everything layered on top of it.

The registry provides:
- Units: validated records with monotonically allocated ids
- Ownership: only the current owner may update, transfer or archive
- Access grants: an advisory per-unit accessor table
- Interconnections: directed, typed relations between existing units
- Calibration: admin-only tunables feeding the analytic reads

Use ``unitreg.registry.engine.Registry`` as the entry point.
"""
