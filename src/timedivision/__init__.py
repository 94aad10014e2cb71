"""Per-facilitator time division for SessionLab agendas."""

__version__ = "0.1.0"
