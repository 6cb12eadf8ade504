"""Resource logic for SignalFx charts, teams and Slack and VictorOps integrations."""

__version__ = "0.1.0"