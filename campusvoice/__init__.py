"""CampusVoice: campus complaint board with abuse screening and urgency clustering."""

__version__ = "0.1.0"
